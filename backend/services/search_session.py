"""
Search session: the state a single user's cafe search works against.

One session owns the map/list sinks it draws into and walks through
Idle -> Locating/Geocoding -> Fetching -> Ranked | Empty | Error. Every
failure is caught here and turned into a status line; nothing propagates to
the caller.

Searches may overlap when the HTTP layer handles two requests for the same
session concurrently. Each search takes a generation number and only the most
recently started one is allowed to render.
"""
from __future__ import annotations

import logging
import threading
from typing import List, Optional

from domain.models import Coordinate, ResultSet, SearchState, StatusMessage
from services.errors import (
    AddressNotFoundError,
    AddressRequiredError,
    GeocodingError,
    LocationError,
    PoiFetchError,
)
from services.geocoding import NominatimGeocoder, get_default_geocoder
from services.location import LocationProvider
from services.overpass_client import PoiFetcher, get_default_poi_fetcher
from services.presentation import (
    ListPanelSink,
    MapDisplaySink,
    Marker,
    StatusSink,
    ViewState,
    build_entry,
    build_marker,
)
from settings import settings

logger = logging.getLogger(__name__)

SEARCH_ZOOM = 15
INITIAL_ZOOM = 13


class SearchSession:
    def __init__(
        self,
        status: StatusSink,
        panel: ListPanelSink,
        map_display: MapDisplaySink,
        fetcher: Optional[PoiFetcher] = None,
        geocoder: Optional[NominatimGeocoder] = None,
        default_radius_m: Optional[float] = None,
        default_center: Optional[Coordinate] = None,
    ):
        self.status = status
        self.panel = panel
        self.map = map_display
        self.fetcher = fetcher or get_default_poi_fetcher()
        self.geocoder = geocoder or get_default_geocoder()
        self.default_radius_m = default_radius_m or settings.DEFAULT_RADIUS_M
        self.default_center = default_center or Coordinate(settings.DEFAULT_LAT, settings.DEFAULT_LON)
        self.state = SearchState.IDLE
        self.results: Optional[ResultSet] = None
        self._markers: List[Marker] = []
        self._generation = 0
        self._lock = threading.RLock()

    # -- bookkeeping -----------------------------------------------------

    def _begin(self, state: SearchState) -> int:
        with self._lock:
            self._generation += 1
            self.state = state
            return self._generation

    def _is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def _set_state(self, token: int, state: SearchState) -> bool:
        with self._lock:
            if token != self._generation:
                return False
            self.state = state
            return True

    def _report(self, token: int, state: SearchState, message: StatusMessage) -> None:
        if self._set_state(token, state):
            self.status.show_status(message.value)
        else:
            logger.info("dropping stale status %r from superseded search %d", message.value, token)

    def _radius(self, radius_m: Optional[float]) -> float:
        return radius_m or self.default_radius_m

    def _recenter(self, center: Coordinate, zoom: int) -> None:
        self.map.set_view(center, zoom)
        self.map.set_center_marker(center)

    def _clear_results(self) -> None:
        self.map.clear_markers()
        self.panel.clear_entries()
        self._markers = []
        self.results = None

    # -- operations ------------------------------------------------------

    def search_at(
        self,
        center: Coordinate,
        radius_m: Optional[float] = None,
        token: Optional[int] = None,
    ) -> Optional[ResultSet]:
        """Fetch, rank and render cafes around `center`.

        Returns the ResultSet that was rendered, or None when the search
        failed or was superseded.
        """
        if token is None:
            token = self._begin(SearchState.FETCHING)
        elif not self._set_state(token, SearchState.FETCHING):
            return None
        radius = self._radius(radius_m)

        try:
            result_set = self.fetcher.fetch(center, radius, status=self.status)
        except PoiFetchError as exc:
            logger.warning("cafe search at %.6f,%.6f r=%s failed: %s", center.lat, center.lon, radius, exc)
            self._report(token, SearchState.ERROR, StatusMessage.FETCH_FAILED)
            return None

        # check and draw atomically so overlapping searches cannot interleave markers
        with self._lock:
            if token != self._generation:
                logger.info("discarding %d results from superseded search %d", len(result_set), token)
                return None
            self._render(token, result_set)
        return result_set

    def _render(self, token: int, result_set: ResultSet) -> None:
        self._clear_results()
        self.results = result_set
        if result_set.is_empty:
            self._report(token, SearchState.EMPTY, StatusMessage.NO_RESULTS)
            return

        entries = []
        for idx, place in enumerate(result_set):
            marker = build_marker(place)
            self.map.add_marker(marker)
            self._markers.append(marker)
            entries.append(build_entry(idx, place))
        self.panel.show_entries(entries)
        self._set_state(token, SearchState.RANKED)

    def find_address(self, address: str, radius_m: Optional[float] = None) -> Optional[ResultSet]:
        """Geocode free text, recenter on the match and search there."""
        token = self._begin(SearchState.GEOCODING)
        query = (address or "").strip()
        if not query:
            self._report(token, SearchState.IDLE, StatusMessage.ADDRESS_REQUIRED)
            return None

        self.status.show_status(StatusMessage.GEOCODING.value)
        try:
            center = self.geocoder.geocode(query)
        except AddressRequiredError:
            self._report(token, SearchState.IDLE, StatusMessage.ADDRESS_REQUIRED)
            return None
        except AddressNotFoundError:
            self._report(token, SearchState.ERROR, StatusMessage.ADDRESS_NOT_FOUND)
            return None
        except GeocodingError as exc:
            logger.warning("geocoding %r failed: %s", query, exc)
            self._report(token, SearchState.ERROR, StatusMessage.GEOCODING_FAILED)
            return None

        if not self._is_current(token):
            return None
        self._recenter(center, SEARCH_ZOOM)
        return self.search_at(center, radius_m, token=token)

    def locate(self, provider: LocationProvider, radius_m: Optional[float] = None) -> Optional[ResultSet]:
        """Search around the device position."""
        token = self._begin(SearchState.LOCATING)
        if not provider.supported:
            self._report(token, SearchState.IDLE, StatusMessage.LOCATION_UNSUPPORTED)
            return None

        self.status.show_status(StatusMessage.LOCATING.value)
        try:
            center = provider.get_current_position(timeout=settings.LOCATE_TIMEOUT_SEC)
        except LocationError as exc:
            logger.warning("location request failed: %s", exc)
            self._report(token, SearchState.ERROR, StatusMessage.LOCATION_FAILED)
            return None

        if not self._is_current(token):
            return None
        self._recenter(center, SEARCH_ZOOM)
        return self.search_at(center, radius_m, token=token)

    def initial_load(self, provider: LocationProvider, radius_m: Optional[float] = None) -> Optional[ResultSet]:
        """Page-load attempt: try the device position, else show the default center."""
        token = self._begin(SearchState.LOCATING)
        if not provider.supported:
            self._recenter(self.default_center, INITIAL_ZOOM)
            self._report(token, SearchState.IDLE, StatusMessage.INITIAL_UNSUPPORTED)
            return None

        try:
            center = provider.get_current_position(timeout=settings.INITIAL_LOCATE_TIMEOUT_SEC)
        except LocationError as exc:
            logger.info("geolocation denied or failed, using default center: %s", exc)
            if self._is_current(token):
                self._recenter(self.default_center, INITIAL_ZOOM)
            self._report(token, SearchState.IDLE, StatusMessage.INITIAL_FALLBACK)
            return None

        if not self._is_current(token):
            return None
        self._recenter(center, INITIAL_ZOOM)
        return self.search_at(center, radius_m, token=token)

    def clear(self) -> None:
        with self._lock:
            token = self._begin(SearchState.IDLE)
            self._clear_results()
            self._report(token, SearchState.IDLE, StatusMessage.CLEARED)

    def select(self, index: int) -> Marker:
        """Pan to the result at `index` and open its popup."""
        if index < 0 or index >= len(self._markers):
            raise IndexError(f"no result at index {index}")
        marker = self._markers[index]
        self.map.pan_to(marker.coordinate)
        self.map.open_popup(index)
        return marker


def create_session(view: Optional[ViewState] = None, **kwargs) -> SearchSession:
    """Session drawing into a single recording ViewState."""
    view = view or ViewState()
    return SearchSession(status=view, panel=view, map_display=view, **kwargs)
