"""
Overpass client for nearby cafe lookups, with an in-memory result cache.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

from domain.models import DEFAULT_RADIUS_M, Coordinate, ResultSet, SearchRequest, StatusMessage
from services.errors import PoiFetchError
from services.presentation import StatusSink
from services.query_cache import QueryCache, get_default_query_cache
from services.ranking import rank
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()

CAFE_FILTER = '["amenity"="cafe"]'
QUERY_TIMEOUT_SEC = 25


def build_cafe_query(center: Coordinate, radius_m: float) -> str:
    """Overpass QL selecting cafe nodes, ways and relations around `center`.

    `out center` makes Overpass attach a representative point to ways and
    relations.
    """
    around = f"(around:{int(radius_m)},{center.lat},{center.lon})"
    selectors = "".join(f"{kind}{CAFE_FILTER}{around};" for kind in ("node", "way", "relation"))
    return f"[out:json][timeout:{QUERY_TIMEOUT_SEC}];({selectors});out center;"


def _require_objects(elements: List[Any]) -> None:
    if not all(isinstance(el, dict) for el in elements):
        raise PoiFetchError("Overpass elements contain non-object entries")


class OverpassClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url or settings.OVERPASS_URL
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT

    def fetch_elements(self, center: Coordinate, radius_m: float) -> List[dict[str, Any]]:
        """Run the cafe query and return the raw `elements` list.

        Raises PoiFetchError on transport errors, non-2xx statuses and
        undecodable bodies.
        """
        query = build_cafe_query(center, radius_m)
        try:
            resp = _session.get(self.base_url, params={"data": query}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PoiFetchError(f"Overpass request failed: {exc}") from exc
        if not resp.ok:
            raise PoiFetchError(f"Overpass request failed: {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise PoiFetchError(f"Overpass returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise PoiFetchError("Overpass returned an unexpected payload")
        elements = data.get("elements") or []
        if not isinstance(elements, list):
            raise PoiFetchError("Overpass elements is not a list")
        _require_objects(elements)
        return elements


class PoiFetcher:
    """Cache-first cafe search around a center point."""

    def __init__(
        self,
        client: Optional[OverpassClient] = None,
        cache: Optional[QueryCache] = None,
    ):
        self.client = client or OverpassClient()
        self.cache = cache if cache is not None else get_default_query_cache()

    def fetch(
        self,
        center: Coordinate,
        radius_m: float = DEFAULT_RADIUS_M,
        status: Optional[StatusSink] = None,
    ) -> ResultSet:
        key = SearchRequest(center, radius_m).cache_key
        cached = self.cache.get(key)
        if cached is not None:
            return rank(cached, center, radius_m)

        if status is not None:
            status.show_status(StatusMessage.SEARCHING.value)

        elements = self.client.fetch_elements(center, radius_m)
        _require_objects(elements)
        result_set = rank(elements, center, radius_m)
        self.cache.put(key, elements)
        logger.debug(
            "PoiFetcher.fetch: lat=%.6f lon=%.6f radius_m=%.1f got %d elements",
            center.lat,
            center.lon,
            radius_m,
            len(elements),
        )
        return result_set


_default_poi_fetcher: Optional[PoiFetcher] = None


def get_default_poi_fetcher() -> PoiFetcher:
    global _default_poi_fetcher
    if _default_poi_fetcher is None:
        _default_poi_fetcher = PoiFetcher()
    return _default_poi_fetcher
