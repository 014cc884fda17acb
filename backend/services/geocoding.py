"""Forward geocoding helpers using OpenStreetMap Nominatim.

Resolves a free-text address to a single Coordinate. Requests share a simple
global rate limit so several sessions cannot hammer the public instance.
"""

from __future__ import annotations

import os
import re
import threading
import time
import logging
from typing import Any, Optional

import requests

from domain.models import Coordinate
from services.errors import AddressNotFoundError, AddressRequiredError, GeocodingFailedError
from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = float(os.getenv("NOMINATIM_MIN_INTERVAL", "1.1"))
_logged_ua = False
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT")
NOMINATIM_REFERER = os.getenv("NOMINATIM_REFERER")

FALLBACK_UA = "cafe-finder/0.1 (contact: example@example.com)"
if NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


_ua_value = NOMINATIM_USER_AGENT or FALLBACK_UA
NOMINATIM_HEADERS = {
    "User-Agent": _ua_value,
    "Accept": "application/json",
}
if NOMINATIM_REFERER:
    NOMINATIM_HEADERS["Referer"] = NOMINATIM_REFERER


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


class NominatimGeocoder:
    def __init__(
        self,
        search_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.search_url = (search_url or settings.NOMINATIM_SEARCH_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GEOCODE_TIMEOUT

    def geocode(self, address: str) -> Coordinate:
        """Resolve `address` to the best matching coordinate.

        Raises AddressRequiredError for blank input (no request is sent),
        AddressNotFoundError when Nominatim returns no match and
        GeocodingFailedError on transport or parse problems.
        """
        query = (address or "").strip()
        if not query:
            raise AddressRequiredError("address text is empty")

        global _logged_ua
        if not _logged_ua:
            logger.debug("Nominatim User-Agent: %s", _redact_email(_ua_value))
            _logged_ua = True

        params = {"format": "json", "q": query, "limit": "1"}
        try:
            resp = _throttled_get(
                self.search_url, params=params, headers=NOMINATIM_HEADERS, timeout=self.timeout
            )
            resp.raise_for_status()
            results = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Nominatim search error for %r: %s", query, exc)
            raise GeocodingFailedError(str(exc)) from exc

        if not isinstance(results, list):
            logger.warning("Nominatim search for %r returned %s, expected list", query, type(results).__name__)
            raise GeocodingFailedError("unexpected geocoder payload")
        if not results:
            raise AddressNotFoundError(query)

        best = results[0]
        try:
            coord = Coordinate(float(best["lat"]), float(best["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Nominatim search for %r returned unusable match %r", query, best)
            raise GeocodingFailedError("malformed geocoder match") from exc
        logger.debug("geocode %r -> %.6f,%.6f", query, coord.lat, coord.lon)
        return coord


_default_geocoder: Optional[NominatimGeocoder] = None


def get_default_geocoder() -> NominatimGeocoder:
    global _default_geocoder
    if _default_geocoder is None:
        _default_geocoder = NominatimGeocoder()
    return _default_geocoder
