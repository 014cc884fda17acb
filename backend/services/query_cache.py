"""
In-memory cache for Overpass results, keyed by quantized center and radius.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, List, Optional

from domain.models import Coordinate, SearchRequest
from settings import settings

logger = logging.getLogger(__name__)


def cache_key(lat: float, lon: float, radius_m: float) -> str:
    """Build the lookup key; nearby centers (~11m) with the same radius collide."""
    return SearchRequest(Coordinate(lat, lon), radius_m).cache_key


class QueryCache:
    """Raw Overpass element lists keyed by `cache_key`.

    Entries never expire. With `max_entries` > 0 the least recently used
    entry is dropped once the bound is exceeded.
    """

    def __init__(self, max_entries: int = 0):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, List[dict[str, Any]]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[List[dict[str, Any]]]:
        with self._lock:
            elements = self._entries.get(key)
            if elements is None:
                logger.debug("query cache miss %s", key)
                return None
            self._entries.move_to_end(key)
        logger.debug("query cache hit %s (%d elements)", key, len(elements))
        return list(elements)

    def put(self, key: str, elements: List[dict[str, Any]]) -> None:
        with self._lock:
            self._entries[key] = list(elements)
            self._entries.move_to_end(key)
            if self.max_entries > 0:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("query cache evicted %s", evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_default_query_cache: Optional[QueryCache] = None


def get_default_query_cache() -> QueryCache:
    global _default_query_cache
    if _default_query_cache is None:
        _default_query_cache = QueryCache(max_entries=settings.CACHE_MAX_ENTRIES)
    return _default_query_cache
