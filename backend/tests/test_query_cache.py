import pytest

from domain.models import Coordinate, SearchRequest
from services.query_cache import QueryCache, cache_key


def test_nearby_centers_share_a_key():
    assert cache_key(19.07601, 72.87771, 1500) == cache_key(19.07604, 72.87774, 1500)


def test_key_format():
    assert cache_key(19.076, 72.8777, 1500) == "19.0760:72.8777:1500"


def test_different_radius_changes_key():
    assert cache_key(19.076, 72.8777, 1500) != cache_key(19.076, 72.8777, 1000)


def test_radius_is_truncated_to_integer():
    req = SearchRequest(Coordinate(1.0, 2.0), 1500.7)
    assert req.cache_key.endswith(":1500")


def test_non_positive_radius_rejected():
    with pytest.raises(ValueError):
        SearchRequest(Coordinate(1.0, 2.0), 0)


def test_get_returns_none_on_miss():
    cache = QueryCache()
    assert cache.get("nope") is None


def test_put_then_get_round_trips_elements():
    cache = QueryCache()
    elements = [{"type": "node", "id": 1, "lat": 1.0, "lon": 2.0}]
    cache.put("k", elements)
    assert cache.get("k") == elements
    assert "k" in cache
    assert len(cache) == 1


def test_unbounded_by_default():
    cache = QueryCache()
    for i in range(500):
        cache.put(f"k{i}", [])
    assert len(cache) == 500
    assert cache.get("k0") == []


def test_bounded_cache_drops_least_recently_used():
    cache = QueryCache(max_entries=2)
    cache.put("a", [])
    cache.put("b", [])
    cache.get("a")
    cache.put("c", [])
    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache


def test_sub_meter_radius_rejected():
    with pytest.raises(ValueError):
        SearchRequest(Coordinate(1.0, 2.0), 0.5)
