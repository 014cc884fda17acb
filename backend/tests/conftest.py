import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def fresh_defaults(monkeypatch):
    """Drop process-wide singletons so no test sees another test's cache."""
    from services import geocoding, overpass_client, query_cache

    monkeypatch.setattr(query_cache, "_default_query_cache", None)
    monkeypatch.setattr(overpass_client, "_default_poi_fetcher", None)
    monkeypatch.setattr(geocoding, "_default_geocoder", None)
    monkeypatch.setattr(geocoding, "_MIN_INTERVAL_SEC", 0.0)
