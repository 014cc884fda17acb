import os

# Basic settings helper to read environment configuration.


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


class Settings:
    def __init__(self) -> None:
        self.OVERPASS_URL: str = os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
        self.NOMINATIM_SEARCH_URL: str = os.getenv(
            "NOMINATIM_SEARCH_URL", "https://nominatim.openstreetmap.org/search"
        )
        self.DEFAULT_RADIUS_M: float = _as_float(os.getenv("CAFE_DEFAULT_RADIUS_M"), 1500.0)
        self.HTTP_TIMEOUT: float = _as_float(os.getenv("CAFE_HTTP_TIMEOUT"), 30.0)
        self.GEOCODE_TIMEOUT: float = _as_float(os.getenv("CAFE_GEOCODE_TIMEOUT"), 10.0)
        # 0 keeps every entry for the life of the process
        self.CACHE_MAX_ENTRIES: int = _as_int(os.getenv("CAFE_CACHE_MAX_ENTRIES"), 0)
        self.DEFAULT_LAT: float = _as_float(os.getenv("CAFE_DEFAULT_LAT"), 19.0760)
        self.DEFAULT_LON: float = _as_float(os.getenv("CAFE_DEFAULT_LON"), 72.8777)
        self.LOCATE_TIMEOUT_SEC: float = _as_float(os.getenv("CAFE_LOCATE_TIMEOUT"), 10.0)
        self.INITIAL_LOCATE_TIMEOUT_SEC: float = _as_float(os.getenv("CAFE_INITIAL_LOCATE_TIMEOUT"), 8.0)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
