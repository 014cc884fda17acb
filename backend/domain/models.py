"""
Core domain models for the cafe finder.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

DEFAULT_RADIUS_M = 1500
UNNAMED_CAFE = "Unnamed Cafe"


class SearchState(str, Enum):
    """Where a search session currently is."""
    IDLE = "idle"
    LOCATING = "locating"
    GEOCODING = "geocoding"
    FETCHING = "fetching"
    RANKED = "ranked"
    EMPTY = "empty"
    ERROR = "error"


class StatusMessage(str, Enum):
    """User-visible status lines shown in place of the results panel."""
    SEARCHING = "Searching for cafes..."
    FETCH_FAILED = "Error fetching data. Try again later."
    NO_RESULTS = "No cafes found in this area. Try increasing the radius."
    ADDRESS_REQUIRED = "Type an address or use My Location."
    GEOCODING = "Geocoding address..."
    ADDRESS_NOT_FOUND = "Address not found"
    GEOCODING_FAILED = "Geocoding failed."
    LOCATING = "Requesting location..."
    LOCATION_UNSUPPORTED = "Geolocation not supported."
    LOCATION_FAILED = "Failed to get location. You can type an address instead."
    INITIAL_FALLBACK = "Allow location or type an address and press Find."
    INITIAL_UNSUPPORTED = "Geolocation not supported. Type an address and press Find."
    CLEARED = "Results cleared."


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair."""
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"longitude out of range: {self.lon}")


@dataclass(frozen=True)
class SearchRequest:
    """A single search: where to look and how far."""
    center: Coordinate
    radius_m: float = DEFAULT_RADIUS_M

    def __post_init__(self) -> None:
        # the query and cache key use whole meters
        if self.radius_m < 1:
            raise ValueError(f"radius must be at least 1 m: {self.radius_m}")

    @property
    def cache_key(self) -> str:
        # 4 decimals is roughly an 11 m grid
        return f"{self.center.lat:.4f}:{self.center.lon:.4f}:{int(self.radius_m)}"


@dataclass
class PlaceResult:
    element_type: str  # "node", "way" or "relation"
    element_id: int
    coordinate: Coordinate
    distance_m: float
    name: str = UNNAMED_CAFE
    street: Optional[str] = None  # addr:street
    opening_hours: Optional[str] = None
    tags: Dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> str:
        return f"{self.element_type}/{self.element_id}"


@dataclass(frozen=True)
class ResultSet:
    """Places ordered ascending by distance from `center`."""
    center: Coordinate
    radius_m: float
    places: Tuple[PlaceResult, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.places

    def __len__(self) -> int:
        return len(self.places)

    def __iter__(self):
        return iter(self.places)

    def names(self) -> list[str]:
        return [p.name for p in self.places]
