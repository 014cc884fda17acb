"""
Device location providers.

On the server the device position always comes from the client, so the
providers here wrap whatever the browser reported.
"""
from __future__ import annotations

from typing import Optional, Protocol

from domain.models import Coordinate
from services.errors import LocationError, LocationUnsupportedError


class LocationProvider(Protocol):
    supported: bool

    def get_current_position(self, timeout: float) -> Coordinate:
        """Return the current position or raise LocationError."""
        ...


class StaticLocationProvider:
    """A position (or failure) the client already resolved."""

    supported = True

    def __init__(self, coordinate: Optional[Coordinate] = None, error: Optional[str] = None):
        if coordinate is None and error is None:
            raise ValueError("either a coordinate or an error is required")
        self.coordinate = coordinate
        self.error = error

    def get_current_position(self, timeout: float) -> Coordinate:
        if self.coordinate is None:
            raise LocationError(self.error or "position unavailable")
        return self.coordinate


class UnsupportedLocationProvider:
    supported = False

    def get_current_position(self, timeout: float) -> Coordinate:
        raise LocationUnsupportedError("geolocation not supported")
