"""
Exceptions raised by the cafe finder services.

Services raise these; the search session catches them at its boundary and
turns them into status lines.
"""


class CafeFinderError(Exception):
    """Base class for all cafe finder failures."""


class PoiFetchError(CafeFinderError):
    """The POI query could not be completed (transport, status or parse)."""


class GeocodingError(CafeFinderError):
    pass


class AddressRequiredError(GeocodingError):
    """Raised before any request when the address text is blank."""


class AddressNotFoundError(GeocodingError):
    pass


class GeocodingFailedError(GeocodingError):
    pass


class LocationError(CafeFinderError):
    """The device position could not be obtained."""


class LocationUnsupportedError(LocationError):
    pass
