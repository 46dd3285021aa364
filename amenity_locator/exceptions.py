from __future__ import annotations

from enum import Enum
from typing import Optional


class GeolocationErrorKind(int, Enum):
    """Failure codes reported by the browser Geolocation API."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    @property
    def message(self) -> str:
        return GEOLOCATION_MESSAGES[self]


GEOLOCATION_MESSAGES: dict[GeolocationErrorKind, str] = {
    GeolocationErrorKind.PERMISSION_DENIED: "Permission denied",
    GeolocationErrorKind.POSITION_UNAVAILABLE: "Position unavailable",
    GeolocationErrorKind.TIMEOUT: "Request timeout",
}


class LocatorError(Exception):
    """Base error for the amenity locator."""


class QueryFailed(LocatorError):
    """The Overpass request failed: network error, HTTP error status or unparsable body."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class GeolocationError(LocatorError):
    def __init__(self, kind: GeolocationErrorKind) -> None:
        super().__init__(kind.message)
        self.kind = kind

    @property
    def alert_text(self) -> str:
        return f"Error: {self.kind.message}"
