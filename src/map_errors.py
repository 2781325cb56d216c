"""Error kinds raised while building a Static Maps request.

Every validation failure has its own class so callers can tell them apart.
All of them derive from `MapError`, which is a `ValueError`; fetch failures
are runtime errors and live outside that hierarchy.
"""

from __future__ import annotations

from typing import Optional


class MapError(ValueError):
    """Base class for request validation errors."""


class InvalidSize(MapError):
    """Map width or height is zero or negative."""


class SizeExceeded(MapError):
    """Map width or height is above the API maximum."""


class InvalidPathWidth(MapError):
    """Path stroke weight is zero or negative."""


class InvalidLabel(MapError):
    """Marker label is not a single 0-9 / A-Z character."""


class EmptyRequest(MapError):
    """Neither a marker nor a path has been added."""


class UrlTooLong(MapError):
    """Assembled URL is longer than the API accepts."""


class MapTypeUnrecognized(MapError):
    """Map type is not one of the known values."""


class InvalidCoordinate(MapError):
    """Coordinate cannot be rendered, or is out of range when range checks are on."""


class MalformedMapUrl(MapError):
    """Built URL is not a syntactically valid URL."""


class MapFetchError(RuntimeError):
    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
