"""Shared value types and formatting helpers for Static Maps URLs.

- `MapType` / `MarkerSize`: closed sets of API options; `wire_name` is the one
  place an enum member is turned into its lowercase query-string value.
- `Color`: plain RGBA value. The URL layer only needs `hex24()` (and
  `hex32()` for paths that keep alpha).
- Coordinate helpers: half-up rounding to a fixed number of decimals and
  default float rendering (no exponent, no locale).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Any, Tuple, Type, TypeVar

from map_errors import InvalidCoordinate, MapTypeUnrecognized  # type: ignore

# URL-escaped "|" as the Static Maps API expects it inside parameter values.
PIPE = "%7C"
COMMA = ","

E = TypeVar("E", bound=Enum)


class MapType(Enum):
    ROADMAP = "roadmap"  # API default; never emitted
    SATELLITE = "satellite"
    TERRAIN = "terrain"
    HYBRID = "hybrid"


class MarkerSize(Enum):
    TINY = "tiny"
    MID = "mid"
    SMALL = "small"
    NORMAL = "normal"  # API default; never emitted


def wire_name(member: Enum) -> str:
    """Return the lowercase name used for `member` in the query string."""
    return str(member.value)


def _parse_enum(enum_cls: Type[E], value: Any, error_cls: Type[Exception]) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for member in enum_cls:
            if member.value == key:
                return member
    raise error_cls(f"Unrecognized {enum_cls.__name__} value: {value!r}")


def parse_map_type(value: Any) -> MapType:
    return _parse_enum(MapType, value, MapTypeUnrecognized)


def parse_marker_size(value: Any) -> MarkerSize:
    return _parse_enum(MarkerSize, value, ValueError)


# ------------------------------
# Color
# ------------------------------


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue", "alpha"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= 255:
                raise ValueError(f"Color.{name} must be an int in 0..255, got {v!r}")

    @classmethod
    def from_argb(cls, argb: int) -> "Color":
        argb &= 0xFFFFFFFF
        return cls(
            red=(argb >> 16) & 0xFF,
            green=(argb >> 8) & 0xFF,
            blue=argb & 0xFF,
            alpha=(argb >> 24) & 0xFF,
        )

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse `#RRGGBB`, `#RRGGBBAA`, `0xRRGGBB` or `0xRRGGBBAA`."""
        s = text.strip()
        if s.lower().startswith("0x"):
            s = s[2:]
        elif s.startswith("#"):
            s = s[1:]
        if len(s) not in (6, 8):
            raise ValueError(f"Invalid hex color: {text!r}")
        try:
            raw = int(s, 16)
        except ValueError as exc:
            raise ValueError(f"Invalid hex color: {text!r}") from exc
        if len(s) == 6:
            return cls((raw >> 16) & 0xFF, (raw >> 8) & 0xFF, raw & 0xFF)
        return cls((raw >> 24) & 0xFF, (raw >> 16) & 0xFF, (raw >> 8) & 0xFF, raw & 0xFF)

    @classmethod
    def coerce(cls, value: Any) -> "Color":
        """Accept a Color, an (r, g, b[, a]) tuple, an ARGB int or a hex string."""
        if isinstance(value, Color):
            return value
        if isinstance(value, bool):
            raise TypeError(f"Cannot interpret {value!r} as a color")
        if isinstance(value, int):
            return cls.from_argb(value)
        if isinstance(value, str):
            return cls.from_hex(value)
        if isinstance(value, (tuple, list)) and len(value) in (3, 4):
            return cls(*(int(c) for c in value))
        raise TypeError(f"Cannot interpret {value!r} as a color")

    @property
    def argb(self) -> int:
        return (self.alpha << 24) | (self.red << 16) | (self.green << 8) | self.blue

    def hex24(self) -> str:
        """`0xrrggbb`; the alpha byte is masked out."""
        return f"0x{self.argb & 0xFFFFFF:06x}"

    def hex32(self) -> str:
        """`0xrrggbbaa`; the API reads alpha from the last two digits."""
        return f"0x{self.argb & 0xFFFFFF:06x}{self.alpha:02x}"


# ------------------------------
# Coordinates
# ------------------------------


def round_coordinate(value: float, places: int = 2) -> float:
    """Round half-up (on the magnitude) to `places` decimals.

    Works on the shortest decimal form of the float, so 1.005 -> 1.01 and
    -1.005 -> -1.01. Negative zero comes back as 0.0.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCoordinate(f"Coordinate must be a number, got {value!r}")
    f = float(value)
    if not math.isfinite(f):
        raise InvalidCoordinate(f"Coordinate must be finite, got {value!r}")
    with localcontext() as ctx:
        ctx.prec = 400
        rounded = Decimal(repr(f)).quantize(
            Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP
        )
    return float(rounded) + 0.0


def format_number(value: float) -> str:
    s = repr(float(value))
    if "e" in s or "E" in s:
        s = format(Decimal(s), "f")
        if "." not in s:
            s += ".0"
    return s


def format_coordinate(lat: float, lng: float) -> str:
    return format_number(lat) + COMMA + format_number(lng)


Coordinate = Tuple[float, float]
