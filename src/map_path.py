"""Polyline values and their `path=` query fragments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from map_errors import InvalidPathWidth  # type: ignore
from map_types import PIPE, Color, Coordinate, format_coordinate  # type: ignore


def check_weight(weight: Any) -> int:
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise InvalidPathWidth(f"Path width must be an integer, got {weight!r}")
    if weight < 1:
        raise InvalidPathWidth(f"Invalid (non-positive) path width: {weight}")
    return weight


@dataclass(frozen=True)
class PathStyle:
    """Stroke options. The API draws 5px when `weight` is absent."""

    weight: Optional[int] = None
    color: Optional[Color] = None

    def to_fragment(self, with_alpha: bool = False) -> str:
        out = ""
        if self.weight is not None:
            out += f"weight:{self.weight}" + PIPE
        if self.color is not None:
            hex_color = self.color.hex32() if with_alpha else self.color.hex24()
            out += "color:" + hex_color + PIPE
        return out


@dataclass(frozen=True)
class Path:
    points: Tuple[Coordinate, ...]
    style: Optional[PathStyle] = None

    def to_fragment(self, with_alpha: bool = False) -> str:
        prefix = self.style.to_fragment(with_alpha) if self.style is not None else ""
        return prefix + PIPE.join(format_coordinate(lat, lng) for lat, lng in self.points)

    def __str__(self) -> str:
        return self.to_fragment()
