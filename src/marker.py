"""Marker values and their `markers=` query fragments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from map_errors import InvalidLabel  # type: ignore
from map_types import PIPE, Color, MarkerSize, format_coordinate, parse_marker_size, wire_name  # type: ignore

_LABEL_CHARS = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def normalize_label(label: Any) -> str:
    """Return `label` upper-cased if it is a single 0-9 / A-Z character.

    Lowercase ASCII letters are accepted and converted; anything else raises
    `InvalidLabel`.
    """
    if not isinstance(label, str) or len(label) != 1:
        raise InvalidLabel(
            f"Invalid label {label!r}, must be a single letter A-Z or a digit 0-9"
        )
    up = label.upper()
    if up not in _LABEL_CHARS:
        raise InvalidLabel(
            f"Invalid label {label!r}, must be a single letter A-Z or a digit 0-9"
        )
    return up


@dataclass(frozen=True)
class MarkerStyle:
    color: Optional[Color] = None
    size: Optional[MarkerSize] = None
    label: Optional[str] = None

    @classmethod
    def create(
        cls,
        color: Any = None,
        size: Any = None,
        label: Any = None,
    ) -> "MarkerStyle":
        return cls(
            color=Color.coerce(color) if color is not None else None,
            size=parse_marker_size(size) if size is not None else None,
            label=normalize_label(label) if label is not None else None,
        )

    def to_fragment(self) -> str:
        out = ""
        if self.color is not None:
            out += "color:" + self.color.hex24() + PIPE
            # Size only travels together with a color.
            if self.size is not None and self.size is not MarkerSize.NORMAL:
                out += "size:" + wire_name(self.size) + PIPE
            if self.label is not None:
                out += "label:" + self.label + PIPE
        elif self.label is not None:
            out += "label:" + self.label + PIPE
        return out


@dataclass(frozen=True)
class Marker:
    lat: float
    lng: float
    style: Optional[MarkerStyle] = None

    def to_fragment(self) -> str:
        prefix = self.style.to_fragment() if self.style is not None else ""
        return prefix + format_coordinate(self.lat, self.lng)

    def __str__(self) -> str:
        return self.to_fragment()
