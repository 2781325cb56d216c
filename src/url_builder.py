"""Google Static Maps API URL builder.

Collects markers, paths and map options, then assembles a Static Maps URL.
It does NOT call any Google API unless `get_map` is used; `build()` is pure
string work and can be called any number of times.

Supports color, size and label of markers as well as weight and color of
paths (no path opacity). Repeated marker styling is emitted once per marker;
the URL is not optimized for large maps.

References:
- Static Maps: https://developers.google.com/maps/documentation/maps-static/start
"""

from __future__ import annotations

import argparse
import functools
from typing import Any, Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests

import config_loader  # type: ignore
import map_fetch  # type: ignore
from map_errors import (  # type: ignore
    EmptyRequest,
    InvalidCoordinate,
    InvalidSize,
    MalformedMapUrl,
    MapError,
    MapTypeUnrecognized,
    SizeExceeded,
    UrlTooLong,
)
from map_path import Path, PathStyle, check_weight  # type: ignore
from map_types import (  # type: ignore
    Color,
    Coordinate,
    MapType,
    parse_map_type,
    round_coordinate,
    wire_name,
)
from marker import Marker, MarkerStyle  # type: ignore

# Fixed by the API; only change if Google changes them.
MAX_X_SIZE = 640  # px
MAX_Y_SIZE = 640  # px
MAX_URL_LENGTH = 2048  # characters
MAX_LAT_LONG_DECIMAL = 2

URL_PREFIX = "https://maps.googleapis.com/maps/api/staticmap?&sensor=false"
MAP_SIZE_PREFIX = "&size="
MAP_TYPE_PREFIX = "&maptype="
MARKER_PREFIX = "&markers="
PATH_PREFIX = "&path="


class MapRequestBuilder:
    """Mutable request state; `build()` projects it into a URL.

    Not thread-safe: callers sharing an instance must serialize mutations.
    """

    def __init__(
        self,
        max_width: int = MAX_X_SIZE,
        max_height: int = MAX_Y_SIZE,
        max_url_length: int = MAX_URL_LENGTH,
        decimals: int = MAX_LAT_LONG_DECIMAL,
        validate_ranges: bool = False,
        path_color_alpha: bool = False,
    ) -> None:
        self.max_width = max_width
        self.max_height = max_height
        self.max_url_length = max_url_length
        self.decimals = decimals
        self.validate_ranges = validate_ranges
        self.path_color_alpha = path_color_alpha

        self._map_size = f"{max_width}x{max_height}"
        self._map_type = MapType.HYBRID
        self._markers: List[Marker] = []
        self._paths: List[Path] = []

    @classmethod
    def from_config(cls, cfg: config_loader.Config) -> "MapRequestBuilder":
        b = cls(
            max_width=cfg.limits.max_width,
            max_height=cfg.limits.max_height,
            max_url_length=cfg.limits.max_url_length,
            decimals=cfg.limits.coordinate_decimals,
            validate_ranges=cfg.limits.validate_coordinate_ranges,
            path_color_alpha=cfg.serialization.path_color_alpha,
        )
        b.set_size(cfg.map_defaults.width, cfg.map_defaults.height)
        b.set_map_type(cfg.map_defaults.map_type)
        return b

    # ------------------------------
    # Read-only views
    # ------------------------------

    @property
    def size(self) -> str:
        return self._map_size

    @property
    def map_type(self) -> MapType:
        return self._map_type

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return tuple(self._markers)

    @property
    def paths(self) -> Tuple[Path, ...]:
        return tuple(self._paths)

    # ------------------------------
    # Map options
    # ------------------------------

    def set_size(self, x: int, y: int) -> None:
        if x < 1 or y < 1:
            raise InvalidSize(f"Negative/zero map size invalid: {x}x{y}")
        if x > self.max_width or y > self.max_height:
            raise SizeExceeded(
                f"Map size {x}x{y} exceeds the "
                f"{self.max_width}x{self.max_height} pixel maximum"
            )
        self._map_size = f"{int(x)}x{int(y)}"

    def set_map_type(self, map_type: Any) -> None:
        self._map_type = parse_map_type(map_type)

    # ------------------------------
    # Markers
    # ------------------------------

    def add_simple_marker(self, lat: float, lng: float) -> None:
        lat, lng = self._coordinate(lat, lng)
        self._markers.append(Marker(lat, lng))

    def add_marker(
        self,
        lat: float,
        lng: float,
        color: Any = None,
        size: Any = None,
        label: Optional[str] = None,
    ) -> None:
        """Add a styled marker.

        `color` alpha is ignored for markers. `label` must be 0-9 or a letter
        (lowercase is upper-cased); otherwise `InvalidLabel` is raised and the
        marker is not added. The API does not draw labels on tiny/mid markers,
        but the label is still sent.
        """
        style = MarkerStyle.create(color=color, size=size, label=label)
        lat, lng = self._coordinate(lat, lng)
        self._markers.append(Marker(lat, lng, style))

    # ------------------------------
    # Paths
    # ------------------------------

    def add_simple_path(
        self, lat_a: float, lng_a: float, lat_b: float, lng_b: float
    ) -> None:
        a = self._coordinate(lat_a, lng_a)
        b = self._coordinate(lat_b, lng_b)
        self._paths.append(Path((a, b)))

    def add_path(
        self,
        points: Sequence[Sequence[float]],
        weight: Optional[int] = None,
        color: Any = None,
    ) -> None:
        """Add a path through `points` (lat, lng pairs, extra values ignored).

        The caller's sequence is not modified; the stored path holds rounded
        copies. Fewer than two points is passed through to the API as is.
        """
        style = None
        if weight is not None or color is not None:
            style = PathStyle(
                weight=check_weight(weight) if weight is not None else None,
                color=Color.coerce(color) if color is not None else None,
            )
        coords = tuple(self._point(p) for p in points)
        self._paths.append(Path(coords, style))

    # ------------------------------
    # URL assembly
    # ------------------------------

    def _map_type_fragment(self) -> str:
        mt = self._map_type
        if mt is MapType.ROADMAP:
            return ""
        if mt in (MapType.SATELLITE, MapType.TERRAIN, MapType.HYBRID):
            return MAP_TYPE_PREFIX + wire_name(mt)
        raise MapTypeUnrecognized(f"Invalid map type: {mt!r}")

    def build(self) -> str:
        """Return the Static Maps URL for the current state.

        Raises `EmptyRequest` when there is nothing to draw and `UrlTooLong`
        when the result exceeds `max_url_length`.
        """
        map_type = self._map_type_fragment()
        size = MAP_SIZE_PREFIX + self._map_size

        if not self._markers and not self._paths:
            raise EmptyRequest(
                "Minimum requirements not met for URL/map generation. "
                "Check that at least one marker or path is set"
            )

        markers = "".join(MARKER_PREFIX + m.to_fragment() for m in self._markers)
        paths = "".join(
            PATH_PREFIX + p.to_fragment(with_alpha=self.path_color_alpha)
            for p in self._paths
        )
        url = URL_PREFIX + size + map_type + markers + paths

        if len(url) > self.max_url_length:
            raise UrlTooLong(
                f"Generated URL is {len(url)} characters, longer than the "
                f"{self.max_url_length} character maximum"
            )
        return url

    get_url = build

    def get_map(self, fetch: Optional[Callable[[str], Any]] = None) -> Any:
        """Build the URL and hand it to `fetch` (default: `map_fetch.fetch_map_image`)."""
        url = self.build()
        check_url(url)
        fetch = fetch or map_fetch.fetch_map_image
        return fetch(url)

    # ------------------------------
    # Helpers
    # ------------------------------

    def _coordinate(self, lat: float, lng: float) -> Coordinate:
        lat_r = round_coordinate(lat, self.decimals)
        lng_r = round_coordinate(lng, self.decimals)
        if self.validate_ranges:
            if not -90.0 <= lat_r <= 90.0:
                raise InvalidCoordinate(f"Latitude {lat} outside [-90, 90]")
            if not -180.0 <= lng_r <= 180.0:
                raise InvalidCoordinate(f"Longitude {lng} outside [-180, 180]")
        return lat_r, lng_r

    def _point(self, point: Sequence[float]) -> Coordinate:
        try:
            lat, lng = point[0], point[1]
        except (IndexError, KeyError, TypeError) as e:
            raise InvalidCoordinate(f"Path point must be a (lat, lng) pair: {point!r}") from e
        return self._coordinate(lat, lng)


def check_url(url: str) -> None:
    """Raise `MalformedMapUrl` unless `url` is an absolute http(s) URL."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise MalformedMapUrl(f"Not an absolute http(s) URL: {url[:80]}")
    try:
        requests.models.PreparedRequest().prepare_url(url, None)
    except requests.exceptions.RequestException as e:
        raise MalformedMapUrl(f"Invalid URL: {e}") from e


# ------------------------------
# CLI
# ------------------------------


def _parse_marker_arg(text: str) -> Tuple[float, float, Optional[str], Optional[str], Optional[str]]:
    """`lat,lng[,color[,size[,label]]]`; empty fields mean "not set"."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) < 2 or len(parts) > 5:
        raise ValueError(f"Invalid --marker {text!r}; expected lat,lng[,color[,size[,label]]]")
    lat, lng = float(parts[0]), float(parts[1])
    extra: List[Optional[str]] = [p or None for p in parts[2:]]
    extra += [None] * (3 - len(extra))
    return lat, lng, extra[0], extra[1], extra[2]


def _parse_path_arg(text: str) -> List[Tuple[float, float]]:
    """`lat,lng;lat,lng;...`"""
    points = []
    for chunk in text.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        lat_s, sep, lng_s = chunk.partition(",")
        if not sep:
            raise ValueError(f"Invalid --path point {chunk!r}; expected lat,lng")
        points.append((float(lat_s), float(lng_s)))
    return points


def _parse_size_arg(text: str) -> Tuple[int, int]:
    w, sep, h = text.lower().partition("x")
    if not sep:
        raise ValueError(f"Invalid --size {text!r}; expected WxH")
    return int(w), int(h)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Build a Google Static Maps URL (optionally download the image)."
    )
    parser.add_argument("--config", required=False, help="Path to config/config.yml")
    parser.add_argument("--size", required=False, help="Map size WxH (default 640x640)")
    parser.add_argument(
        "--maptype",
        required=False,
        choices=[m.value for m in MapType],
        help="Map type (default: hybrid)",
    )
    parser.add_argument(
        "--marker",
        action="append",
        default=[],
        help="Marker lat,lng[,color[,size[,label]]] (repeatable)",
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Path lat,lng;lat,lng;... (repeatable)",
    )
    parser.add_argument("--path-weight", type=int, default=None, help="Weight for all paths")
    parser.add_argument("--path-color", default=None, help="Color for all paths (0xRRGGBB)")
    parser.add_argument("--fetch", required=False, help="Download the map image to this path")
    parser.add_argument(
        "--log",
        required=False,
        default=None,
        help="Path to JSONL fetch log (only used with --fetch)",
    )
    args = parser.parse_args(argv)

    cfg = config_loader.load_config(args.config) if args.config else None
    builder = MapRequestBuilder.from_config(cfg) if cfg else MapRequestBuilder()

    try:
        if args.size:
            builder.set_size(*_parse_size_arg(args.size))
        if args.maptype:
            builder.set_map_type(args.maptype)
        for m in args.marker:
            lat, lng, color, size, label = _parse_marker_arg(m)
            if color is None and size is None and label is None:
                builder.add_simple_marker(lat, lng)
            else:
                builder.add_marker(lat, lng, color=color, size=size, label=label)
        for p in args.path:
            builder.add_path(_parse_path_arg(p), weight=args.path_weight, color=args.path_color)
        url = builder.build()
    except (MapError, ValueError, TypeError) as e:
        parser.error(str(e))

    print(url)

    if args.fetch:
        api_key = cfg.api.get_google_maps_api_key() if cfg else None
        if not api_key:
            print(
                "WARNING: Google Maps API key is not set; the request will likely be denied.",
                flush=True,
            )
        fetch = functools.partial(
            map_fetch.fetch_map_image,
            api_key=api_key,
            retry=cfg.retry if cfg else None,
            timeout=cfg.http.timeout_seconds if cfg else 15,
            logger=map_fetch.JsonlLogger(args.log),
        )
        img = builder.get_map(fetch=fetch)
        map_fetch.save_map_image(img, args.fetch)
        print(f"Saved map image -> {args.fetch}")


if __name__ == "__main__":
    main()
