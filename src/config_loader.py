"""YAML configuration loader with environment-based secret resolution.

Notes:
- Secrets are NOT stored in the YAML file; only the ENV VAR names are.
- Limits default to the published Static Maps constraints (640x640 px,
  2048-character URLs) but are kept configurable in case the API changes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict

import yaml

from map_types import MapType  # type: ignore

_MAP_TYPE_NAMES = {m.value for m in MapType}


@dataclass(frozen=True)
class APIConfig:
    google_maps_api_key_env: str

    def get_google_maps_api_key(self) -> str | None:
        return os.getenv(self.google_maps_api_key_env)


@dataclass(frozen=True)
class MapDefaults:
    width: int
    height: int
    map_type: str


@dataclass(frozen=True)
class Limits:
    max_width: int
    max_height: int
    max_url_length: int
    coordinate_decimals: int
    validate_coordinate_ranges: bool = False


@dataclass(frozen=True)
class Serialization:
    path_color_alpha: bool = False


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    base_seconds: float
    jitter_seconds: float


@dataclass(frozen=True)
class HttpSettings:
    timeout_seconds: float


@dataclass(frozen=True)
class Config:
    project_name: str
    project_version: str
    api: APIConfig
    map_defaults: MapDefaults
    limits: Limits
    serialization: Serialization
    retry: RetryPolicy
    http: HttpSettings

    def validate(self) -> None:
        lim = self.limits
        if lim.max_width < 1 or lim.max_height < 1:
            raise ValueError("limits.max_width and limits.max_height must be >= 1.")
        if lim.max_url_length < 1:
            raise ValueError("limits.max_url_length must be >= 1.")
        if lim.coordinate_decimals < 0:
            raise ValueError("limits.coordinate_decimals must be >= 0.")
        d = self.map_defaults
        if not (1 <= d.width <= lim.max_width and 1 <= d.height <= lim.max_height):
            raise ValueError(
                f"map_defaults size {d.width}x{d.height} outside "
                f"1x1..{lim.max_width}x{lim.max_height}."
            )
        if d.map_type not in _MAP_TYPE_NAMES:
            raise ValueError(
                f"map_defaults.map_type={d.map_type!r} is not one of "
                f"{sorted(_MAP_TYPE_NAMES)}."
            )
        if self.retry.max_attempts < 1:
            raise ValueError("retry.max_attempts must be >= 1.")
        if self.retry.base_seconds < 0 or self.retry.jitter_seconds < 0:
            raise ValueError("retry.base_seconds and retry.jitter_seconds must be >= 0.")
        if self.http.timeout_seconds <= 0:
            raise ValueError("http.timeout_seconds must be positive.")


def _require_key(d: Dict[str, Any], key: str) -> Any:
    if key not in d:
        raise KeyError(f"Missing required configuration key: {key}")
    return d[key]


def load_config(path: str) -> Config:
    """Load and validate YAML configuration from `path`."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    project = raw.get("project", {})
    api_raw = raw.get("api", {})
    defaults_raw = raw.get("map_defaults", {})
    limits_raw = raw.get("limits", {})
    serialization_raw = raw.get("serialization", {}) or {}
    retry_raw = raw.get("retry", {})
    http_raw = raw.get("http", {})

    cfg = Config(
        project_name=_require_key(project, "name"),
        project_version=str(_require_key(project, "version")),
        api=APIConfig(
            google_maps_api_key_env=_require_key(api_raw, "google_maps_api_key_env"),
        ),
        map_defaults=MapDefaults(
            width=int(_require_key(defaults_raw, "width")),
            height=int(_require_key(defaults_raw, "height")),
            map_type=str(_require_key(defaults_raw, "map_type")).lower(),
        ),
        limits=Limits(
            max_width=int(_require_key(limits_raw, "max_width")),
            max_height=int(_require_key(limits_raw, "max_height")),
            max_url_length=int(_require_key(limits_raw, "max_url_length")),
            coordinate_decimals=int(_require_key(limits_raw, "coordinate_decimals")),
            validate_coordinate_ranges=bool(
                limits_raw.get("validate_coordinate_ranges", False)
            ),
        ),
        serialization=Serialization(
            path_color_alpha=bool(serialization_raw.get("path_color_alpha", False))
        ),
        retry=RetryPolicy(
            max_attempts=int(_require_key(retry_raw, "max_attempts")),
            base_seconds=float(_require_key(retry_raw, "base_seconds")),
            jitter_seconds=float(_require_key(retry_raw, "jitter_seconds")),
        ),
        http=HttpSettings(timeout_seconds=float(_require_key(http_raw, "timeout_seconds"))),
    )

    cfg.validate()
    return cfg
