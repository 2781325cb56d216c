import pathlib
import sys

import pytest
import yaml

# Ensure src/ is importable
REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
SRC_DIR = REPO_ROOT / "src"
sys.path.append(str(SRC_DIR))

import config_loader  # type: ignore
import url_builder as ub  # type: ignore
from map_types import MapType  # type: ignore

CONFIG_PATH = REPO_ROOT / "config" / "config.yml"


def _load_raw():
    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _write(tmp_path, raw):
    p = tmp_path / "config.yml"
    with open(p, "w", encoding="utf-8") as f:
        yaml.safe_dump(raw, f)
    return str(p)


def test_default_config_loads():
    cfg = config_loader.load_config(str(CONFIG_PATH))
    assert cfg.map_defaults.width == 640
    assert cfg.map_defaults.height == 640
    assert cfg.map_defaults.map_type == "hybrid"
    assert cfg.limits.max_url_length == 2048
    assert cfg.limits.coordinate_decimals == 2
    assert cfg.limits.validate_coordinate_ranges is False
    assert cfg.serialization.path_color_alpha is False
    assert cfg.retry.max_attempts >= 1


def test_api_key_resolved_from_env(monkeypatch):
    cfg = config_loader.load_config(str(CONFIG_PATH))
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    assert cfg.api.get_google_maps_api_key() is None
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "abc123")
    assert cfg.api.get_google_maps_api_key() == "abc123"


def test_missing_key_raises(tmp_path):
    raw = _load_raw()
    del raw["limits"]["max_url_length"]
    with pytest.raises(KeyError):
        config_loader.load_config(_write(tmp_path, raw))


@pytest.mark.parametrize(
    "section,key,value",
    [
        ("map_defaults", "map_type", "mercator"),
        ("map_defaults", "width", 641),
        ("map_defaults", "height", 0),
        ("limits", "coordinate_decimals", -1),
        ("retry", "max_attempts", 0),
        ("http", "timeout_seconds", 0),
    ],
)
def test_invalid_values_raise(tmp_path, section, key, value):
    raw = _load_raw()
    raw[section][key] = value
    with pytest.raises(ValueError):
        config_loader.load_config(_write(tmp_path, raw))


def test_builder_from_config(tmp_path):
    raw = _load_raw()
    raw["map_defaults"].update({"width": 320, "height": 200, "map_type": "ROADMAP"})
    raw["limits"]["validate_coordinate_ranges"] = True
    raw["serialization"]["path_color_alpha"] = True
    cfg = config_loader.load_config(_write(tmp_path, raw))

    b = ub.MapRequestBuilder.from_config(cfg)
    assert b.size == "320x200"
    assert b.map_type is MapType.ROADMAP
    assert b.validate_ranges is True
    assert b.path_color_alpha is True

    b.add_path([(1, 1), (2, 2)], color=(0, 0, 0, 16))
    assert b.build() == (
        "https://maps.googleapis.com/maps/api/staticmap?&sensor=false"
        "&size=320x200&path=color:0x00000010%7C1.0,1.0%7C2.0,2.0"
    )
