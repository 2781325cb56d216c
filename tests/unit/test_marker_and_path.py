import dataclasses
import pathlib
import sys

import pytest

# Ensure src/ is importable
REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
SRC_DIR = REPO_ROOT / "src"
sys.path.append(str(SRC_DIR))

from map_errors import InvalidLabel, InvalidPathWidth  # type: ignore
from map_path import Path, PathStyle, check_weight  # type: ignore
from map_types import Color, MarkerSize  # type: ignore
from marker import Marker, MarkerStyle, normalize_label  # type: ignore

RED = Color(255, 0, 0)
BLUE = Color(0, 0, 255)


# ------------------------------
# Markers
# ------------------------------


def test_normalize_label():
    assert normalize_label("a") == "A"
    assert normalize_label("Z") == "Z"
    assert normalize_label("5") == "5"
    for bad in ["!", " ", "", "AB", "é", 5, None]:
        with pytest.raises(InvalidLabel):
            normalize_label(bad)


def test_marker_without_style_is_just_the_coordinate():
    assert Marker(37.42, -122.08).to_fragment() == "37.42,-122.08"
    assert str(Marker(1.0, 2.0)) == "1.0,2.0"


def test_marker_full_style_order():
    style = MarkerStyle.create(color=RED, size="small", label="a")
    frag = Marker(37.42, -122.08, style).to_fragment()
    assert frag == "color:0xff0000%7Csize:small%7Clabel:A%7C37.42,-122.08"


def test_marker_normal_size_is_not_emitted():
    style = MarkerStyle.create(color=RED, size=MarkerSize.NORMAL)
    assert Marker(1.0, 2.0, style).to_fragment() == "color:0xff0000%7C1.0,2.0"


def test_marker_size_only_emitted_with_color():
    style = MarkerStyle.create(size=MarkerSize.TINY, label="7")
    assert Marker(1.0, 2.0, style).to_fragment() == "label:7%7C1.0,2.0"


def test_marker_label_passes_through_for_tiny():
    style = MarkerStyle.create(color=BLUE, size="tiny", label="q")
    assert (
        Marker(1.0, 2.0, style).to_fragment()
        == "color:0x0000ff%7Csize:tiny%7Clabel:Q%7C1.0,2.0"
    )


def test_marker_alpha_dropped():
    style = MarkerStyle.create(color=Color(16, 32, 48, 7))
    assert Marker(0.0, 0.0, style).to_fragment() == "color:0x102030%7C0.0,0.0"


def test_marker_is_immutable():
    m = Marker(1.0, 2.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        m.lat = 3.0  # type: ignore[misc]


# ------------------------------
# Paths
# ------------------------------


def test_check_weight():
    assert check_weight(1) == 1
    for bad in [0, -3, True, 2.5]:
        with pytest.raises(InvalidPathWidth):
            check_weight(bad)


def test_path_without_style():
    p = Path(((1.0, 2.0), (3.0, 4.0), (5.5, -6.25)))
    assert p.to_fragment() == "1.0,2.0%7C3.0,4.0%7C5.5,-6.25"


def test_path_weight_and_color():
    p = Path(((1.0, 2.0), (3.0, 4.0)), PathStyle(weight=3, color=BLUE))
    assert p.to_fragment() == "weight:3%7Ccolor:0x0000ff%7C1.0,2.0%7C3.0,4.0"


def test_path_weight_only_and_color_only():
    pts = ((1.0, 2.0), (3.0, 4.0))
    assert Path(pts, PathStyle(weight=8)).to_fragment() == "weight:8%7C1.0,2.0%7C3.0,4.0"
    assert (
        Path(pts, PathStyle(color=RED)).to_fragment()
        == "color:0xff0000%7C1.0,2.0%7C3.0,4.0"
    )


def test_path_color_alpha_switch():
    p = Path(((1.0, 2.0), (3.0, 4.0)), PathStyle(color=Color(0, 0, 255, 128)))
    assert p.to_fragment() == "color:0x0000ff%7C1.0,2.0%7C3.0,4.0"
    assert p.to_fragment(with_alpha=True) == "color:0x0000ff80%7C1.0,2.0%7C3.0,4.0"
