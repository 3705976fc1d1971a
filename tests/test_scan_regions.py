import json

import numpy as np
import pytest

from scan_errors import BoundsError
from scan_regions import (
    FIELD_NAMES,
    LAYOUT_PROFILES,
    NUMBER_FLAGS,
    TAG_WHITELIST,
    TEXT_FLAGS,
    Region,
    build_field_specs,
    extract,
    get_layout,
    load_layout_file,
)


def _gradient(h=60, w=80):
    return (np.arange(h * w * 3, dtype=np.uint32) % 251).astype(np.uint8).reshape(h, w, 3)


def test_extract_matches_manual_crop():
    img = _gradient()
    region = Region(10, 5, 30, 20)
    crop = extract(img, region)
    assert crop.shape == (20, 30, 3)
    assert np.array_equal(crop, img[5:25, 10:40])


def test_extract_is_deterministic_and_copies():
    img = _gradient()
    region = Region(0, 0, 80, 60)
    a = extract(img, region)
    b = extract(img, region)
    assert np.array_equal(a, b)
    a[0, 0] = 0
    assert img[0, 0, 0] == _gradient()[0, 0, 0]


@pytest.mark.parametrize("region", [
    Region(60, 0, 30, 10),   # past right edge
    Region(0, 50, 10, 20),   # past bottom edge
    Region(-1, 0, 10, 10),
    Region(0, -5, 10, 10),
    Region(0, 0, 0, 10),
    Region(0, 0, 10, -3),
])
def test_extract_out_of_bounds(region):
    with pytest.raises(BoundsError):
        extract(_gradient(), region)


def test_default_layout_has_every_field():
    layout = get_layout()
    assert set(layout) == set(FIELD_NAMES)
    assert layout["tag"].as_roi() == (157, 292, 48, 20)
    assert layout["member_count"].as_roi() == (316, 366, 28, 16)


def test_field_specs_rules():
    specs = {s.name: s for s in build_field_specs(LAYOUT_PROFILES["default"])}
    assert [s.name for s in build_field_specs(LAYOUT_PROFILES["default"])] == FIELD_NAMES
    assert specs["tag"].whitelist == TAG_WHITELIST
    assert specs["tag"].flags == TEXT_FLAGS
    assert specs["name"].whitelist is None
    for name in ("power", "gift_level", "member_count"):
        assert specs[name].flags == NUMBER_FLAGS
        assert specs[name].whitelist == "0123456789"
        assert specs[name].value_type is int


def test_layout_file_adds_profiles(tmp_path):
    path = tmp_path / "layouts.json"
    path.write_text(json.dumps({
        "tablet": {f: [i, i, 10, 10] for i, f in enumerate(FIELD_NAMES)},
    }), encoding="utf-8")

    layout = get_layout("tablet", path)
    assert layout["power"] == Region(2, 2, 10, 10)
    # built-in profiles are still there
    assert get_layout("default", path) == LAYOUT_PROFILES["default"]


def test_layout_file_rejects_incomplete_profile(tmp_path):
    path = tmp_path / "layouts.json"
    path.write_text(json.dumps({"broken": {"tag": [0, 0, 1, 1]}}), encoding="utf-8")
    with pytest.raises(ValueError, match="missing fields"):
        load_layout_file(path)


def test_unknown_layout():
    with pytest.raises(ValueError, match="Unknown layout profile"):
        get_layout("nope")


def test_get_layout_returns_private_copy():
    layout = get_layout()
    layout["power"] = Region(0, 0, 1, 1)
    assert LAYOUT_PROFILES["default"]["power"] == Region(280, 317, 96, 18)
    assert get_layout()["power"] == Region(280, 317, 96, 18)


def test_layout_file_rejects_non_object_profile(tmp_path):
    path = tmp_path / "layouts.json"
    path.write_text(json.dumps({"phone": 5}), encoding="utf-8")
    with pytest.raises(ValueError, match="phone"):
        load_layout_file(path)
