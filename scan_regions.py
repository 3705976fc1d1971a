# scan_regions.py
"""Screen regions and field definitions for the alliance info panel."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from scan_errors import BoundsError

# =========================
# Types
# =========================

@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_roi(cls, roi: Tuple[int, int, int, int]) -> "Region":
        x, y, w, h = roi
        return cls(int(x), int(y), int(w), int(h))

    def as_roi(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class PreprocessFlags:
    binarize: bool = False
    invert: bool = False
    scale: int = 1


@dataclass(frozen=True)
class FieldSpec:
    name: str
    region: Region
    flags: PreprocessFlags
    whitelist: Optional[str]
    value_type: type


# =========================
# CONFIG
# =========================

DIGITS = "0123456789"
ALNUM = DIGITS + "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Angle brackets are allowed so the tag decoration is read as brackets, not letters
TAG_WHITELIST = "<>" + ALNUM
NUMBER_WHITELIST = DIGITS

SCALE_FACTOR = 2

TEXT_FLAGS = PreprocessFlags()
NUMBER_FLAGS = PreprocessFlags(binarize=True, invert=True, scale=SCALE_FACTOR)

FIELD_NAMES: List[str] = ["tag", "name", "power", "gift_level", "member_count"]

# ROIs on the alliance info screenshot: (x, y, width, height)
LAYOUT_PROFILES: Dict[str, Dict[str, Region]] = {
    "default": {
        "tag": Region(157, 292, 48, 20),
        "name": Region(204, 290, 160, 24),
        "power": Region(280, 317, 96, 18),
        "gift_level": Region(356, 351, 19, 15),
        "member_count": Region(316, 366, 28, 16),
    },
}

# name -> (flags, whitelist, value type)
_FIELD_RULES: Dict[str, Tuple[PreprocessFlags, Optional[str], type]] = {
    "tag": (TEXT_FLAGS, TAG_WHITELIST, str),
    "name": (TEXT_FLAGS, None, str),
    "power": (NUMBER_FLAGS, NUMBER_WHITELIST, int),
    "gift_level": (NUMBER_FLAGS, NUMBER_WHITELIST, int),
    "member_count": (NUMBER_FLAGS, NUMBER_WHITELIST, int),
}

# =========================
# Layouts
# =========================

def load_layout_file(path: Path) -> Dict[str, Dict[str, Region]]:
    """
    Load extra layout profiles from a JSON file.

    Format: {"profile": {"tag": [x, y, w, h], ...}, ...}
    Every profile must define all five fields.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Layout file {path} must contain an object of profiles")

    profiles: Dict[str, Dict[str, Region]] = {}
    for profile, fields in raw.items():
        if not isinstance(fields, dict):
            raise ValueError(f"Layout profile '{profile}' must be an object of field regions")
        missing = [f for f in FIELD_NAMES if f not in fields]
        if missing:
            raise ValueError(f"Layout profile '{profile}' is missing fields: {', '.join(missing)}")
        profiles[profile] = {f: Region.from_roi(fields[f]) for f in FIELD_NAMES}
    return profiles


def get_layout(name: str = "default", layout_file: Optional[Path] = None) -> Dict[str, Region]:
    profiles = dict(LAYOUT_PROFILES)
    if layout_file is not None:
        profiles.update(load_layout_file(layout_file))

    if name not in profiles:
        available = ", ".join(sorted(profiles))
        raise ValueError(f"Unknown layout profile: {name}. Available: {available}")
    return dict(profiles[name])


def build_field_specs(layout: Dict[str, Region]) -> List[FieldSpec]:
    """Combine a layout's regions with the fixed per-field extraction rules."""
    specs: List[FieldSpec] = []
    for name in FIELD_NAMES:
        flags, whitelist, value_type = _FIELD_RULES[name]
        specs.append(FieldSpec(name, layout[name], flags, whitelist, value_type))
    return specs

# =========================
# Extraction
# =========================

def extract(image: np.ndarray, region: Region) -> np.ndarray:
    if image is None or image.ndim < 2:
        raise BoundsError("source image has no pixel data")

    img_h, img_w = image.shape[:2]
    x, y, w, h = region.as_roi()
    if w <= 0 or h <= 0:
        raise BoundsError(f"region {region.as_roi()} has non-positive size")
    if x < 0 or y < 0 or x + w > img_w or y + h > img_h:
        raise BoundsError(f"region {region.as_roi()} outside image of {img_w}x{img_h}")

    return image[y:y + h, x:x + w].copy()
