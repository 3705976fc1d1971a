"""Shared fixtures: a synthetic alliance panel, a scripted OCR engine and fake stores."""

import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from alliance import AllianceRecord
from alliance_matcher import Failed, Found, NotFound
from ocr_engine import OCREngine
from scan_regions import LAYOUT_PROFILES


class ScriptedEngine(OCREngine):
    """Returns canned text per call and remembers what it was asked."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    @property
    def name(self):
        return "scripted"

    def ensure_available(self):
        return "scripted"

    def recognize(self, image, whitelist=None):
        self.calls.append((image.shape, whitelist))
        return self.responses.pop(0)


class DictStore:
    def __init__(self, records=None):
        self.records = dict(records or {})
        self.lookups = []

    def lookup_by_tag(self, server_id, tag):
        self.lookups.append((server_id, tag))
        record = self.records.get((server_id, tag))
        return Found(record) if record else NotFound()


class FailingStore:
    def __init__(self, reason="connection reset"):
        self.reason = reason

    def lookup_by_tag(self, server_id, tag):
        return Failed(self.reason)


class RaisingStore:
    def lookup_by_tag(self, server_id, tag):
        raise RuntimeError("database is locked")


@pytest.fixture
def panel_image():
    """A 480x640 dark panel with light text drawn inside every default region."""
    img = np.full((480, 640, 3), 30, dtype=np.uint8)
    layout = LAYOUT_PROFILES["default"]
    labels = {"tag": "<ABC>", "name": "Alpha", "power": "1234", "gift_level": "7", "member_count": "88"}
    for field, region in layout.items():
        cv2.putText(img, labels[field], (region.x + 1, region.y + region.height - 4),
                    cv2.FONT_HERSHEY_PLAIN, 0.8, (230, 230, 230), 1)
    return img


@pytest.fixture
def panel_file(tmp_path, panel_image):
    path = tmp_path / "alliance.png"
    cv2.imwrite(str(path), panel_image)
    return path


@pytest.fixture
def default_responses():
    return ["<ABC>", "Alpha Wolves", "1,234,567", "7", "88"]


@pytest.fixture
def existing_record():
    return AllianceRecord(server_id=1, tag="ABC", name="Alpha Wolves")
