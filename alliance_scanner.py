# alliance_scanner.py
"""
Scan an alliance info screenshot into an AllianceRecord.

Stages run strictly in order; the first failure aborts the scan and nothing
is written:

    START -> REGIONS_EXTRACTED -> PREPROCESSED -> RECOGNIZED -> PARSED
          -> ASSEMBLED -> MATCHED -> SERIALIZED -> DONE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from alliance import AllianceRecord, assemble, write_record
from alliance_matcher import AllianceStore, MatchKind, MatchOutcome, match
from field_parser import parse_int, parse_tag, parse_text
from image_prep import load_image, preprocess, save_debug
from ocr_engine import OCREngine
from scan_errors import ScanError, StoreError
from scan_regions import FieldSpec, LAYOUT_PROFILES, Region, build_field_specs, extract

logger = logging.getLogger(__name__)


class Stage(Enum):
    START = "start"
    REGIONS_EXTRACTED = "regions_extracted"
    PREPROCESSED = "preprocessed"
    RECOGNIZED = "recognized"
    PARSED = "parsed"
    ASSEMBLED = "assembled"
    MATCHED = "matched"
    SERIALIZED = "serialized"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanRequest:
    image_path: Path
    output_path: Path
    server_id: int = 1
    layout: Dict[str, Region] = field(default_factory=lambda: dict(LAYOUT_PROFILES["default"]))
    debug_dir: Optional[Path] = None

    def __post_init__(self):
        object.__setattr__(self, "image_path", Path(self.image_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        if self.debug_dir is not None:
            object.__setattr__(self, "debug_dir", Path(self.debug_dir))


@dataclass(frozen=True)
class ScanResult:
    record: AllianceRecord
    match: MatchOutcome
    output_path: Path


def parse_field(spec: FieldSpec, text: str) -> Any:
    if spec.value_type is int:
        return parse_int(text)
    if spec.name == "tag":
        return parse_tag(text)
    return parse_text(text)


class AllianceScan:
    """One pass over one screenshot. Not reusable."""

    def __init__(self, request: ScanRequest, engine: OCREngine, store: AllianceStore,
                 now: Optional[datetime] = None):
        self.request = request
        self.engine = engine
        self.store = store
        self.now = now
        self.stage = Stage.START
        self.specs: List[FieldSpec] = build_field_specs(request.layout)

    def _advance(self, stage: Stage) -> None:
        logger.debug("scan %s: %s -> %s", self.request.image_path.name, self.stage.value, stage.value)
        self.stage = stage

    def _fail(self, err: ScanError, stage: Stage) -> ScanError:
        if err.stage is None:
            err.stage = stage.value
        logger.error("scan %s failed: %s", self.request.image_path.name, err)
        self.stage = Stage.FAILED
        return err

    def _per_field(self, fn, items: Dict[str, Any], stage: Stage) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for spec in self.specs:
            try:
                out[spec.name] = fn(spec, items[spec.name])
            except ScanError as e:
                if e.field is None:
                    e.field = spec.name
                raise self._fail(e, stage)
        return out

    def run(self) -> ScanResult:
        try:
            image = load_image(self.request.image_path)
        except ScanError as e:
            raise self._fail(e, Stage.START)

        images: Dict[str, Any] = {s.name: image for s in self.specs}
        crops = self._per_field(lambda s, img: extract(img, s.region), images, Stage.REGIONS_EXTRACTED)
        self._advance(Stage.REGIONS_EXTRACTED)

        prepped = self._per_field(lambda s, crop: preprocess(crop, s.flags), crops, Stage.PREPROCESSED)
        if self.request.debug_dir is not None:
            self._save_debug_crops(prepped)
        self._advance(Stage.PREPROCESSED)

        texts = self._per_field(lambda s, img: self.engine.recognize(img, s.whitelist), prepped,
                                Stage.RECOGNIZED)
        for name, text in texts.items():
            logger.debug("  %-13s %r", name, text)
        self._advance(Stage.RECOGNIZED)

        values = self._per_field(parse_field, texts, Stage.PARSED)
        self._advance(Stage.PARSED)

        record = assemble(values, self.now or datetime.now(), self.request.server_id)
        self._advance(Stage.ASSEMBLED)

        outcome = match(self.store, record.server_id, record.tag)
        if outcome.kind is MatchKind.ERROR:
            raise self._fail(StoreError(f"alliance lookup failed: {outcome.reason}"), Stage.MATCHED)
        self._advance(Stage.MATCHED)

        try:
            write_record(record, self.request.output_path)
        except ScanError as e:
            raise self._fail(e, Stage.SERIALIZED)
        self._advance(Stage.SERIALIZED)

        self._advance(Stage.DONE)
        return ScanResult(record=record, match=outcome, output_path=self.request.output_path)

    def _save_debug_crops(self, prepped: Dict[str, np.ndarray]) -> None:
        stem = self.request.image_path.stem
        for name, img in prepped.items():
            try:
                save_debug(self.request.debug_dir / f"{stem}-{name}.png", img)
            except ScanError as e:
                logger.warning("%s", e)


def scan_alliance(request: ScanRequest, engine: OCREngine, store: AllianceStore,
                  now: Optional[datetime] = None) -> ScanResult:
    return AllianceScan(request, engine, store, now=now).run()
