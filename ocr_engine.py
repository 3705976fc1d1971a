# ocr_engine.py
"""
OCR engine interface and the tesseract implementation.

The scanner only ever needs text in, text out:

    engine = create_engine("tesseract", tessdata_dir="/usr/share/tessdata")
    text = engine.recognize(img, whitelist="0123456789")

Tests register a fake engine instead of talking to tesseract.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Type

import numpy as np
import pytesseract
from pytesseract import TesseractError, TesseractNotFoundError

from scan_errors import OCRError

logger = logging.getLogger(__name__)

# Screenshots are read as 300 DPI so tesseract sizes glyphs consistently
OCR_DPI = 300
OCR_PSM = 7


class OCREngine(ABC):
    """Converts a preprocessed image into text, optionally restricted to a character set."""

    @abstractmethod
    def recognize(self, image: np.ndarray, whitelist: Optional[str] = None) -> str:
        """
        Args:
            image: preprocessed field image
            whitelist: characters the engine may return, or None for no restriction

        Returns:
            Raw recognized text. May be empty or garbage on a bad crop; the
            caller validates it.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class TesseractOCREngine(OCREngine):

    def __init__(self, tessdata_dir: Optional[str] = None, tesseract_cmd: Optional[str] = None,
                 psm: int = OCR_PSM, dpi: int = OCR_DPI):
        self.tessdata_dir = tessdata_dir
        self.psm = psm
        self.dpi = dpi
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    @property
    def name(self) -> str:
        return "tesseract"

    def ensure_available(self) -> str:
        try:
            return str(pytesseract.get_tesseract_version())
        except (TesseractNotFoundError, FileNotFoundError) as e:
            raise OCRError(
                "Tesseract is not installed or not reachable. "
                "Install it or pass --tesseract-cmd / set WARTRACKER_TESSERACT_CMD."
            ) from e

    def build_config(self, whitelist: Optional[str] = None) -> str:
        parts = [f"--psm {self.psm}", f"--dpi {self.dpi}"]
        if self.tessdata_dir:
            parts.append(f'--tessdata-dir "{Path(self.tessdata_dir)}"')
        if whitelist:
            parts.append(f"-c tessedit_char_whitelist={whitelist}")
        return " ".join(parts)

    def recognize(self, image: np.ndarray, whitelist: Optional[str] = None) -> str:
        config = self.build_config(whitelist)
        try:
            text = pytesseract.image_to_string(image, config=config)
        except (TesseractError, TesseractNotFoundError, OSError) as e:
            raise OCRError(f"tesseract failed: {e}") from e

        text = text.rstrip("\n\x0c")
        logger.debug("tesseract [%s] -> %r", config, text)
        return text


# =========================
# Factory
# =========================

_ENGINE_REGISTRY: Dict[str, Type[OCREngine]] = {
    "tesseract": TesseractOCREngine,
}


def create_engine(engine_type: str = "tesseract", **config) -> OCREngine:
    if engine_type not in _ENGINE_REGISTRY:
        available = ", ".join(_ENGINE_REGISTRY.keys())
        raise ValueError(f"Unknown engine type: {engine_type}. Available: {available}")
    return _ENGINE_REGISTRY[engine_type](**config)


def register_engine(name: str, engine_class: type) -> None:
    if not issubclass(engine_class, OCREngine):
        raise TypeError(f"{engine_class} must be a subclass of OCREngine")
    _ENGINE_REGISTRY[name] = engine_class


def available_engines() -> List[str]:
    return list(_ENGINE_REGISTRY.keys())
