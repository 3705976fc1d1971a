# scan_errors.py
"""Error types raised by the alliance scan pipeline."""

from __future__ import annotations

from typing import Optional


class ScanError(Exception):
    """Base class for every scan failure.

    `field` and `stage` are filled in as the error travels up through the
    pipeline so the message says where things went wrong.
    """

    def __init__(self, message: str, field: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.stage = stage

    def __str__(self) -> str:
        where = "/".join(p for p in (self.stage, self.field) if p)
        return f"[{where}] {self.message}" if where else self.message


class BoundsError(ScanError):
    """Region lies (partly) outside the source image."""


class PreprocessError(ScanError):
    """Image handed to the preprocessor is empty or malformed."""


class OCRError(ScanError):
    """OCR engine could not be invoked."""


class ParseError(ScanError):
    """Recognized text could not be turned into the field's value."""


class StoreError(ScanError):
    """Alliance store lookup failed for a reason other than not-found."""


class ScanIOError(ScanError, OSError):
    """Reading the screenshot or writing the output file failed."""
