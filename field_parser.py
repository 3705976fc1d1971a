# field_parser.py
"""Turn raw OCR text into typed field values."""

from __future__ import annotations

import re

from scan_errors import ParseError

# Thousands separators seen on the panel, in either locale
_SEPARATORS_RE = re.compile(r"[,.'\s]")
_DIGITS_RE = re.compile(r"[0-9]+")


def parse_int(text: str) -> int:
    """Parse '1,234,567' style numbers. Anything other than digits and separators is rejected."""
    cleaned = _SEPARATORS_RE.sub("", (text or "").strip())
    if not cleaned:
        raise ParseError("expected a number, got empty text")
    if not _DIGITS_RE.fullmatch(cleaned):
        raise ParseError(f"expected a number, got {text!r}")
    return int(cleaned)


def parse_text(text: str) -> str:
    s = (text or "").strip()
    return re.sub(r"\s+", " ", s)


def parse_tag(text: str) -> str:
    # Tag is shown as <ABC>; the brackets are decoration, not part of the tag
    s = parse_text(text)
    return s.strip("<>").strip()
