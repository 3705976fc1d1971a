# alliance_matcher.py
"""Classify a scanned tag against the alliances already in the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, Union

from alliance import AllianceRecord

logger = logging.getLogger(__name__)

# =========================
# Lookup results
# =========================

@dataclass(frozen=True)
class Found:
    record: AllianceRecord


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


LookupResult = Union[Found, NotFound, Failed]


class AllianceStore(Protocol):
    def lookup_by_tag(self, server_id: int, tag: str) -> LookupResult: ...


class MatchKind(Enum):
    NEW = "new"
    EXISTING = "existing"
    ERROR = "error"


@dataclass(frozen=True)
class MatchOutcome:
    kind: MatchKind
    reason: Optional[str] = None
    record: Optional[AllianceRecord] = None


def match(store: AllianceStore, server_id: int, tag: str) -> MatchOutcome:
    """Look the tag up without touching the store. Only a lookup failure is an error."""
    try:
        result = store.lookup_by_tag(server_id, tag)
    except Exception as e:
        logger.warning("Store raised during lookup of %r: %s", tag, e)
        return MatchOutcome(MatchKind.ERROR, reason=str(e) or type(e).__name__)

    if isinstance(result, Found):
        outcome = MatchOutcome(MatchKind.EXISTING, record=result.record)
    elif isinstance(result, NotFound):
        outcome = MatchOutcome(MatchKind.NEW)
    elif isinstance(result, Failed):
        outcome = MatchOutcome(MatchKind.ERROR, reason=result.reason)
    else:
        outcome = MatchOutcome(MatchKind.ERROR, reason=f"unexpected lookup result {result!r}")

    logger.info("Alliance %s on server %s: %s", tag, server_id, outcome.kind.value)
    return outcome


def instruction_for(outcome: MatchOutcome, output_path: Path) -> str:
    if outcome.kind is MatchKind.NEW:
        return (
            "A new alliance will need to be created from this data.  "
            f"Please run 'wartracker-cli alliance new -o {output_path}' after verifying the data"
        )
    if outcome.kind is MatchKind.EXISTING:
        return (
            "This alliance already exists. "
            f"To add the new data run 'wartracker-cli alliance add -o {output_path}' to add the new data."
        )
    return f"Alliance lookup failed: {outcome.reason}"
