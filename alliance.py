# alliance.py
"""Alliance records: snapshot assembly and the JSON staging file format."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from scan_errors import ScanIOError


@dataclass(frozen=True)
class Snapshot:
    """One day's observation of an alliance."""
    capture_date: date
    tag: str
    name: str
    power: int
    gift_level: int
    member_count: int


@dataclass(frozen=True)
class AllianceRecord:
    server_id: int
    tag: str
    name: str
    history: Tuple[Snapshot, ...] = field(default_factory=tuple)

    @property
    def key(self) -> Tuple[int, str]:
        return (self.server_id, self.tag)

    @property
    def current(self) -> Snapshot:
        return self.history[-1]


REQUIRED_FIELDS = ("tag", "name", "power", "gift_level", "member_count")


def assemble(fields: Mapping[str, Any], capture_time: datetime, server_id: int) -> AllianceRecord:
    """Build a record holding exactly one snapshot from the parsed fields."""
    missing = [f for f in REQUIRED_FIELDS if f not in fields]
    if missing:
        raise ValueError(f"cannot assemble snapshot, missing fields: {', '.join(missing)}")

    snap = Snapshot(
        capture_date=capture_time.date(),
        tag=fields["tag"],
        name=fields["name"],
        power=int(fields["power"]),
        gift_level=int(fields["gift_level"]),
        member_count=int(fields["member_count"]),
    )
    return AllianceRecord(server_id=int(server_id), tag=snap.tag, name=snap.name, history=(snap,))

# =========================
# JSON
# =========================

def snapshot_to_dict(snap: Snapshot) -> Dict[str, Any]:
    return {
        "Date": snap.capture_date.isoformat(),
        "Tag": snap.tag,
        "Name": snap.name,
        "Power": snap.power,
        "GiftLevel": snap.gift_level,
        "MemberCount": snap.member_count,
    }


def snapshot_from_dict(d: Mapping[str, Any]) -> Snapshot:
    return Snapshot(
        capture_date=date.fromisoformat(d["Date"]),
        tag=d["Tag"],
        name=d["Name"],
        power=int(d["Power"]),
        gift_level=int(d["GiftLevel"]),
        member_count=int(d["MemberCount"]),
    )


def record_to_dict(record: AllianceRecord) -> Dict[str, Any]:
    # Staging files only ever carry the current scan
    data = [snapshot_to_dict(s) for s in record.history[-1:]]
    return {
        "Server": record.server_id,
        "Tag": record.tag,
        "Name": record.name,
        "Data": data,
    }


def record_from_dict(d: Mapping[str, Any]) -> AllianceRecord:
    return AllianceRecord(
        server_id=int(d["Server"]),
        tag=d["Tag"],
        name=d["Name"],
        history=tuple(snapshot_from_dict(s) for s in d.get("Data") or []),
    )


def dumps_record(record: AllianceRecord) -> str:
    return json.dumps(record_to_dict(record), indent=2, ensure_ascii=False)


def loads_record(text: str) -> AllianceRecord:
    return record_from_dict(json.loads(text))


def write_record(record: AllianceRecord, path: Path) -> Path:
    """Write the record as JSON. The target either gets the whole file or is left untouched."""
    path = Path(path)
    payload = dumps_record(record) + "\n"

    target_dir = path.parent
    tmp_name = None
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=target_dir,
                                         prefix=f".{path.name}.", suffix=".tmp",
                                         delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ScanIOError(f"could not write {path}: {e}") from e

    return path


def read_record(path: Path) -> AllianceRecord:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ScanIOError(f"could not read {path}: {e}") from e
    return loads_record(text)
