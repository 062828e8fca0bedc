"""Read and write snapshot JSON documents.

Two document shapes are accepted::

    {"generated", "summary", "files": [...]}
    {"generated", "commitCount", "summary", "history": [...], "latestFiles": [...]}

Floats are written with ``repr`` (the ``json`` default), so a value read
back is bit-for-bit the value written. Dates are ISO-8601 with offset.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import SnapshotFormatError
from ..logging_config import get_logger
from ..models import CodeKind
from .models import Snapshot, SnapshotFile, SnapshotHistoryEntry, SnapshotSummary

logger = get_logger(__name__)


def _iso(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _file_to_dict(f: SnapshotFile) -> dict[str, Any]:
    return {
        "path": f.path,
        "language": f.language,
        "sloc": f.sloc,
        "cyclomaticComplexity": f.cyclomatic_complexity,
        "maintainabilityIndex": f.maintainability_index,
        "smellsHigh": f.smells_high,
        "smellsMedium": f.smells_medium,
        "smellsLow": f.smells_low,
        "couplingProxy": f.coupling_proxy,
        "badness": f.badness,
        "kind": f.kind.value,
        "commitHash": f.commit_hash,
        "maintainabilityProxy": f.maintainability_proxy,
    }


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    doc: dict[str, Any] = {"generated": _iso(snapshot.generated)}
    if snapshot.has_history:
        doc["commitCount"] = snapshot.commit_count
    doc["summary"] = {
        "entropy": snapshot.summary.entropy,
        "files": snapshot.summary.files,
        "sloc": snapshot.summary.sloc,
    }
    files = [_file_to_dict(f) for f in snapshot.files]
    if snapshot.has_history:
        doc["history"] = [
            {
                "hash": h.hash,
                "date": _iso(h.date),
                "parents": list(h.parents),
                "entropy": h.entropy,
                "files": h.files,
                "sloc": h.sloc,
            }
            for h in snapshot.history
        ]
        doc["latestFiles"] = files
    else:
        doc["files"] = files
    return doc


def snapshot_to_json(snapshot: Snapshot, indent: Optional[int] = 2) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=indent, ensure_ascii=False)


# ── parsing ──────────────────────────────────────────────────────


def _parse_date(value: Any, source: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise SnapshotFormatError(source, f"invalid date: {value!r}")
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def _num(obj: dict, key: str, cast, source: str):
    value = obj.get(key, 0)
    if value is None:
        value = 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotFormatError(source, f"{key} must be a number, got {value!r}")
    return cast(value)


def _file_from_dict(obj: Any, source: str) -> SnapshotFile:
    if not isinstance(obj, dict):
        raise SnapshotFormatError(source, "file entries must be objects")
    return SnapshotFile(
        path=str(obj.get("path", "")),
        language=str(obj.get("language", "")),
        sloc=_num(obj, "sloc", int, source),
        cyclomatic_complexity=_num(obj, "cyclomaticComplexity", float, source),
        maintainability_index=_num(obj, "maintainabilityIndex", float, source),
        smells_high=_num(obj, "smellsHigh", int, source),
        smells_medium=_num(obj, "smellsMedium", int, source),
        smells_low=_num(obj, "smellsLow", int, source),
        coupling_proxy=_num(obj, "couplingProxy", float, source),
        badness=_num(obj, "badness", float, source),
        kind=CodeKind.parse(obj.get("kind")),
        commit_hash=str(obj.get("commitHash", "")),
        maintainability_proxy=_num(obj, "maintainabilityProxy", float, source),
    )


def _parents(value: Any, source: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise SnapshotFormatError(source, "parents must be an array of hashes")
    return tuple(value)


def _history_from_dict(obj: Any, source: str) -> SnapshotHistoryEntry:
    if not isinstance(obj, dict):
        raise SnapshotFormatError(source, "history entries must be objects")
    return SnapshotHistoryEntry(
        hash=str(obj.get("hash", "")),
        date=_parse_date(obj.get("date"), source),
        entropy=_num(obj, "entropy", float, source),
        files=_num(obj, "files", int, source),
        sloc=_num(obj, "sloc", int, source),
        parents=_parents(obj.get("parents"), source),
    )


def snapshot_from_dict(doc: Any, source: str = "<string>") -> Snapshot:
    if not isinstance(doc, dict):
        raise SnapshotFormatError(source, "top-level value must be an object")

    summary_obj = doc.get("summary") or {}
    if not isinstance(summary_obj, dict):
        raise SnapshotFormatError(source, "summary must be an object")
    summary = SnapshotSummary(
        entropy=_num(summary_obj, "entropy", float, source),
        files=_num(summary_obj, "files", int, source),
        sloc=_num(summary_obj, "sloc", int, source),
    )

    raw_files = doc.get("latestFiles", doc.get("files")) or []
    raw_history = doc.get("history") or []
    if not isinstance(raw_files, list) or not isinstance(raw_history, list):
        raise SnapshotFormatError(source, "files and history must be arrays")

    has_history = "history" in doc or "commitCount" in doc
    commit_count = _num(doc, "commitCount", int, source) if has_history else None

    return Snapshot(
        generated=_parse_date(doc.get("generated"), source) or datetime.fromtimestamp(0, tz=timezone.utc),
        summary=summary,
        files=[_file_from_dict(f, source) for f in raw_files],
        history=[_history_from_dict(h, source) for h in raw_history],
        commit_count=commit_count,
    )


def snapshot_from_json(text: str, source: str = "<string>") -> Snapshot:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(source, f"not valid JSON: {e}")
    return snapshot_from_dict(doc, source)


def save_snapshot(snapshot: Snapshot, path: Union[str, Path]) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(snapshot_to_json(snapshot), encoding="utf-8")
    logger.info("Snapshot written to %s", out)
    return out


def load_snapshot(path: Union[str, Path]) -> Snapshot:
    src = Path(path)
    try:
        text = src.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotFormatError(str(src), f"cannot read file: {e}")
    return snapshot_from_json(text, str(src))
