"""Snapshot interchange: save a scan to JSON and compare two of them."""

from .compare import Assessment, Verdict, build_assessment
from .io import load_snapshot, save_snapshot, snapshot_from_json, snapshot_to_json
from .models import (
    Snapshot,
    SnapshotFile,
    SnapshotHistoryEntry,
    SnapshotSummary,
    snapshot_from_files,
    snapshot_from_history,
)

__all__ = [
    "Assessment",
    "Verdict",
    "build_assessment",
    "load_snapshot",
    "save_snapshot",
    "snapshot_from_json",
    "snapshot_to_json",
    "Snapshot",
    "SnapshotFile",
    "SnapshotHistoryEntry",
    "SnapshotSummary",
    "snapshot_from_files",
    "snapshot_from_history",
]
