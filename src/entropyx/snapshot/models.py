"""Snapshot documents: a point-in-time scan saved for later comparison."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..metrics.aggregation import aggregate
from ..metrics.scoring import compute_badness
from ..models import CodeKind, CommitInfo, FileMetrics, RepoMetrics

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class SnapshotSummary:
    entropy: float
    files: int
    sloc: int


@dataclass(frozen=True)
class SnapshotHistoryEntry:
    """One commit of a snapshot's history series."""

    hash: str
    date: Optional[datetime]
    entropy: float
    files: int
    sloc: int
    parents: tuple[str, ...] = ()


@dataclass(frozen=True)
class SnapshotFile:
    """One file of a snapshot, with its badness relative to that snapshot."""

    path: str
    language: str
    sloc: int
    cyclomatic_complexity: float
    maintainability_index: float
    smells_high: int
    smells_medium: int
    smells_low: int
    coupling_proxy: float
    badness: float
    kind: CodeKind = CodeKind.PRODUCTION
    commit_hash: str = ""
    maintainability_proxy: float = 0.0

    def to_file_metrics(self) -> FileMetrics:
        return FileMetrics(
            commit_hash=self.commit_hash,
            path=self.path,
            language=self.language,
            sloc=self.sloc,
            cyclomatic_complexity=self.cyclomatic_complexity,
            maintainability_index=self.maintainability_index,
            smells_high=self.smells_high,
            smells_medium=self.smells_medium,
            smells_low=self.smells_low,
            coupling_proxy=self.coupling_proxy,
            maintainability_proxy=self.maintainability_proxy,
            kind=self.kind,
        )


@dataclass
class Snapshot:
    """Complete record of one scan.

    A directory scan carries only ``files``; a history report also carries
    ``history`` and ``commit_count``.
    """

    generated: datetime
    summary: SnapshotSummary
    files: list[SnapshotFile] = field(default_factory=list)
    history: list[SnapshotHistoryEntry] = field(default_factory=list)
    commit_count: Optional[int] = None

    @property
    def has_history(self) -> bool:
        return self.commit_count is not None

    def file_metrics(self) -> list[FileMetrics]:
        """Rebuild the FileMetrics records the snapshot was made from."""
        return [f.to_file_metrics() for f in self.files]

    def history_entries(self) -> list[tuple[CommitInfo, RepoMetrics]]:
        """Rebuild ``(CommitInfo, RepoMetrics)`` pairs. Undated entries get the epoch."""
        return [
            (
                CommitInfo(hash=h.hash, timestamp=h.date or _EPOCH, parents=h.parents),
                RepoMetrics(
                    commit_hash=h.hash, total_files=h.files, total_sloc=h.sloc, entropy_score=h.entropy
                ),
            )
            for h in self.history
        ]


def _snapshot_files(files: Sequence[FileMetrics]) -> list[SnapshotFile]:
    badness = compute_badness(files)
    return [
        SnapshotFile(
            path=f.path,
            language=f.language,
            sloc=f.sloc,
            cyclomatic_complexity=f.cyclomatic_complexity,
            maintainability_index=f.maintainability_index,
            smells_high=f.smells_high,
            smells_medium=f.smells_medium,
            smells_low=f.smells_low,
            coupling_proxy=f.coupling_proxy,
            badness=b,
            kind=f.kind,
            commit_hash=f.commit_hash,
            maintainability_proxy=f.maintainability_proxy,
        )
        for f, b in zip(files, badness)
    ]


def _summary(metrics: RepoMetrics) -> SnapshotSummary:
    return SnapshotSummary(
        entropy=metrics.entropy_score, files=metrics.total_files, sloc=metrics.total_sloc
    )


def snapshot_from_files(
    files: Sequence[FileMetrics], generated: Optional[datetime] = None
) -> Snapshot:
    """Snapshot of a directory scan (no history)."""
    return Snapshot(
        generated=generated or datetime.now(timezone.utc),
        summary=_summary(aggregate(files)),
        files=_snapshot_files(files),
    )


def snapshot_from_history(
    history: Sequence[tuple[CommitInfo, RepoMetrics]],
    latest_files: Sequence[FileMetrics],
    commit_count: Optional[int] = None,
    generated: Optional[datetime] = None,
) -> Snapshot:
    """Snapshot of a stored history plus the latest commit's files.

    The summary describes ``latest_files``, which may be kind-filtered.
    """
    entries = [
        SnapshotHistoryEntry(
            hash=commit.hash,
            date=commit.timestamp,
            entropy=metrics.entropy_score,
            files=metrics.total_files,
            sloc=metrics.total_sloc,
            parents=tuple(commit.parents),
        )
        for commit, metrics in history
    ]
    return Snapshot(
        generated=generated or datetime.now(timezone.utc),
        summary=_summary(aggregate(latest_files)),
        files=_snapshot_files(latest_files),
        history=entries,
        commit_count=commit_count if commit_count is not None else len(entries),
    )
