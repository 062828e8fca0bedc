"""Core data models: per-file metrics, per-commit metrics, commit history records.

Every record is a frozen dataclass. FileMetrics rows are keyed by
``(commit_hash, path)`` and RepoMetrics rows by ``commit_hash``; both are
written once and never updated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# Smell severity weights (high, medium, low)
SMELL_WEIGHT_HIGH = 3
SMELL_WEIGHT_MEDIUM = 2
SMELL_WEIGHT_LOW = 1


class CodeKind(Enum):
    """Role of a source file in the repository.

    The enum value is the stable token written to storage and snapshots.
    """

    PRODUCTION = "production"
    UTILITY = "utility"

    @classmethod
    def parse(cls, token: Optional[str]) -> "CodeKind":
        """Parse a stored token (case-insensitive). Unknown or empty → PRODUCTION."""
        if not token:
            return cls.PRODUCTION
        try:
            return cls(token.strip().lower())
        except ValueError:
            return cls.PRODUCTION


@dataclass(frozen=True)
class FileMetrics:
    """Structural measurements of one file at one commit."""

    commit_hash: str
    path: str
    language: str
    sloc: int
    cyclomatic_complexity: float
    maintainability_index: float
    smells_high: int
    smells_medium: int
    smells_low: int
    coupling_proxy: float
    maintainability_proxy: float
    kind: CodeKind = CodeKind.PRODUCTION

    @property
    def weighted_smells(self) -> int:
        return (
            self.smells_high * SMELL_WEIGHT_HIGH
            + self.smells_medium * SMELL_WEIGHT_MEDIUM
            + self.smells_low * SMELL_WEIGHT_LOW
        )


@dataclass(frozen=True)
class RepoMetrics:
    """Commit-level aggregate derived from that commit's FileMetrics set."""

    commit_hash: str
    total_files: int
    total_sloc: int
    entropy_score: float


@dataclass(frozen=True)
class CommitInfo:
    """A commit as enumerated from git: hash, author timestamp, parent hashes."""

    hash: str
    timestamp: datetime
    parents: tuple[str, ...] = field(default_factory=tuple)

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class CommitDelta:
    """Signed change between two chronologically adjacent commits."""

    commit: CommitInfo
    metrics: RepoMetrics
    previous: RepoMetrics
    entropy_delta: float
    sloc_delta: int
    files_delta: int
    relative_delta: float = 0.0
    complexity_delta: Optional[float] = None
    smell_density_delta: Optional[float] = None


@dataclass(frozen=True)
class CommitFileStats:
    """Auxiliary per-commit statistics used for trend charts."""

    commit_hash: str
    timestamp: Optional[datetime]
    avg_complexity: float
    smell_density: float  # weighted smells per 1000 SLOC
    sloc_per_file: float
    file_count: int


@dataclass(frozen=True)
class ScanResult:
    """Output of scanning one commit, before it is persisted."""

    commit: CommitInfo
    files: tuple[FileMetrics, ...]
    repo_metrics: RepoMetrics
