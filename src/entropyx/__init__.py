"""
EntropyX - Historical Code Quality Tracking

Measures how a codebase's internal structure evolves across its commit
history. Each analyzed commit gets a SLOC-distribution entropy score,
per-file badness and refactor rankings, and a classification against its
predecessor as heroic (measurably improved) or troubled (degraded).
"""

__version__ = "0.1.0"

from .metrics.aggregation import aggregate, compute_entropy, filter_by_kind
from .models import CodeKind, CommitDelta, CommitInfo, FileMetrics, RepoMetrics

__all__ = [
    "aggregate",
    "compute_entropy",
    "filter_by_kind",
    "CodeKind",
    "CommitDelta",
    "CommitInfo",
    "FileMetrics",
    "RepoMetrics",
]
