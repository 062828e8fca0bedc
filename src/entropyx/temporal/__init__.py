"""Temporal analysis: git traversal and commit-history trends."""

from .git import GitTraversal
from .trend import (
    build_history,
    classify_commits,
    compute_commit_file_stats,
    compute_deltas,
    downsample,
    entropy_trend,
    sample_commit_stats,
    sample_indices,
)

__all__ = [
    "GitTraversal",
    "build_history",
    "classify_commits",
    "compute_commit_file_stats",
    "compute_deltas",
    "downsample",
    "entropy_trend",
    "sample_commit_stats",
    "sample_indices",
]
