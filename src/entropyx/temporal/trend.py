"""Inter-commit deltas, troubled/heroic classification, and history sampling.

A history is a chronologically ordered sequence of ``(CommitInfo,
RepoMetrics)`` pairs, oldest first.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Optional, TypeVar, Union

from ..config import DEFAULT_TREND_THRESHOLDS, TrendThresholds
from ..logging_config import get_logger
from ..metrics.aggregation import filter_by_kind
from ..models import CodeKind, CommitDelta, CommitFileStats, CommitInfo, FileMetrics, RepoMetrics

logger = get_logger(__name__)

T = TypeVar("T")

HistoryEntry = tuple[CommitInfo, RepoMetrics]

DEFAULT_MAX_POINTS = 200

# Timestamp for commits whose metadata was never recorded
_UNKNOWN_TIME = datetime.fromtimestamp(0, tz=timezone.utc)


def compute_deltas(
    history: Sequence[HistoryEntry],
    stats: Optional[Mapping[str, CommitFileStats]] = None,
) -> list[CommitDelta]:
    """One delta per adjacent pair; the first commit has no predecessor.

    When ``stats`` maps commit hashes to CommitFileStats, complexity and
    smell-density deltas are attached wherever both sides are known.
    """
    if len(history) < 2:
        return []

    deltas = []
    for (_, prev), (commit, cur) in zip(history, history[1:]):
        entropy_delta = cur.entropy_score - prev.entropy_score
        relative = entropy_delta / prev.entropy_score if prev.entropy_score != 0 else 0.0

        complexity_delta = None
        smell_delta = None
        if stats is not None:
            prev_stats = stats.get(prev.commit_hash)
            cur_stats = stats.get(cur.commit_hash)
            if prev_stats is not None and cur_stats is not None:
                complexity_delta = cur_stats.avg_complexity - prev_stats.avg_complexity
                smell_delta = cur_stats.smell_density - prev_stats.smell_density

        deltas.append(
            CommitDelta(
                commit=commit,
                metrics=cur,
                previous=prev,
                entropy_delta=entropy_delta,
                sloc_delta=cur.total_sloc - prev.total_sloc,
                files_delta=cur.total_files - prev.total_files,
                relative_delta=relative,
                complexity_delta=complexity_delta,
                smell_density_delta=smell_delta,
            )
        )
    return deltas


def _is_troubled(delta: CommitDelta, thresholds: TrendThresholds) -> bool:
    if delta.entropy_delta > thresholds.troubled_entropy_delta:
        return True
    if delta.smell_density_delta is not None and delta.smell_density_delta > thresholds.smell_density_delta:
        return True
    if delta.complexity_delta is not None and delta.complexity_delta > thresholds.complexity_delta:
        return True
    return False


def classify_commits(
    deltas: Iterable[CommitDelta],
    thresholds: TrendThresholds = DEFAULT_TREND_THRESHOLDS,
) -> tuple[list[CommitDelta], list[CommitDelta]]:
    """Split deltas into (troubled, heroic) commits.

    Troubled is sorted by entropy delta descending (worst first), heroic
    ascending (best first). A commit is never both.
    """
    troubled = []
    heroic = []
    for delta in deltas:
        if _is_troubled(delta, thresholds):
            troubled.append(delta)
        elif delta.entropy_delta < -thresholds.heroic_entropy_delta:
            heroic.append(delta)

    troubled.sort(key=lambda d: (-d.entropy_delta, d.commit.hash))
    heroic.sort(key=lambda d: (d.entropy_delta, d.commit.hash))
    logger.debug("Classified %d troubled, %d heroic commits", len(troubled), len(heroic))
    return troubled, heroic


def sample_indices(n: int, max_points: int = DEFAULT_MAX_POINTS) -> list[int]:
    """Evenly spaced indices into a sequence of length ``n``.

    Returns every index when ``n <= max_points``. Otherwise picks
    ``round(i * step)`` (half-up) with ``step = (n - 1) / (max_points - 1)``,
    which always includes the first and last index.
    """
    if max_points < 2:
        raise ValueError("max_points must be at least 2")
    if n <= max_points:
        return list(range(n))

    step = (n - 1) / (max_points - 1)
    indices = []
    for i in range(max_points):
        idx = min(n - 1, int(math.floor(i * step + 0.5)))
        if not indices or idx != indices[-1]:
            indices.append(idx)
    indices[-1] = n - 1
    return indices


def downsample(seq: Sequence[T], max_points: int = DEFAULT_MAX_POINTS) -> list[T]:
    """Reduce a sequence to at most ``max_points`` evenly spaced items."""
    return [seq[i] for i in sample_indices(len(seq), max_points)]


def compute_commit_file_stats(
    files: Sequence[FileMetrics], commit: Optional[CommitInfo] = None
) -> CommitFileStats:
    """Average complexity, smell density per KSLOC, and SLOC per file.

    Empty sets and zero-SLOC sets produce zeros instead of dividing by zero.
    """
    count = len(files)
    total_sloc = sum(max(0, f.sloc) for f in files)
    weighted = sum(f.weighted_smells for f in files)

    if commit is not None:
        commit_hash = commit.hash
    else:
        commit_hash = files[0].commit_hash if files else ""

    return CommitFileStats(
        commit_hash=commit_hash,
        timestamp=commit.timestamp if commit is not None else None,
        avg_complexity=sum(f.cyclomatic_complexity for f in files) / count if count else 0.0,
        smell_density=weighted * 1000.0 / total_sloc if total_sloc else 0.0,
        sloc_per_file=total_sloc / count if count else 0.0,
        file_count=count,
    )


def sample_commit_stats(
    history: Sequence[HistoryEntry],
    load_files: Callable[[str], Sequence[FileMetrics]],
    kind: Union[str, CodeKind, None] = "all",
    max_points: int = DEFAULT_MAX_POINTS,
) -> list[CommitFileStats]:
    """CommitFileStats for a down-sampled history.

    Sampling happens before any file data is loaded, so only the sampled
    commits are read from storage.
    """
    sampled = downsample(history, max_points)
    logger.debug("Sampling %d of %d commits for file statistics", len(sampled), len(history))
    result = []
    for commit, _ in sampled:
        files = filter_by_kind(load_files(commit.hash), kind)
        result.append(compute_commit_file_stats(files, commit))
    return result


def entropy_trend(history: Sequence[HistoryEntry]) -> float:
    """Mean per-step entropy change across the history (slope proxy)."""
    if len(history) < 2:
        return 0.0
    first = history[0][1].entropy_score
    last = history[-1][1].entropy_score
    return (last - first) / (len(history) - 1)


def build_history(
    commits: Iterable[CommitInfo], metrics: Iterable[RepoMetrics]
) -> list[HistoryEntry]:
    """Join commit info with repo metrics and order by timestamp.

    Metrics without a known commit get a placeholder CommitInfo and keep
    their relative input order after all dated commits.
    """
    by_hash = {c.hash: c for c in commits}
    dated = []
    undated = []
    for m in metrics:
        info = by_hash.get(m.commit_hash)
        if info is None:
            undated.append((CommitInfo(hash=m.commit_hash, timestamp=_UNKNOWN_TIME), m))
        else:
            dated.append((info, m))

    dated.sort(key=lambda entry: (entry[0].timestamp, entry[0].hash))
    if undated and not dated:
        return undated
    return dated + undated
