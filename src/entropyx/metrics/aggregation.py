"""Commit-level aggregation of per-file metrics.

All functions here are pure: same input set, same output, regardless of the
order the files arrive in.
"""

from collections.abc import Iterable, Sequence
from typing import Optional, Union

from ..logging_config import get_logger
from ..math import Entropy
from ..models import CodeKind, FileMetrics, RepoMetrics

logger = get_logger(__name__)

KIND_ALL = "all"


def compute_entropy(files: Iterable[FileMetrics]) -> float:
    """SLOC-distribution entropy in bits.

    ``p_i = sloc_i / total_sloc`` over files with positive SLOC. Zero when
    fewer than two files carry SLOC. For n files of equal size the result
    is ``log2(n)``.
    """
    return Entropy.of_weights(f.sloc for f in files)


def aggregate(files: Sequence[FileMetrics], commit_hash: Optional[str] = None) -> RepoMetrics:
    """Collapse one commit's file set into a RepoMetrics record.

    Args:
        files: FileMetrics for a single commit (zero-SLOC files still count)
        commit_hash: Hash to stamp on the result; defaults to the files' hash

    Returns:
        RepoMetrics with file count, total SLOC, and entropy score
    """
    if commit_hash is None:
        commit_hash = files[0].commit_hash if files else ""

    total_sloc = sum(max(0, f.sloc) for f in files)
    entropy = compute_entropy(files) if total_sloc > 0 else 0.0

    logger.debug(
        "Aggregated %d files (%d SLOC) for %s: entropy=%.4f",
        len(files),
        total_sloc,
        commit_hash[:8],
        entropy,
    )
    return RepoMetrics(
        commit_hash=commit_hash,
        total_files=len(files),
        total_sloc=total_sloc,
        entropy_score=entropy,
    )


def filter_by_kind(
    files: Iterable[FileMetrics], kind: Union[str, CodeKind, None] = KIND_ALL
) -> list[FileMetrics]:
    """Keep only files of the requested kind.

    ``kind`` is ``"all"``, ``"production"``, ``"utility"`` or a CodeKind.
    Anything unrecognized means all files.
    """
    if isinstance(kind, CodeKind):
        wanted: Optional[CodeKind] = kind
    else:
        token = (kind or KIND_ALL).strip().lower()
        wanted = next((k for k in CodeKind if k.value == token), None)

    if wanted is None:
        return list(files)
    return [f for f in files if f.kind is wanted]
