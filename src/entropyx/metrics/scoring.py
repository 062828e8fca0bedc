"""Per-file composite scores: heatmap badness and focus-weighted refactor priority.

Every score here is relative to the batch it was computed from. Each metric
is divided by its maximum across the batch, so the same file can score
differently in a different snapshot. Batches of fewer than two files have
nothing to compare against and score zero throughout.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config import FOCUS_DIMENSIONS
from ..logging_config import get_logger
from ..models import SMELL_WEIGHT_HIGH, SMELL_WEIGHT_LOW, SMELL_WEIGHT_MEDIUM, FileMetrics

logger = get_logger(__name__)


@dataclass(frozen=True)
class SmellWeights:
    """Weights applied to smell counts by severity."""

    high: float = SMELL_WEIGHT_HIGH
    medium: float = SMELL_WEIGHT_MEDIUM
    low: float = SMELL_WEIGHT_LOW


DEFAULT_SMELL_WEIGHTS = SmellWeights()


def _normalize(values: np.ndarray) -> np.ndarray:
    """Scale by the batch maximum. All zeros when the maximum is not positive."""
    values = np.clip(values, 0.0, None)
    peak = float(values.max()) if values.size else 0.0
    if peak <= 0.0:
        return np.zeros_like(values)
    return values / peak


def _column(files: Sequence[FileMetrics], attr: str) -> np.ndarray:
    return np.array([float(getattr(f, attr)) for f in files], dtype=float)


def _smell_column(files: Sequence[FileMetrics], weights: SmellWeights) -> np.ndarray:
    return np.array(
        [
            weights.high * f.smells_high + weights.medium * f.smells_medium + weights.low * f.smells_low
            for f in files
        ],
        dtype=float,
    )


def compute_badness(
    files: Sequence[FileMetrics], weights: SmellWeights = DEFAULT_SMELL_WEIGHTS
) -> list[float]:
    """Heatmap badness, one value per file in input order.

    ``badness = norm(cc) + norm(sloc) + weighted_smells``. Always >= 0.
    """
    if len(files) < 2:
        return [0.0] * len(files)

    cc = _normalize(_column(files, "cyclomatic_complexity"))
    sloc = _normalize(_column(files, "sloc"))
    smells = np.clip(_smell_column(files, weights), 0.0, None)

    return (cc + sloc + smells).tolist()


def heat_values(badness: Sequence[float]) -> list[float]:
    """Map badness scores into [0, 1] for display."""
    if not badness:
        return []
    return _normalize(np.asarray(badness, dtype=float)).tolist()


def parse_focus(focus: Optional[str]) -> dict[str, float]:
    """Resolve a focus string into per-dimension weights summing to 1.

    Accepts ``overall``, any single dimension, or a comma-separated
    combination such as ``"cc,smells"``. Repeated tokens add weight.
    Unknown tokens are ignored; when nothing valid remains the overall
    profile is used.

    >>> parse_focus("cc,smells")
    {'cc': 0.5, 'smells': 0.5}
    """
    raw: dict[str, float] = {}
    for token in (focus or "").split(","):
        token = token.strip().lower()
        if not token:
            continue
        if token == "overall":
            for dim in FOCUS_DIMENSIONS:
                raw[dim] = raw.get(dim, 0.0) + 1.0 / len(FOCUS_DIMENSIONS)
        elif token in FOCUS_DIMENSIONS:
            raw[token] = raw.get(token, 0.0) + 1.0
        else:
            logger.debug("Ignoring unknown focus token %r", token)

    if not raw:
        if focus:
            logger.debug("No valid focus in %r, using overall", focus)
        raw = {dim: 1.0 for dim in FOCUS_DIMENSIONS}

    total = sum(raw.values())
    return {dim: w / total for dim, w in raw.items()}


def _dimension_values(files: Sequence[FileMetrics], dim: str) -> np.ndarray:
    if dim == "sloc":
        return _normalize(_column(files, "sloc"))
    if dim == "cc":
        return _normalize(_column(files, "cyclomatic_complexity"))
    if dim == "mi":
        # Lower maintainability means higher refactor priority
        return 1.0 - _normalize(_column(files, "maintainability_index"))
    if dim == "smells":
        return _normalize(_smell_column(files, DEFAULT_SMELL_WEIGHTS))
    if dim == "coupling":
        return _normalize(_column(files, "coupling_proxy"))
    raise ValueError(f"Unknown focus dimension: {dim}")


def compute_refactor_scores(files: Sequence[FileMetrics], focus: Optional[str] = "overall") -> list[float]:
    """Refactor priority, one value per file in input order.

    ``score = Σ weight_d · value_d`` over the dimensions selected by
    ``focus``. Raising a single raw metric never lowers a file's score
    under a focus that weights that metric.
    """
    if len(files) < 2:
        return [0.0] * len(files)

    weights = parse_focus(focus)
    scores = np.zeros(len(files), dtype=float)
    for dim, weight in weights.items():
        scores += weight * _dimension_values(files, dim)
    return scores.tolist()


def rank_files(
    files: Sequence[FileMetrics], scores: Sequence[float], top: Optional[int] = None
) -> list[tuple[FileMetrics, float]]:
    """Pair files with scores, highest first. Ties keep path order."""
    if len(files) != len(scores):
        raise ValueError("files and scores must have the same length")
    ranked = sorted(zip(files, scores), key=lambda pair: (-pair[1], pair[0].path))
    return ranked[:top] if top is not None else ranked
