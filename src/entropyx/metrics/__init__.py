"""Aggregation and scoring engines."""

from .aggregation import aggregate, compute_entropy, filter_by_kind
from .scoring import (
    DEFAULT_SMELL_WEIGHTS,
    compute_badness,
    compute_refactor_scores,
    heat_values,
    parse_focus,
    rank_files,
)

__all__ = [
    "aggregate",
    "compute_entropy",
    "filter_by_kind",
    "DEFAULT_SMELL_WEIGHTS",
    "compute_badness",
    "compute_refactor_scores",
    "heat_values",
    "parse_focus",
    "rank_files",
]
