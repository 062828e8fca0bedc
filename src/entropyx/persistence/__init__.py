"""Persistent commit history (SQLite)."""

from .database import MetricsDB
from .store import MetricsStore

__all__ = ["MetricsDB", "MetricsStore"]
