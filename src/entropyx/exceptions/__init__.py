"""Exception hierarchy for EntropyX."""

from .base import EntropyXError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .scan import AnalyzerError, CommitScanError, GitError, ScanError
from .storage import SnapshotFormatError, StorageError

__all__ = [
    "EntropyXError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "ScanError",
    "CommitScanError",
    "GitError",
    "AnalyzerError",
    "StorageError",
    "SnapshotFormatError",
]
