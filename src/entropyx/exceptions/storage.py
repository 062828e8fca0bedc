"""Storage and interchange exceptions: metrics database, snapshot documents."""

from pathlib import Path

from .base import EntropyXError


class StorageError(EntropyXError):
    """Raised when the metrics database cannot be read or written."""

    def __init__(self, db_path: Path, reason: str):
        super().__init__(
            f"Metrics store error: {db_path}",
            details={"db": str(db_path), "reason": reason},
        )
        self.db_path = db_path
        self.reason = reason


class SnapshotFormatError(EntropyXError):
    """Raised when a snapshot document cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid snapshot: {path}",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason
