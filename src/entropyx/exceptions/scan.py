"""Scan-related exceptions: git access, external analyzer, per-commit failures."""

from typing import Sequence

from .base import EntropyXError


class ScanError(EntropyXError):
    """Base class for errors raised while producing file metrics."""
    pass


class CommitScanError(ScanError):
    """Raised when a single commit cannot be scanned."""

    def __init__(self, commit_hash: str, reason: str):
        super().__init__(
            f"Cannot scan commit {commit_hash[:8]}",
            details={"commit": commit_hash, "reason": reason},
        )
        self.commit_hash = commit_hash
        self.reason = reason


class GitError(ScanError):
    """Raised when a git subprocess fails."""

    def __init__(self, command: Sequence[str], reason: str):
        super().__init__(
            f"git command failed: {' '.join(command)}",
            details={"reason": reason},
        )
        self.command = list(command)
        self.reason = reason


class AnalyzerError(ScanError):
    """Raised when the external complexity analyzer produces unusable output."""

    def __init__(self, tool: str, reason: str):
        super().__init__(f"Analyzer '{tool}' failed", details={"tool": tool, "reason": reason})
        self.tool = tool
        self.reason = reason
