"""Commit orchestration."""

from .orchestrator import CommitOrchestrator, ScanBatchResult, ScanFailure

__all__ = ["CommitOrchestrator", "ScanBatchResult", "ScanFailure"]
