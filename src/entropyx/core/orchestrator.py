"""Scan a batch of commits in parallel and store the results in commit order.

Three phases:
    1. Discovery (sequential): skip commits the store already has.
    2. Execution (parallel): scan the remaining commits on a thread pool.
       Workers only compute; results are drained by the calling thread.
    3. Commit (sequential): sort results by (timestamp, hash) and persist
       each commit in its own transaction.

A failure in phase 2 or 3 affects only that commit. It is reported in
``ScanBatchResult.failed`` and, since nothing was stored for it, is picked
up again by the next run.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from ..exceptions import EntropyXError
from ..logging_config import get_logger
from ..models import CommitInfo, FileMetrics, RepoMetrics, ScanResult

logger = get_logger(__name__)

# Default worker count: CPU count, capped at 8 (each scan also spawns git and lizard)
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)


class CommitScanner(Protocol):
    def scan_commit(
        self, commit: CommitInfo, repo_path: Union[str, Path]
    ) -> tuple[list[FileMetrics], RepoMetrics]: ...


class CommitStore(Protocol):
    def commit_exists(self, commit_hash: str) -> bool: ...

    def save_scan_result(
        self, commit: CommitInfo, files: Sequence[FileMetrics], repo_metrics: RepoMetrics
    ) -> None: ...


@dataclass(frozen=True)
class ScanFailure:
    commit: CommitInfo
    reason: str
    stage: str  # "scan" or "store"


@dataclass
class ScanBatchResult:
    """Outcome of one orchestrator run.

    ``stored`` is in chronological order.
    """

    skipped: list[CommitInfo] = field(default_factory=list)
    stored: list[ScanResult] = field(default_factory=list)
    failed: list[ScanFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.skipped) + len(self.stored) + len(self.failed)


OnCommit = Callable[[CommitInfo, RepoMetrics], None]
OnProgress = Callable[[int, int, CommitInfo], None]


class CommitOrchestrator:
    """Coordinates scanning and storage for a batch of commits."""

    def __init__(
        self,
        store: CommitStore,
        scanner: CommitScanner,
        repo_path: Union[str, Path],
        max_workers: Optional[int] = None,
        on_commit: Optional[OnCommit] = None,
        on_progress: Optional[OnProgress] = None,
    ):
        self.store = store
        self.scanner = scanner
        self.repo_path = repo_path
        self.max_workers = max_workers or _DEFAULT_WORKERS
        self.on_commit = on_commit
        self.on_progress = on_progress

    def run(self, commits: Iterable[CommitInfo]) -> ScanBatchResult:
        result = ScanBatchResult()

        to_scan = self._discover(commits, result)
        if not to_scan:
            logger.info("Nothing to scan (%d already stored)", len(result.skipped))
            return result

        scanned = self._execute(to_scan, result)
        self._commit(scanned, result)

        logger.info(
            "Scan batch done: %d stored, %d skipped, %d failed",
            len(result.stored),
            len(result.skipped),
            len(result.failed),
        )
        return result

    # ── phase 1 ───────────────────────────────────────────────────

    def _discover(self, commits: Iterable[CommitInfo], result: ScanBatchResult) -> list[CommitInfo]:
        seen: set[str] = set()
        to_scan = []
        for commit in commits:
            if commit.hash in seen:
                continue
            seen.add(commit.hash)
            if self.store.commit_exists(commit.hash):
                result.skipped.append(commit)
            else:
                to_scan.append(commit)

        if result.skipped:
            logger.info("Skipping %d already-scanned commits", len(result.skipped))
        return to_scan

    # ── phase 2 ───────────────────────────────────────────────────

    def _scan_one(self, commit: CommitInfo) -> ScanResult:
        files, repo_metrics = self.scanner.scan_commit(commit, self.repo_path)
        return ScanResult(commit=commit, files=tuple(files), repo_metrics=repo_metrics)

    def _execute(self, to_scan: list[CommitInfo], result: ScanBatchResult) -> list[ScanResult]:
        total = len(to_scan)
        workers = max(1, min(self.max_workers, total))
        logger.debug("Scanning %d commits with %d workers", total, workers)

        scanned: list[ScanResult] = []
        done = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_commit = {executor.submit(self._scan_one, c): c for c in to_scan}
            for future in as_completed(future_to_commit):
                commit = future_to_commit[future]
                done += 1
                try:
                    scanned.append(future.result())
                except Exception as e:
                    # One broken commit must not abort the batch
                    logger.warning("Failed to scan %s: %s", commit.short_hash, e)
                    result.failed.append(ScanFailure(commit, str(e), "scan"))
                if self.on_progress is not None:
                    self.on_progress(done, total, commit)
        return scanned

    # ── phase 3 ───────────────────────────────────────────────────

    def _commit(self, scanned: list[ScanResult], result: ScanBatchResult) -> None:
        scanned.sort(key=lambda r: (r.commit.timestamp, r.commit.hash))
        for item in scanned:
            try:
                self.store.save_scan_result(item.commit, item.files, item.repo_metrics)
            except EntropyXError as e:
                logger.warning("Failed to store %s: %s", item.commit.short_hash, e)
                result.failed.append(ScanFailure(item.commit, str(e), "store"))
                continue
            result.stored.append(item)
            if self.on_commit is not None:
                self.on_commit(item.commit, item.repo_metrics)
