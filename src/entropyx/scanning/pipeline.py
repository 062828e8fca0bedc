"""Produce FileMetrics for a directory or for the tree of a git commit.

Usage:
    pipeline = ScanPipeline(LizardAnalyzer())
    files = pipeline.scan_directory(Path("."))
    files, repo_metrics = pipeline.scan_commit(commit, "/path/to/repo")
"""

import math
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union

from ..exceptions import AnalyzerError, CommitScanError, GitError, InvalidPathError
from ..logging_config import get_logger
from ..metrics.aggregation import aggregate
from ..models import CommitInfo, FileMetrics, RepoMetrics
from ..temporal.git import GitTraversal
from .coupling import count_dependencies
from .filters import (
    classify_kind,
    is_dir_ignored,
    is_ex_ignored,
    load_exignore_patterns,
    load_utility_patterns,
    matches_include,
)
from .languages import detect_language
from .lizard import FileComplexity, LizardAnalyzer
from .sloc import count_sloc

logger = get_logger(__name__)

# Files with a NUL byte in their first block are treated as binary
_BINARY_SNIFF_BYTES = 8192


def maintainability_index(sloc: int, avg_complexity: float) -> float:
    """Simplified maintainability index in [0, 100] (no Halstead volume).

    ``MI = max(0, (171 - 0.23·CC - 16.2·ln(max(1, sloc))) · 100 / 171)``
    """
    mi = (171.0 - 0.23 * avg_complexity - 16.2 * math.log(max(1, sloc))) * 100.0 / 171.0
    return max(0.0, mi)


def maintainability_proxy(mi: float) -> float:
    """Inverse of the maintainability index scaled to [0, 1]; higher is worse."""
    return min(1.0, max(0.0, (100.0 - mi) / 100.0))


def _read_lines(path: Path) -> Optional[list[str]]:
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None
    if b"\x00" in data[:_BINARY_SNIFF_BYTES]:
        return []
    return data.decode("utf-8", errors="replace").splitlines()


class ScanPipeline:
    """Turns a file tree into FileMetrics records."""

    def __init__(self, analyzer: Optional[LizardAnalyzer] = None, git_timeout: int = 60):
        self.analyzer = analyzer
        self.git_timeout = git_timeout

    def scan_directory(
        self,
        path: Union[str, Path],
        include_patterns: Optional[Sequence[str]] = None,
        commit_hash: str = "",
        pattern_root: Optional[Union[str, Path]] = None,
        source_only: bool = False,
    ) -> list[FileMetrics]:
        """Scan every non-ignored file under ``path``.

        Args:
            path: Directory to scan
            include_patterns: File-name globs; None means all files
            commit_hash: Hash stamped on each record (empty outside git)
            pattern_root: Where ``.exignore``/``.utilityfiles`` are read
                from; defaults to ``path``
            source_only: Drop files without a recognized language

        Returns:
            FileMetrics sorted by relative path
        """
        root = Path(path)
        if not root.is_dir():
            raise InvalidPathError(root, "not a directory")

        patterns_from = Path(pattern_root) if pattern_root is not None else root
        exignore = load_exignore_patterns(patterns_from)
        utility = load_utility_patterns(patterns_from)

        complexity = self.analyzer.analyze_directory(root) if self.analyzer is not None else {}
        complexity_lower = {k.lower(): v for k, v in complexity.items()}

        results = []
        for rel_path in self._walk(root):
            if is_ex_ignored(rel_path, exignore) or not matches_include(rel_path, include_patterns):
                continue
            language = detect_language(rel_path)
            if source_only and not language:
                continue

            lines = _read_lines(root / rel_path)
            if lines is None:
                continue

            lizard_result = complexity.get(rel_path) or complexity_lower.get(rel_path.lower())
            results.append(
                self._file_metrics(
                    commit_hash, rel_path, language, lines, lizard_result, classify_kind(rel_path, utility)
                )
            )

        logger.debug("Scanned %d files under %s", len(results), root)
        return results

    def scan_commit(
        self, commit: CommitInfo, repo_path: Union[str, Path]
    ) -> tuple[list[FileMetrics], RepoMetrics]:
        """Export the commit's tree to a temporary directory and scan it.

        Only files in a recognized language are kept. Ignore and utility
        patterns come from the repository's working copy so every commit is
        filtered the same way.
        """
        git = GitTraversal(str(repo_path), timeout=self.git_timeout)
        try:
            with tempfile.TemporaryDirectory(prefix=f"entropyx_{commit.short_hash}_") as tmp:
                tree = Path(tmp)
                git.export_tree(commit.hash, tree)
                files = self.scan_directory(
                    tree, commit_hash=commit.hash, pattern_root=repo_path, source_only=True
                )
        except (GitError, AnalyzerError) as e:
            raise CommitScanError(commit.hash, e.reason)
        except OSError as e:
            raise CommitScanError(commit.hash, str(e))
        return files, aggregate(files, commit.hash)

    def list_languages(
        self, path: Union[str, Path], include_patterns: Optional[Sequence[str]] = None
    ) -> list[tuple[str, str]]:
        """``(language, relative_path)`` for every recognized source file.

        Applies the same ignore and include filters as ``scan_directory`` but
        reads no file contents. Sorted by language, then path.
        """
        root = Path(path)
        if not root.is_dir():
            raise InvalidPathError(root, "not a directory")
        exignore = load_exignore_patterns(root)
        found = []
        for rel_path in self._walk(root):
            if is_ex_ignored(rel_path, exignore) or not matches_include(rel_path, include_patterns):
                continue
            language = detect_language(rel_path)
            if language:
                found.append((language, rel_path))
        return sorted(found)

    @staticmethod
    def _walk(root: Path) -> list[str]:
        """Relative POSIX paths of all files, pruning default-ignored directories."""
        found = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not is_dir_ignored(d))
            rel_dir = Path(dirpath).relative_to(root)
            for name in sorted(filenames):
                found.append((rel_dir / name).as_posix())
        return sorted(found)

    @staticmethod
    def _file_metrics(
        commit_hash: str,
        rel_path: str,
        language: str,
        lines: list[str],
        lizard_result: Optional[FileComplexity],
        kind,
    ) -> FileMetrics:
        sloc = count_sloc(lines, language)
        avg_cc = lizard_result.avg_cyclomatic_complexity if lizard_result else 0.0
        mi = maintainability_index(sloc, avg_cc)
        return FileMetrics(
            commit_hash=commit_hash,
            path=rel_path,
            language=language,
            sloc=sloc,
            cyclomatic_complexity=avg_cc,
            maintainability_index=mi,
            smells_high=lizard_result.smells_high if lizard_result else 0,
            smells_medium=lizard_result.smells_medium if lizard_result else 0,
            smells_low=lizard_result.smells_low if lizard_result else 0,
            coupling_proxy=float(count_dependencies(lines, language)),
            maintainability_proxy=maintainability_proxy(mi),
            kind=kind,
        )
