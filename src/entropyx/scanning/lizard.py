"""Adapter for the external ``lizard`` complexity analyzer.

lizard is run as a subprocess with ``--csv``; each output row describes one
function. Rows are grouped by file into an average cyclomatic complexity
and smell counts bucketed by per-function CCN.
"""

import csv
import io
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..config import DEFAULT_SMELL_THRESHOLDS, SmellThresholds
from ..exceptions import AnalyzerError
from ..logging_config import get_logger

logger = get_logger(__name__)

LIZARD_EXECUTABLE = "lizard"

# lizard --csv columns: NLOC, CCN, tokens, params, length, location, file, ...
_CCN_COLUMN = 1
_FILE_COLUMN = 6


@dataclass(frozen=True)
class FileComplexity:
    """Per-file summary of lizard's per-function results."""

    avg_cyclomatic_complexity: float
    smells_high: int
    smells_medium: int
    smells_low: int
    function_count: int


def parse_csv_output(
    output: str,
    root: str,
    thresholds: SmellThresholds = DEFAULT_SMELL_THRESHOLDS,
) -> dict[str, FileComplexity]:
    """Group lizard CSV rows by file path relative to ``root``.

    Rows that are too short or have a non-numeric CCN (such as a header)
    are skipped.
    """
    by_file: dict[str, list[float]] = {}
    for row in csv.reader(io.StringIO(output)):
        if len(row) <= _FILE_COLUMN:
            continue
        try:
            ccn = float(row[_CCN_COLUMN])
        except ValueError:
            continue
        rel = os.path.relpath(os.path.join(root, row[_FILE_COLUMN]), root).replace(os.sep, "/")
        by_file.setdefault(rel, []).append(ccn)

    return {path: summarize(values, thresholds) for path, values in by_file.items()}


def summarize(ccns: list[float], thresholds: SmellThresholds = DEFAULT_SMELL_THRESHOLDS) -> FileComplexity:
    return FileComplexity(
        avg_cyclomatic_complexity=sum(ccns) / len(ccns) if ccns else 0.0,
        smells_high=sum(1 for c in ccns if c > thresholds.high),
        smells_medium=sum(1 for c in ccns if thresholds.medium < c <= thresholds.high),
        smells_low=sum(1 for c in ccns if thresholds.low < c <= thresholds.medium),
        function_count=len(ccns),
    )


class LizardAnalyzer:
    """Runs lizard over a directory tree."""

    def __init__(
        self,
        timeout: int = 300,
        thresholds: SmellThresholds = DEFAULT_SMELL_THRESHOLDS,
        executable: str = LIZARD_EXECUTABLE,
    ):
        self.timeout = timeout
        self.thresholds = thresholds
        self.executable = executable
        self._warned_missing = False

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def analyze_directory(self, path: Path) -> dict[str, FileComplexity]:
        """Return complexity per relative file path.

        A missing lizard executable or an unsuccessful run yields an empty
        mapping (files then get zero complexity). A timeout raises
        AnalyzerError so the caller can fail that scan.
        """
        if not self.is_available():
            if not self._warned_missing:
                logger.warning("lizard not found on PATH; complexity metrics will be zero")
                self._warned_missing = True
            return {}

        root = str(Path(path).resolve())
        try:
            result = subprocess.run(
                [self.executable, "--csv", root],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise AnalyzerError(self.executable, f"timed out after {self.timeout}s on {root}")
        except OSError as e:
            logger.warning("Could not run lizard: %s", e)
            return {}

        if result.returncode != 0 and not result.stdout.strip():
            logger.warning("lizard exited with %d: %s", result.returncode, result.stderr.strip())
            return {}

        parsed = parse_csv_output(result.stdout, root, self.thresholds)
        logger.debug("lizard analyzed %d files under %s", len(parsed), root)
        return parsed
