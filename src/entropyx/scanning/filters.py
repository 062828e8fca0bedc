"""Which files a scan sees: ignored directories, .exignore, include patterns, code kind."""

from collections.abc import Sequence
from pathlib import Path, PurePath
from typing import Optional, Union

from ..models import CodeKind

EXIGNORE_FILE = ".exignore"
UTILITY_FILE = ".utilityfiles"

# Directory names always excluded from scans (compared case-insensitively)
DEFAULT_IGNORED_DIRS = frozenset(
    name.lower()
    for name in (
        # VCS metadata
        ".git", ".hg", ".svn",
        # Package managers
        "node_modules", "vendor", "packages", ".nuget", "Pods",
        # Build outputs
        "bin", "obj", "out", "dist", "build", "target",
        # Language caches
        "__pycache__", ".gradle", ".m2",
        # IDE artifacts
        ".vs", ".idea", ".vscode",
        # Coverage outputs
        "coverage", ".nyc_output",
        # Framework outputs
        ".next", "DerivedData", ".dart_tool", ".pub-cache",
    )
)


def _parts(rel_path: Union[str, PurePath]) -> list[str]:
    return [p for p in str(rel_path).replace("\\", "/").split("/") if p and p != "."]


def is_dir_ignored(name: str) -> bool:
    return name.lower() in DEFAULT_IGNORED_DIRS


def is_path_ignored(rel_path: Union[str, PurePath]) -> bool:
    """True when any directory segment of the relative path is a default-ignored dir."""
    parts = _parts(rel_path)
    return any(is_dir_ignored(p) for p in parts[:-1])


def load_patterns(root: Union[str, Path], filename: str) -> list[str]:
    """Read glob patterns from ``root/filename``; ``#`` lines and blanks are skipped.

    A missing file yields no patterns.
    """
    path = Path(root) / filename
    if not path.is_file():
        return []
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return [s for s in (line.strip() for line in lines) if s and not s.startswith("#")]


def load_exignore_patterns(root: Union[str, Path]) -> list[str]:
    return load_patterns(root, EXIGNORE_FILE)


def load_utility_patterns(root: Union[str, Path]) -> list[str]:
    return load_patterns(root, UTILITY_FILE)


def match_glob(name: str, pattern: str) -> bool:
    """Case-insensitive match of a single path segment.

    Supports ``*``, ``*suffix``, ``prefix*``, ``.ext`` (any name ending in
    it) and exact names.
    """
    name_l = name.lower()
    pat = pattern.lower()

    if pat == "*":
        return True
    if pat.startswith("*") and "*" not in pat[1:]:
        return name_l.endswith(pat[1:])
    if pat.endswith("*") and "*" not in pat[:-1]:
        return name_l.startswith(pat[:-1])
    if pat.startswith(".") and "*" not in pat:
        return name_l.endswith(pat)
    return name_l == pat


def is_ex_ignored(rel_path: Union[str, PurePath], patterns: Sequence[str]) -> bool:
    """True when any segment (directory or file name) matches any pattern."""
    if not patterns:
        return False
    return any(match_glob(part, pat) for part in _parts(rel_path) for pat in patterns)


def matches_include(rel_path: Union[str, PurePath], include_patterns: Optional[Sequence[str]]) -> bool:
    """True when no include patterns are given, or the file name matches one."""
    if not include_patterns:
        return True
    name = PurePath(str(rel_path).replace("\\", "/")).name
    return any(match_glob(name, pat) for pat in include_patterns)


def classify_kind(rel_path: Union[str, PurePath], utility_patterns: Sequence[str]) -> CodeKind:
    return CodeKind.UTILITY if is_ex_ignored(rel_path, utility_patterns) else CodeKind.PRODUCTION


def parse_patterns(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated pattern option. Empty input means no filter."""
    if not value:
        return None
    patterns = [p.strip() for p in value.split(",") if p.strip()]
    return patterns or None
