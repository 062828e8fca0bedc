"""Enumerate commits and export trees via git subprocesses."""

import io
import subprocess
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..exceptions import GitError
from ..logging_config import get_logger
from ..models import CommitInfo

logger = get_logger(__name__)

# hash | author date (strict ISO 8601) | space-separated parent hashes
_LOG_FORMAT = "--format=%H|%aI|%P"


class GitTraversal:
    """Read commit metadata and file trees from a local git repository."""

    def __init__(self, repo_path: str, timeout: int = 60):
        self.repo_path = str(Path(repo_path).resolve())
        self.timeout = timeout

    def is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def _run(self, *args: str, text: bool = True):
        cmd = ["git", "-C", self.repo_path, *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=text, timeout=self.timeout)
        except FileNotFoundError:
            raise GitError(cmd, "git executable not found")
        except subprocess.TimeoutExpired:
            raise GitError(cmd, f"timed out after {self.timeout}s")

        if result.returncode != 0:
            stderr = result.stderr if text else result.stderr.decode("utf-8", "replace")
            raise GitError(cmd, stderr.strip() or f"exit status {result.returncode}")
        return result.stdout

    # ── commit enumeration ────────────────────────────────────────

    def get_all_commits(self) -> list[CommitInfo]:
        """All commits reachable from HEAD, newest first."""
        raw = self._run("log", "--topo-order", _LOG_FORMAT, "HEAD")
        commits = parse_log(raw)
        logger.debug("Found %d commits in %s", len(commits), self.repo_path)
        return commits

    def get_head_commit(self) -> Optional[CommitInfo]:
        commits = parse_log(self._run("log", "-n1", _LOG_FORMAT, "HEAD"))
        return commits[0] if commits else None

    def get_tagged_hashes(self) -> set[str]:
        """Commit hashes pointed to by tags (annotated tags are peeled)."""
        raw = self._run("for-each-ref", "refs/tags", "--format=%(objectname) %(*objectname)")
        hashes = set()
        for line in raw.splitlines():
            parts = line.split()
            if parts:
                # Peeled object, when present, is the tagged commit
                hashes.add(parts[-1].lower())
        return hashes

    def get_checkpoint_commits(self) -> list[CommitInfo]:
        """Tagged or merge commits, newest first."""
        tagged = self.get_tagged_hashes()
        return [c for c in self.get_all_commits() if c.hash.lower() in tagged or c.is_merge]

    def get_commits_from(self, start: str) -> list[CommitInfo]:
        """Commits from ``start`` (inclusive, prefix allowed) to HEAD, oldest first.

        Returns an empty list when ``start`` is not in HEAD's history.
        """
        oldest_first = list(reversed(self.get_all_commits()))
        for i, commit in enumerate(oldest_first):
            if commit.hash.startswith(start.lower()):
                return oldest_first[i:]
        logger.warning("Commit %s not found in history of %s", start, self.repo_path)
        return []

    def get_changed_files(self, commit_hash: str) -> list[str]:
        """Paths changed by a commit relative to its first parent."""
        raw = self._run(
            "diff-tree", "--no-commit-id", "--name-only", "-r", "--root", commit_hash
        )
        return [line for line in raw.splitlines() if line.strip()]

    # ── repository info ───────────────────────────────────────────

    def get_repo_info(self) -> tuple[str, str]:
        """Return ``(name, remote_url)``; remote is empty for local-only repos."""
        name = Path(self.repo_path).name
        try:
            remote = self._run("config", "--get", "remote.origin.url").strip()
        except GitError:
            remote = ""
        return name, remote

    # ── tree export ───────────────────────────────────────────────

    def export_tree(self, commit_hash: str, dest: Path) -> list[str]:
        """Write the commit's tree into ``dest`` and return its file paths.

        Uses ``git archive`` so the working copy is never touched; safe to
        call concurrently for different commits.
        """
        data = self._run("archive", "--format=tar", commit_hash, text=False)
        root = dest.resolve()
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tar:
            # Regular files and directories only; symlinks and submodules are skipped
            members = [m for m in tar.getmembers() if m.isfile() or m.isdir()]
            for member in members:
                target = (root / member.name).resolve()
                if target != root and root not in target.parents:
                    raise GitError(["archive", commit_hash], f"unsafe path in archive: {member.name}")
            if hasattr(tarfile, "data_filter"):
                tar.extractall(root, members=members, filter="data")
            else:
                tar.extractall(root, members=members)
            paths = sorted(m.name for m in members if m.isfile())
        logger.debug("Exported %d files of %s to %s", len(paths), commit_hash[:8], dest)
        return paths


def parse_log(raw: str) -> list[CommitInfo]:
    """Parse ``hash|iso-date|parents`` lines into CommitInfo records."""
    commits = []
    for line in raw.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split("|", 2)
        if len(parts) < 2:
            continue
        try:
            timestamp = datetime.fromisoformat(parts[1])
        except ValueError:
            logger.warning("Skipping commit with unparseable date: %s", line)
            continue
        parents = tuple(parts[2].split()) if len(parts) > 2 else ()
        commits.append(CommitInfo(hash=parts[0], timestamp=timestamp, parents=parents))
    return commits
