"""Read and write commits, file metrics, and repo metrics.

Every public method opens its own connection and closes it on all exit
paths. Inserts are skip-if-exists: a stored row is never overwritten.
"""

import sqlite3
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StorageError
from ..logging_config import get_logger
from ..models import CodeKind, CommitInfo, FileMetrics, RepoMetrics
from ..temporal.trend import HistoryEntry, build_history
from .database import MetricsDB

logger = get_logger(__name__)

_FILE_COLUMNS = (
    "commit_hash, path, language, sloc, cyclomatic_complexity, maintainability_index, "
    "smells_high, smells_medium, smells_low, coupling_proxy, maintainability_proxy, kind"
)


class MetricsStore:
    """Persistent commit history backed by a single SQLite file."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)

    def _db(self) -> MetricsDB:
        return MetricsDB(self.db_path)

    # ── writes ────────────────────────────────────────────────────

    def insert_commit(self, commit: CommitInfo) -> bool:
        """Insert a commit row. Returns False when it already existed."""
        with self._db() as db:
            cur = db.conn.execute(
                "INSERT OR IGNORE INTO commits (hash, timestamp, parents) VALUES (?, ?, ?)",
                _commit_row(commit),
            )
            db.conn.commit()
            return cur.rowcount > 0

    def insert_file_metrics(self, files: Iterable[FileMetrics]) -> int:
        """Insert file metric rows that are not yet stored. Returns rows added."""
        with self._db() as db:
            cur = db.conn.executemany(
                f"INSERT OR IGNORE INTO file_metrics ({_FILE_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [_file_row(f) for f in files],
            )
            db.conn.commit()
            return max(cur.rowcount, 0)

    def insert_repo_metrics(self, metrics: RepoMetrics) -> bool:
        with self._db() as db:
            cur = db.conn.execute(
                "INSERT OR IGNORE INTO repo_metrics (commit_hash, total_files, total_sloc, entropy_score) "
                "VALUES (?, ?, ?, ?)",
                _repo_row(metrics),
            )
            db.conn.commit()
            return cur.rowcount > 0

    def save_scan_result(
        self, commit: CommitInfo, files: Sequence[FileMetrics], repo_metrics: RepoMetrics
    ) -> None:
        """Persist one scanned commit in a single transaction.

        Existence is checked inside the transaction, so re-running a batch
        never duplicates rows. On any failure the whole commit is rolled
        back and StorageError is raised.
        """
        with self._db() as db:
            cur = db.conn.cursor()
            try:
                cur.execute("BEGIN IMMEDIATE")
                cur.execute(
                    "INSERT OR IGNORE INTO commits (hash, timestamp, parents) VALUES (?, ?, ?)",
                    _commit_row(commit),
                )
                if files:
                    cur.executemany(
                        f"INSERT OR IGNORE INTO file_metrics ({_FILE_COLUMNS}) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        [_file_row(f) for f in files],
                    )
                cur.execute(
                    "INSERT OR IGNORE INTO repo_metrics (commit_hash, total_files, total_sloc, entropy_score) "
                    "VALUES (?, ?, ?, ?)",
                    _repo_row(repo_metrics),
                )
                db.conn.commit()
            except sqlite3.Error as e:
                db.conn.rollback()
                raise StorageError(self.db_path, f"failed to save {commit.hash[:8]}: {e}")
        logger.debug("Stored %s (%d files)", commit.hash[:8], len(files))

    def register_repo(self, name: str, remote_url: str = "") -> None:
        with self._db() as db:
            db.conn.execute(
                "INSERT OR IGNORE INTO repos (name, remote_url) VALUES (?, ?)",
                (name, remote_url),
            )
            db.conn.commit()

    def clear(self) -> None:
        """Delete all scanned data. Registered repos are kept."""
        with self._db() as db:
            db.conn.execute("DELETE FROM file_metrics")
            db.conn.execute("DELETE FROM repo_metrics")
            db.conn.execute("DELETE FROM commits")
            db.conn.commit()
        logger.info("Cleared metrics database %s", self.db_path)

    # ── reads ─────────────────────────────────────────────────────

    def commit_exists(self, commit_hash: str) -> bool:
        """True once the commit's repo metrics are stored."""
        with self._db() as db:
            row = db.conn.execute(
                "SELECT 1 FROM repo_metrics WHERE commit_hash = ?", (commit_hash,)
            ).fetchone()
            return row is not None

    def commit_count(self) -> int:
        with self._db() as db:
            return int(db.conn.execute("SELECT COUNT(1) FROM commits").fetchone()[0])

    def get_all_commits(self) -> list[CommitInfo]:
        """All stored commits, oldest first."""
        with self._db() as db:
            rows = db.conn.execute("SELECT hash, timestamp, parents FROM commits").fetchall()
        commits = [_commit_from_row(r) for r in rows]
        # ISO strings with differing offsets do not sort chronologically as text
        commits.sort(key=lambda c: (c.timestamp, c.hash))
        return commits

    def get_commit(self, commit_hash: str) -> Optional[CommitInfo]:
        with self._db() as db:
            row = db.conn.execute(
                "SELECT hash, timestamp, parents FROM commits WHERE hash = ?", (commit_hash,)
            ).fetchone()
        return _commit_from_row(row) if row is not None else None

    def get_all_repo_metrics(self) -> list[RepoMetrics]:
        """All stored repo metrics, ordered by commit hash."""
        with self._db() as db:
            rows = db.conn.execute(
                "SELECT commit_hash, total_files, total_sloc, entropy_score "
                "FROM repo_metrics ORDER BY commit_hash"
            ).fetchall()
        return [_repo_from_row(r) for r in rows]

    def get_repo_metrics(self, commit_hash: str) -> Optional[RepoMetrics]:
        with self._db() as db:
            row = db.conn.execute(
                "SELECT commit_hash, total_files, total_sloc, entropy_score "
                "FROM repo_metrics WHERE commit_hash = ?",
                (commit_hash,),
            ).fetchone()
        return _repo_from_row(row) if row is not None else None

    def get_file_metrics(self, commit_hash: str) -> list[FileMetrics]:
        """File metrics for one commit, ordered by path."""
        with self._db() as db:
            rows = db.conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM file_metrics WHERE commit_hash = ? ORDER BY path",
                (commit_hash,),
            ).fetchall()
        return [_file_from_row(r) for r in rows]

    def get_history(self) -> list[HistoryEntry]:
        """Chronological ``(CommitInfo, RepoMetrics)`` pairs."""
        return build_history(self.get_all_commits(), self.get_all_repo_metrics())

    def list_repos(self) -> list[tuple[str, str]]:
        with self._db() as db:
            rows = db.conn.execute("SELECT name, remote_url FROM repos ORDER BY name").fetchall()
        return [(r["name"], r["remote_url"]) for r in rows]


# ── row mapping ───────────────────────────────────────────────────


def _commit_row(commit: CommitInfo) -> tuple:
    return (commit.hash, commit.timestamp.isoformat(), " ".join(commit.parents))


def _commit_from_row(row: sqlite3.Row) -> CommitInfo:
    return CommitInfo(
        hash=row["hash"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        parents=tuple(row["parents"].split()),
    )


def _file_row(f: FileMetrics) -> tuple:
    return (
        f.commit_hash,
        f.path,
        f.language,
        f.sloc,
        f.cyclomatic_complexity,
        f.maintainability_index,
        f.smells_high,
        f.smells_medium,
        f.smells_low,
        f.coupling_proxy,
        f.maintainability_proxy,
        f.kind.value,
    )


def _file_from_row(row: sqlite3.Row) -> FileMetrics:
    return FileMetrics(
        commit_hash=row["commit_hash"],
        path=row["path"],
        language=row["language"],
        sloc=int(row["sloc"]),
        cyclomatic_complexity=float(row["cyclomatic_complexity"]),
        maintainability_index=float(row["maintainability_index"]),
        smells_high=int(row["smells_high"]),
        smells_medium=int(row["smells_medium"]),
        smells_low=int(row["smells_low"]),
        coupling_proxy=float(row["coupling_proxy"]),
        maintainability_proxy=float(row["maintainability_proxy"]),
        kind=CodeKind.parse(row["kind"]),
    )


def _repo_row(m: RepoMetrics) -> tuple:
    return (m.commit_hash, m.total_files, m.total_sloc, m.entropy_score)


def _repo_from_row(row: sqlite3.Row) -> RepoMetrics:
    return RepoMetrics(
        commit_hash=row["commit_hash"],
        total_files=int(row["total_files"]),
        total_sloc=int(row["total_sloc"]),
        entropy_score=float(row["entropy_score"]),
    )
