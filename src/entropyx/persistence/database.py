"""SQLite-backed metrics database: connection lifecycle and schema."""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StorageError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1


class MetricsDB:
    """Manages one connection to the metrics database file.

    Usage::

        with MetricsDB("entropyx.db") as db:
            db.conn.execute("SELECT COUNT(1) FROM commits")
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("MetricsDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), timeout=30)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.row_factory = sqlite3.Row
        except (OSError, sqlite3.Error) as e:
            raise StorageError(self.db_path, str(e))

        self._conn = conn
        try:
            self._migrate()
        except sqlite3.Error as e:
            self.close()
            raise StorageError(self.db_path, f"schema migration failed: {e}")
        logger.debug("Metrics DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "MetricsDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )
        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── commits ──────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS commits (
                hash        TEXT PRIMARY KEY,
                timestamp   TEXT NOT NULL,
                parents     TEXT NOT NULL DEFAULT ''
            )
            """
        )

        # ── file_metrics ─────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS file_metrics (
                commit_hash           TEXT    NOT NULL,
                path                  TEXT    NOT NULL,
                language              TEXT    NOT NULL DEFAULT '',
                sloc                  INTEGER NOT NULL,
                cyclomatic_complexity REAL    NOT NULL,
                maintainability_index REAL    NOT NULL,
                smells_high           INTEGER NOT NULL,
                smells_medium         INTEGER NOT NULL,
                smells_low            INTEGER NOT NULL,
                coupling_proxy        REAL    NOT NULL,
                maintainability_proxy REAL    NOT NULL,
                kind                  TEXT    NOT NULL DEFAULT 'production',
                PRIMARY KEY (commit_hash, path)
            )
            """
        )

        # ── repo_metrics ─────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS repo_metrics (
                commit_hash   TEXT PRIMARY KEY,
                total_files   INTEGER NOT NULL,
                total_sloc    INTEGER NOT NULL,
                entropy_score REAL    NOT NULL
            )
            """
        )

        # ── repos ────────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS repos (
                name       TEXT PRIMARY KEY,
                remote_url TEXT NOT NULL DEFAULT ''
            )
            """
        )

        c.commit()
