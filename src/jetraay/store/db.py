"""
SQLite storage backend for Jetraay.

This module owns the on-disk database holding saved request presets and
their change history. Higher layers (RecordStore, HistoryLedger) issue SQL
through this class and never touch sqlite3 directly.

Design Principles:
    - One owned connection for the lifetime of the store
    - Atomic: transaction() groups statements so they commit or roll back
      together, and takes the write lock up front (BEGIN IMMEDIATE)
    - Idempotent schema: opening an existing database is a no-op
    - Loud: every sqlite3 failure surfaces as a StorageError

Tables:
    - records: Current state of each preset, one row per id
    - record_history: Append-only snapshots, versioned per record id
    - schema_version: Schema bookkeeping

record_history.record_id refers to records.id logically only. There is no
foreign key, so deleting a record leaves its history in place and a revert
can bring the record back.
"""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Generator, Sequence

from jetraay.errors import StorageConnectionError, StorageReadError, StorageWriteError
from jetraay.observability import get_logger

logger = get_logger("db")

# Schema version for migrations
SCHEMA_VERSION = 1

# SQL for creating tables
CREATE_TABLES_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

-- Current state of each preset
CREATE TABLE IF NOT EXISTS records (
    id TEXT PRIMARY KEY,
    name TEXT,
    method TEXT NOT NULL,
    url TEXT NOT NULL,
    headers TEXT NOT NULL DEFAULT '[]',
    body TEXT
);

-- Append-only history, one row per accepted change
CREATE TABLE IF NOT EXISTS record_history (
    sequence INTEGER PRIMARY KEY AUTOINCREMENT,
    record_id TEXT NOT NULL,
    version INTEGER NOT NULL,
    snapshot TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
    UNIQUE (record_id, version)
);

CREATE INDEX IF NOT EXISTS idx_record_history_record_id ON record_history(record_id);
"""


def now_iso() -> str:
    """Get current UTC time in ISO format."""
    return datetime.now(UTC).isoformat()


class JetraayDB:
    """
    SQLite database for Jetraay storage.

    Usage:
        db = JetraayDB("jetraay.db")
        with db.transaction():
            db.execute("INSERT ...", params)
            db.execute("UPDATE ...", params)
        db.close()

    Or use as context manager:
        with JetraayDB("jetraay.db") as db:
            ...

    The connection runs in autocommit mode: a statement outside
    transaction() commits on its own.
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Open (and if needed create) the database.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
                     Missing parent directories are created.
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._in_transaction = False
        self._connect()
        self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        try:
            if str(self.db_path) != ":memory:":
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                isolation_level=None,
            )
            self._conn.row_factory = sqlite3.Row
        except (sqlite3.Error, OSError) as e:
            raise StorageConnectionError(
                db_path=str(self.db_path),
                operation="connect",
                message=f"Failed to connect to database: {e}",
            ) from e

    def _init_schema(self) -> None:
        """Initialize database schema if needed."""
        try:
            with self._lock:
                self._conn.executescript(CREATE_TABLES_SQL)
                row = self._conn.execute(
                    "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
                ).fetchone()
                if row is None:
                    self._conn.execute(
                        "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                        (SCHEMA_VERSION, now_iso()),
                    )
        except sqlite3.Error as e:
            raise StorageWriteError(
                operation="init_schema",
                underlying_error=str(e),
            ) from e

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def execute(self, sql: str, params: Sequence[Any] = (), operation: str = "execute") -> int:
        """
        Run a write statement.

        Returns:
            Number of rows affected
        """
        with self._lock:
            try:
                return self._conn.execute(sql, params).rowcount
            except sqlite3.Error as e:
                raise StorageWriteError(
                    operation=operation,
                    underlying_error=str(e),
                ) from e

    def insert(self, sql: str, params: Sequence[Any] = (), operation: str = "insert") -> int:
        """Run an INSERT and return the new row id."""
        with self._lock:
            try:
                return self._conn.execute(sql, params).lastrowid
            except sqlite3.Error as e:
                raise StorageWriteError(
                    operation=operation,
                    underlying_error=str(e),
                ) from e

    def query(
        self, sql: str, params: Sequence[Any] = (), operation: str = "query"
    ) -> list[sqlite3.Row]:
        """Run a read statement and return every row."""
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageReadError(
                    operation=operation,
                    underlying_error=str(e),
                ) from e

    def query_one(
        self, sql: str, params: Sequence[Any] = (), operation: str = "query"
    ) -> sqlite3.Row | None:
        """Run a read statement and return the first row, if any."""
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise StorageReadError(
                    operation=operation,
                    underlying_error=str(e),
                ) from e

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """
        Context manager for database transactions.

        Statements inside the block commit together or not at all. A nested
        transaction() joins the enclosing one. Other threads using this
        store block until the transaction ends.
        """
        with self._lock:
            if self._in_transaction:
                yield
                return

            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageWriteError(
                    operation="begin",
                    underlying_error=str(e),
                ) from e

            self._in_transaction = True
            try:
                yield
            except BaseException:
                self._in_transaction = False
                self._rollback()
                raise

            self._in_transaction = False
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback()
                raise StorageWriteError(
                    operation="commit",
                    underlying_error=str(e),
                ) from e

    def _rollback(self) -> None:
        """Roll back, keeping the caller's exception as the one raised."""
        try:
            self._conn.rollback()
        except sqlite3.Error as e:
            logger.warning("rollback_failed", db_path=str(self.db_path), error=str(e))

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "JetraayDB":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()
