"""
Append-only history ledger.

Each accepted change to a record appends one snapshot with the next
per-record version number. Versions for a record id start at 1 and never
skip or repeat; the UNIQUE (record_id, version) constraint turns any
violation into a StorageWriteError instead of a silent duplicate.

append() reads the current maximum and inserts in two statements, so it
must run inside the same JetraayDB.transaction() as the record upsert.
"""

import sqlite3
from datetime import datetime

from pydantic import ValidationError

from jetraay.errors import SerializationError
from jetraay.observability import get_logger
from jetraay.schema import HistoryEntry, Record
from jetraay.store.db import JetraayDB

logger = get_logger("history_ledger")


def _row_to_entry(row: sqlite3.Row) -> HistoryEntry:
    try:
        snapshot = Record.from_snapshot(row["snapshot"])
    except ValidationError as e:
        raise SerializationError(
            record_id=row["record_id"],
            version=row["version"],
            underlying_error=str(e),
        ) from e
    try:
        timestamp = datetime.fromisoformat(row["created_at"])
    except (TypeError, ValueError) as e:
        raise SerializationError(
            record_id=row["record_id"],
            version=row["version"],
            underlying_error=f"bad timestamp: {e}",
        ) from e
    return HistoryEntry(
        sequence=row["sequence"],
        record_id=row["record_id"],
        version=row["version"],
        snapshot=snapshot,
        timestamp=timestamp,
    )


class HistoryLedger:
    """
    Versioned snapshots of records.

    Usage:
        ledger = HistoryLedger(db)
        with db.transaction():
            version = ledger.append(record)
            store.upsert(record)
        entries = ledger.list_for(record.id)  # newest first
    """

    def __init__(self, db: JetraayDB) -> None:
        self.db = db

    def latest_version(self, record_id: str) -> int:
        """Highest recorded version for the id, 0 when there is none."""
        row = self.db.query_one(
            "SELECT MAX(version) AS version FROM record_history WHERE record_id = ?",
            (record_id,),
            operation="latest_version",
        )
        if row is None or row["version"] is None:
            return 0
        return row["version"]

    def append(self, record: Record) -> int:
        """
        Record a snapshot of ``record`` as its next version.

        Returns:
            The assigned version number
        """
        with self.db.transaction():
            version = self.latest_version(record.id) + 1
            self.db.insert(
                """
                INSERT INTO record_history (record_id, version, snapshot)
                VALUES (?, ?, ?)
                """,
                (record.id, version, record.to_snapshot()),
                operation="append_history",
            )
        logger.info("history_appended", record_id=record.id, version=version)
        return version

    def list_for(self, record_id: str) -> list[HistoryEntry]:
        """
        All snapshots for a record.

        Returns:
            HistoryEntry objects ordered by version, most recent first
        """
        rows = self.db.query(
            """
            SELECT * FROM record_history
            WHERE record_id = ?
            ORDER BY version DESC
            """,
            (record_id,),
            operation="list_history",
        )
        return [_row_to_entry(row) for row in rows]

    def get(self, record_id: str, version: int) -> HistoryEntry | None:
        """Get one snapshot, or None if that version was never recorded."""
        row = self.db.query_one(
            "SELECT * FROM record_history WHERE record_id = ? AND version = ?",
            (record_id, version),
            operation="get_history",
        )
        if row is None:
            return None
        return _row_to_entry(row)
