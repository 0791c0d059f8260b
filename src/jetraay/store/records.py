"""
Current-state table for saved request presets.

RecordStore is plain CRUD over the records table. It knows nothing about
history: the write path in PresetEngine decides when a save also appends to
the ledger, and rename() bypasses history entirely.
"""

import json
import sqlite3

from jetraay.errors import RecordNotFoundError
from jetraay.observability import get_logger
from jetraay.schema import Record
from jetraay.store.db import JetraayDB

logger = get_logger("record_store")


def encode_headers(headers: list[str]) -> str:
    """Serialize a header list for the headers column."""
    return json.dumps(list(headers))


def decode_headers(raw: str | None, record_id: str = "") -> list[str]:
    """
    Decode the headers column.

    A corrupt value degrades to an empty list so one bad row does not make
    the whole table unreadable.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("corrupt_headers", record_id=record_id, error=str(e))
        return []
    if not isinstance(data, list) or not all(isinstance(h, str) for h in data):
        logger.warning("corrupt_headers", record_id=record_id, error="not a list of strings")
        return []
    return data


def _row_to_record(row: sqlite3.Row) -> Record:
    return Record(
        id=row["id"],
        name=row["name"],
        method=row["method"],
        url=row["url"],
        headers=decode_headers(row["headers"], row["id"]),
        body=row["body"],
    )


class RecordStore:
    """
    CRUD over the records table, keyed by record id.

    Usage:
        store = RecordStore(db)
        store.upsert(record)
        store.rename(record.id, "Login")
        store.delete(record.id)
    """

    def __init__(self, db: JetraayDB) -> None:
        self.db = db

    def upsert(self, record: Record) -> None:
        """Insert the record, or replace every field of the existing row."""
        self.db.execute(
            """
            INSERT INTO records (id, name, method, url, headers, body)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                method = excluded.method,
                url = excluded.url,
                headers = excluded.headers,
                body = excluded.body
            """,
            (
                record.id,
                record.name,
                record.method,
                record.url,
                encode_headers(record.headers),
                record.body,
            ),
            operation="upsert_record",
        )

    def get(self, record_id: str) -> Record | None:
        """
        Get a record by id.

        Returns:
            Record or None if not found
        """
        row = self.db.query_one(
            "SELECT * FROM records WHERE id = ?",
            (record_id,),
            operation="get_record",
        )
        if row is None:
            return None
        return _row_to_record(row)

    def require(self, record_id: str) -> Record:
        """Like get(), but a missing record is an error."""
        record = self.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id=record_id)
        return record

    def list(self) -> list[Record]:
        """Every stored record, each exactly once."""
        rows = self.db.query(
            "SELECT * FROM records ORDER BY name IS NULL, name, id",
            operation="list_records",
        )
        return [_row_to_record(row) for row in rows]

    def delete(self, record_id: str) -> bool:
        """
        Remove the record row. History rows are left untouched.

        Returns:
            True if a row was removed; deleting a missing id is not an error
        """
        removed = self.db.execute(
            "DELETE FROM records WHERE id = ?",
            (record_id,),
            operation="delete_record",
        )
        return removed > 0

    def rename(self, record_id: str, new_name: str | None) -> None:
        """
        Change only the display name.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        updated = self.db.execute(
            "UPDATE records SET name = ? WHERE id = ?",
            (new_name, record_id),
            operation="rename_record",
        )
        if updated == 0:
            raise RecordNotFoundError(record_id=record_id)
