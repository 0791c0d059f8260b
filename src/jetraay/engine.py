"""
Preset Engine for Jetraay.

The PresetEngine is the orchestration layer the application talks to. It
owns one database connection for its lifetime and coordinates:
- RecordStore: Current state of each preset
- ChangeDetector: Whether a save is a content change
- HistoryLedger: Versioned snapshots
- RevertEngine: Restoring a snapshot
- CommandExecutor: Sending a preset

Save Flow (save_with_history):
    1. Open a transaction (write lock taken immediately)
    2. Load the stored record for the id
    3. If it is missing or a tracked field changed: append a snapshot
    4. Upsert the record either way
    5. Commit; any failure rolls back both tables

Design Principles:
    - One writer: every write path runs inside JetraayDB.transaction()
    - No caching: each read goes to the database
    - Renames and reverts never create history
"""

from typing import Any

from jetraay.changes import ChangeDetector
from jetraay.errors import RecordNotFoundError
from jetraay.executor import CommandExecutor, CommandOutput, CurlExecutor
from jetraay.observability import get_logger
from jetraay.revert import RevertEngine
from jetraay.schema import HistoryEntry, JetraayConfig, Record
from jetraay.store import HistoryLedger, JetraayDB, RecordStore

logger = get_logger("engine")


class PresetEngine:
    """
    Versioned store of request presets.

    Usage:
        with PresetEngine(load_config()) as engine:
            record_id = engine.create_record("GET", "https://example.com")
            engine.rename_record(record_id, "Example")
            for entry in engine.list_history(record_id):
                print(entry.version, entry.timestamp)

    Attributes:
        config: The configuration the engine was opened with
        db: Storage backend
        records: Current-state table
        ledger: History table
        detector: Change detection policy
        reverter: Snapshot restore
        executor: How send() runs a request
    """

    def __init__(
        self,
        config: JetraayConfig,
        executor: CommandExecutor | None = None,
    ) -> None:
        """
        Open the store.

        Args:
            config: Data directory, database name and history policy
            executor: Request executor for send(); defaults to CurlExecutor
        """
        self.config = config
        self.db = JetraayDB(config.db_path)
        self.records = RecordStore(self.db)
        self.ledger = HistoryLedger(self.db)
        self.detector = ChangeDetector(config.history)
        self.reverter = RevertEngine(self.db, self.records, self.ledger)
        self.executor = executor or CurlExecutor()
        logger.debug("engine_opened", db_path=str(config.db_path))

    def close(self) -> None:
        """Close database connection."""
        self.db.close()

    def __enter__(self) -> "PresetEngine":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Write Path
    # =========================================================================

    def save_with_history(self, record: Record) -> int | None:
        """
        Persist a record, appending a snapshot only for content changes.

        Args:
            record: The full proposed state, including its id

        Returns:
            The new version number, or None if the save changed no tracked
            field and the ledger was left alone
        """
        with self.db.transaction():
            stored = self.records.get(record.id)
            if self.detector.has_changed(stored, record):
                version = self.ledger.append(record)
            else:
                version = None
            self.records.upsert(record)

        if version is None:
            logger.debug("save_deduplicated", record_id=record.id)
        return version

    def create_record(
        self,
        method: str,
        url: str,
        headers: list[str] | None = None,
        body: str | None = None,
        name: str | None = None,
    ) -> str:
        """
        Create a preset under a fresh id. Always records version 1.

        Returns:
            The new record id
        """
        record = Record.new(method, url, headers=headers, body=body, name=name)
        self.save_with_history(record)
        logger.info("record_created", record_id=record.id, method=record.method)
        return record.id

    def clone_record(self, record_id: str, name: str | None = None) -> str:
        """
        Copy a preset under a fresh id with its own history.

        Args:
            record_id: The preset to copy
            name: Name for the copy; defaults to "<label> (copy)"

        Returns:
            The new record id
        """
        source = self.records.require(record_id)
        return self.create_record(
            source.method,
            source.url,
            headers=list(source.headers),
            body=source.body,
            name=name or f"{source.label} (copy)",
        )

    def rename_record(self, record_id: str, new_name: str | None) -> Record:
        """
        Change a preset's display name. Never recorded in history.

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        with self.db.transaction():
            self.records.rename(record_id, new_name)
            renamed = self.records.require(record_id)
        logger.info("record_renamed", record_id=record_id)
        return renamed

    def delete_record(self, record_id: str) -> bool:
        """
        Delete a preset. Its history is kept.

        Returns:
            True if a record was removed, False if it did not exist
        """
        removed = self.records.delete(record_id)
        logger.info("record_deleted", record_id=record_id, removed=removed)
        return removed

    def revert_to_version(self, record_id: str, version: int) -> Record:
        """
        Restore a preset from its snapshot at ``version``.

        Raises:
            VersionNotFoundError: If that version was never recorded
        """
        return self.reverter.revert_to(record_id, version)

    # =========================================================================
    # Reads
    # =========================================================================

    def list_records(self) -> list[Record]:
        return self.records.list()

    def get_record(self, record_id: str) -> Record:
        """
        Raises:
            RecordNotFoundError: If the record does not exist
        """
        return self.records.require(record_id)

    def list_history(self, record_id: str) -> list[HistoryEntry]:
        """Snapshots for a record, newest first. Works for deleted records."""
        return self.ledger.list_for(record_id)

    # =========================================================================
    # Execution
    # =========================================================================

    def send(self, record_id: str, executor: CommandExecutor | None = None) -> CommandOutput:
        """
        Run a saved preset through an executor.

        Args:
            record_id: The preset to send
            executor: Overrides the engine's executor for this call
        """
        record = self.records.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id=record_id)
        runner = executor or self.executor
        logger.info("sending_record", record_id=record_id, executor=runner.name)
        return runner.execute_record(record)
