"""
Revert Engine for Jetraay.

The RevertEngine restores a record's current state from one of its history
snapshots. A revert is not itself a change: it writes the record row but
never appends to the ledger, so "version N" keeps meaning the same point in
time and the maximum version is unchanged.

Reverting a deleted record brings the row back with the snapshot's fields.
"""

from jetraay.errors import VersionNotFoundError
from jetraay.observability import get_logger
from jetraay.schema import Record
from jetraay.store import HistoryLedger, JetraayDB, RecordStore

logger = get_logger("revert_engine")


class RevertEngine:
    """
    Applies history snapshots back onto the records table.

    Usage:
        engine = RevertEngine(db, RecordStore(db), HistoryLedger(db))
        record = engine.revert_to(record_id, 1)
    """

    def __init__(self, db: JetraayDB, records: RecordStore, ledger: HistoryLedger) -> None:
        self.db = db
        self.records = records
        self.ledger = ledger

    def revert_to(self, record_id: str, version: int) -> Record:
        """
        Overwrite the current record with the snapshot at ``version``.

        Args:
            record_id: The record to restore
            version: History version to restore from

        Returns:
            The record as now stored

        Raises:
            VersionNotFoundError: If no snapshot exists for (record_id, version)
        """
        with self.db.transaction():
            entry = self.ledger.get(record_id, version)
            if entry is None:
                raise VersionNotFoundError(record_id=record_id, version=version)

            restored = entry.snapshot.model_copy(update={"id": record_id})
            resurrected = self.records.get(record_id) is None
            self.records.upsert(restored)

        logger.info(
            "record_reverted",
            record_id=record_id,
            version=version,
            resurrected=resurrected,
        )
        return restored
