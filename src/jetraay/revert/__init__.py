"""
Revert module for Jetraay.

Restores a record from a history snapshot without recording a new version.

How it works:
    1. Load the snapshot for (record_id, version) from the ledger
    2. Upsert it as the record's current state, inside one transaction
    3. Leave the ledger untouched

Example:
    from jetraay.revert import RevertEngine

    engine = RevertEngine(db, records, ledger)
    record = engine.revert_to("5b1e...", 1)
"""

from jetraay.revert.engine import RevertEngine

__all__ = [
    "RevertEngine",
]
