"""
Storage module for Jetraay.

This module provides SQLite-based persistence for saved request presets and
their change history.

Tables:
    - records: Current state of each preset (id, name, method, url, headers, body)
    - record_history: Versioned snapshots, one per accepted change

Design principles:
    - Append-only history: snapshots are never modified or deleted
    - Atomic: a snapshot and its record update commit together
    - Self-contained: a single .db file under the application data directory
"""

from jetraay.store.db import JetraayDB, now_iso
from jetraay.store.history import HistoryLedger
from jetraay.store.records import RecordStore, decode_headers, encode_headers

__all__ = [
    "HistoryLedger",
    "JetraayDB",
    "RecordStore",
    "decode_headers",
    "encode_headers",
    "now_iso",
]
