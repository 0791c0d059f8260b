"""
Schema definitions for Jetraay.

This module defines the Pydantic models used throughout Jetraay:
- Record: The current state of one saved request preset
- HistoryEntry: An immutable, versioned snapshot of a Record
- HistoryConfig/JetraayConfig: Store configuration

Design Decisions:
    - Records and history entries are immutable (frozen=True); edits are
      expressed with model_copy(update=...)
    - Snapshots are the JSON form of a Record, so a snapshot always decodes
      back to an equal Record
    - Which fields count as a content change is configuration, not code
"""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def generate_id() -> str:
    """Generate a globally unique record id."""
    return str(uuid.uuid4())


# =============================================================================
# Enums
# =============================================================================


class HeaderMatch(str, Enum):
    """
    How the change detector compares header lists.

    LEGACY keeps the original rule: same length, and every stored header is
    present in the proposed list. It does not check the reverse direction,
    so ["a", "a"] and ["a", "b"] compare equal.

    SET requires both lists to contain the same distinct headers.
    """

    LEGACY = "legacy"
    SET = "set"


# Fields whose changes may be recorded in history. "name" is never one of
# them: renames do not create history entries.
TRACKABLE_FIELDS = ("method", "url", "headers", "body")
DEFAULT_TRACKED_FIELDS = ("headers", "body")

LOG_LEVELS = ("debug", "info", "warning", "error")


# =============================================================================
# Record Models
# =============================================================================


class Record(BaseModel):
    """
    A saved request preset.

    Attributes:
        id: Stable unique identifier, never changes after creation
        name: Optional display label
        method: HTTP method token (e.g. "GET")
        url: Request target
        headers: Header lines in "Key: Value" form
        body: Optional request payload; None means no body
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Stable record identifier", min_length=1)
    name: str | None = Field(default=None, description="Optional display label")
    method: str = Field(..., description="HTTP method token", min_length=1)
    url: str = Field(..., description="Request target")
    headers: list[str] = Field(
        default_factory=list,
        description="Header lines, order-insignificant for change detection",
    )
    body: str | None = Field(default=None, description="Optional request payload")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Methods are single tokens."""
        if any(ch.isspace() for ch in v):
            msg = f"Invalid method token: {v!r}"
            raise ValueError(msg)
        return v

    @classmethod
    def new(
        cls,
        method: str,
        url: str,
        headers: list[str] | None = None,
        body: str | None = None,
        name: str | None = None,
    ) -> "Record":
        """Build a record with a freshly generated id."""
        return cls(
            id=generate_id(),
            name=name,
            method=method,
            url=url,
            headers=list(headers or []),
            body=body,
        )

    def to_snapshot(self) -> str:
        """Serialize the full record for the history ledger."""
        return self.model_dump_json()

    @classmethod
    def from_snapshot(cls, data: str) -> "Record":
        """Rebuild a record from a ledger snapshot."""
        return cls.model_validate_json(data)

    @property
    def label(self) -> str:
        """Name if set, otherwise the url."""
        return self.name or self.url


class HistoryEntry(BaseModel):
    """
    One recorded state of a record.

    Attributes:
        sequence: Storage-assigned row id, globally increasing
        record_id: The record this snapshot belongs to
        version: Per-record version, starting at 1 with no gaps
        snapshot: The full record at the time of the change
        timestamp: When the entry was written (UTC)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence: int = Field(..., description="Storage row id", ge=1)
    record_id: str = Field(..., description="Owning record id")
    version: int = Field(..., description="Per-record version", ge=1)
    snapshot: Record = Field(..., description="Record state at this version")
    timestamp: datetime = Field(..., description="When the entry was written")

    def to_dict(self) -> dict[str, Any]:
        """Flatten for JSON output."""
        return {
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "snapshot": self.snapshot.model_dump(),
        }


# =============================================================================
# Configuration Models
# =============================================================================


class HistoryConfig(BaseModel):
    """
    History policy: which saves are recorded.

    Attributes:
        header_match: Header list comparison rule
        tracked_fields: Fields whose change appends a history entry
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    header_match: HeaderMatch = Field(
        default=HeaderMatch.LEGACY,
        description="Header list comparison rule",
    )
    tracked_fields: tuple[str, ...] = Field(
        default=DEFAULT_TRACKED_FIELDS,
        description="Fields whose change appends a history entry",
        min_length=1,
    )

    @field_validator("tracked_fields")
    @classmethod
    def validate_tracked_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Only content fields can be tracked."""
        for name in v:
            if name not in TRACKABLE_FIELDS:
                msg = f"Field {name!r} cannot be tracked; choose from {', '.join(TRACKABLE_FIELDS)}"
                raise ValueError(msg)
        return tuple(dict.fromkeys(v))


class JetraayConfig(BaseModel):
    """
    Explicit store configuration.

    Attributes:
        data_dir: Directory holding the database (created on demand)
        db_filename: Database file name, or ":memory:"
        log_level: One of debug, info, warning, error
        log_file: Optional log sink; stderr when unset
        history: History policy
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    data_dir: Path = Field(..., description="Directory holding the database")
    db_filename: str = Field(default="jetraay.db", min_length=1)
    log_level: str = Field(default="info")
    log_file: Path | None = Field(default=None)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.lower() not in LOG_LEVELS:
            msg = f"Invalid log level: {v}. Must be one of {', '.join(LOG_LEVELS)}"
            raise ValueError(msg)
        return v.lower()

    @property
    def db_path(self) -> Path | str:
        if self.db_filename == ":memory:":
            return self.db_filename
        return self.data_dir / self.db_filename
