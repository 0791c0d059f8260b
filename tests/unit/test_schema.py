"""
Unit tests for schema models.

Tests cover:
- Record validation and construction
- Snapshot serialization
- HistoryConfig and JetraayConfig validation
"""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from jetraay.schema import (
    DEFAULT_TRACKED_FIELDS,
    HeaderMatch,
    HistoryConfig,
    HistoryEntry,
    JetraayConfig,
    Record,
    generate_id,
)


class TestRecord:
    """Tests for the Record model."""

    def test_minimal_record(self) -> None:
        record = Record(id="a", method="GET", url="http://x")
        assert record.name is None
        assert record.headers == []
        assert record.body is None

    def test_method_required(self) -> None:
        with pytest.raises(ValidationError):
            Record(id="a", method="", url="http://x")

    def test_method_must_be_single_token(self) -> None:
        with pytest.raises(ValidationError):
            Record(id="a", method="GET X", url="http://x")

    def test_extra_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Record(id="a", method="GET", url="http://x", folder="misc")

    def test_record_is_frozen(self) -> None:
        record = Record(id="a", method="GET", url="http://x")
        with pytest.raises(ValidationError):
            record.url = "http://y"

    def test_new_generates_unique_ids(self) -> None:
        first = Record.new("GET", "http://x")
        second = Record.new("GET", "http://x")
        assert first.id != second.id
        assert len(first.id) == 36

    def test_new_copies_headers(self) -> None:
        headers = ["Accept: */*"]
        record = Record.new("GET", "http://x", headers=headers)
        headers.append("X-Later: 1")
        assert record.headers == ["Accept: */*"]

    def test_label_falls_back_to_url(self) -> None:
        assert Record(id="a", method="GET", url="http://x").label == "http://x"
        assert Record(id="a", name="Users", method="GET", url="http://x").label == "Users"

    def test_generate_id_unique(self) -> None:
        assert generate_id() != generate_id()


class TestSnapshots:
    """Tests for snapshot serialization."""

    def test_round_trip_full_record(self) -> None:
        record = Record(
            id="a",
            name="Login",
            method="POST",
            url="https://api.example.com/login",
            headers=["Content-Type: application/json", "X-Trace: 1"],
            body='{"user": "admin"}',
        )
        assert Record.from_snapshot(record.to_snapshot()) == record

    def test_round_trip_keeps_absent_body_distinct_from_empty(self) -> None:
        absent = Record(id="a", method="GET", url="http://x", body=None)
        empty = Record(id="a", method="GET", url="http://x", body="")
        assert Record.from_snapshot(absent.to_snapshot()).body is None
        assert Record.from_snapshot(empty.to_snapshot()).body == ""

    def test_invalid_snapshot(self) -> None:
        with pytest.raises(ValidationError):
            Record.from_snapshot("not json")


class TestHistoryEntry:
    def test_to_dict(self) -> None:
        record = Record(id="a", method="GET", url="http://x")
        entry = HistoryEntry(
            sequence=1,
            record_id="a",
            version=1,
            snapshot=record,
            timestamp=datetime(2026, 1, 1, tzinfo=UTC),
        )
        data = entry.to_dict()
        assert data["version"] == 1
        assert data["snapshot"]["url"] == "http://x"
        assert data["timestamp"].startswith("2026-01-01T00:00:00")

    def test_version_must_be_positive(self) -> None:
        record = Record(id="a", method="GET", url="http://x")
        with pytest.raises(ValidationError):
            HistoryEntry(
                sequence=1,
                record_id="a",
                version=0,
                snapshot=record,
                timestamp=datetime.now(UTC),
            )


class TestHistoryConfig:
    """Tests for the history policy."""

    def test_defaults(self) -> None:
        config = HistoryConfig()
        assert config.header_match == HeaderMatch.LEGACY
        assert config.tracked_fields == DEFAULT_TRACKED_FIELDS

    def test_name_cannot_be_tracked(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(tracked_fields=("name", "body"))

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(tracked_fields=("cookies",))

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(tracked_fields=())

    def test_duplicates_collapsed(self) -> None:
        config = HistoryConfig(tracked_fields=["body", "url", "body"])
        assert config.tracked_fields == ("body", "url")

    def test_header_match_from_string(self) -> None:
        assert HistoryConfig(header_match="set").header_match is HeaderMatch.SET


class TestJetraayConfig:
    def test_db_path(self, temp_dir: Path) -> None:
        config = JetraayConfig(data_dir=temp_dir)
        assert config.db_path == temp_dir / "jetraay.db"

    def test_memory_db_path(self, temp_dir: Path) -> None:
        config = JetraayConfig(data_dir=temp_dir, db_filename=":memory:")
        assert config.db_path == ":memory:"

    def test_log_level_normalized(self, temp_dir: Path) -> None:
        assert JetraayConfig(data_dir=temp_dir, log_level="DEBUG").log_level == "debug"

    def test_invalid_log_level(self, temp_dir: Path) -> None:
        with pytest.raises(ValidationError):
            JetraayConfig(data_dir=temp_dir, log_level="verbose")
