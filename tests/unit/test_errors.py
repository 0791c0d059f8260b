"""
Unit tests for error hierarchy.

Tests cover:
- Base JetraayError behavior
- Storage, serialization and lookup errors with context
- Command execution errors
- Error serialization
"""

import pytest

from jetraay.errors import (
    ERROR_COMMAND_FAILED,
    ERROR_CONFIG_INVALID,
    ERROR_RECORD_NOT_FOUND,
    ERROR_SERIALIZATION,
    ERROR_STORAGE_CONNECTION,
    ERROR_STORAGE_READ,
    ERROR_STORAGE_WRITE,
    ERROR_VERSION_NOT_FOUND,
    CommandExecutionError,
    ConfigError,
    JetraayError,
    NotFoundError,
    RecordNotFoundError,
    SerializationError,
    StorageConnectionError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    VersionNotFoundError,
)


class TestJetraayError:
    """Tests for base JetraayError."""

    def test_basic_error(self) -> None:
        """Create a basic error with message."""
        err = JetraayError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_format(self) -> None:
        """String format includes code and message."""
        err = JetraayError(message="Test error", code=1234)
        assert str(err) == "[E1234] Test error"

    def test_str_includes_suggestion(self) -> None:
        err = JetraayError(message="Failed", code=1, suggestion="Try again")
        assert "Suggestion: Try again" in str(err)

    def test_repr_format(self) -> None:
        """Repr includes class name and details."""
        err = JetraayError(message="Test", code=1)
        assert repr(err).startswith("JetraayError(")
        assert "code=1" in repr(err)

    def test_to_dict(self) -> None:
        err = RecordNotFoundError(record_id="abc")
        data = err.to_dict()
        assert data["error_type"] == "RecordNotFoundError"
        assert data["code"] == ERROR_RECORD_NOT_FOUND
        assert data["context"]["record_id"] == "abc"

    def test_can_be_raised(self) -> None:
        with pytest.raises(JetraayError):
            raise StorageReadError(operation="list", underlying_error="disk I/O error")


class TestStorageErrors:
    """Tests for storage errors."""

    def test_connection_error(self) -> None:
        err = StorageConnectionError(db_path="/nope/x.db", operation="connect")
        assert err.code == ERROR_STORAGE_CONNECTION
        assert "/nope/x.db" in err.message
        assert err.suggestion is not None
        assert err.context["db_path"] == "/nope/x.db"
        assert err.context["operation"] == "connect"

    def test_write_error(self) -> None:
        err = StorageWriteError(operation="upsert_record", underlying_error="locked")
        assert err.code == ERROR_STORAGE_WRITE
        assert "locked" in err.message
        assert isinstance(err, StorageError)

    def test_read_error(self) -> None:
        err = StorageReadError(operation="list_history", underlying_error="no such table")
        assert err.code == ERROR_STORAGE_READ
        assert err.context["underlying_error"] == "no such table"

    def test_explicit_message_kept(self) -> None:
        err = StorageWriteError(message="custom", underlying_error="x")
        assert err.message == "custom"


class TestSerializationError:
    """Tests for snapshot decode errors."""

    def test_message_names_version(self) -> None:
        err = SerializationError(record_id="abc", version=3, underlying_error="bad json")
        assert err.code == ERROR_SERIALIZATION
        assert "abc v3" in err.message
        assert err.context["version"] == 3

    def test_without_version(self) -> None:
        err = SerializationError(record_id="abc", underlying_error="bad json")
        assert "abc:" in err.message


class TestNotFoundErrors:
    """Tests for lookup errors."""

    def test_record_not_found(self) -> None:
        err = RecordNotFoundError(record_id="abc")
        assert err.code == ERROR_RECORD_NOT_FOUND
        assert "abc" in err.message
        assert isinstance(err, NotFoundError)

    def test_version_not_found(self) -> None:
        err = VersionNotFoundError(record_id="abc", version=7)
        assert err.code == ERROR_VERSION_NOT_FOUND
        assert "Version 7" in err.message
        assert err.context == {"record_id": "abc", "version": 7}


class TestCommandExecutionError:
    """Tests for external command errors."""

    def test_stderr_becomes_message(self) -> None:
        err = CommandExecutionError(
            command=["curl", "-X", "GET", "http://x"],
            return_code=6,
            stderr="curl: (6) Could not resolve host: x\n",
        )
        assert err.code == ERROR_COMMAND_FAILED
        assert err.message == "curl: (6) Could not resolve host: x"
        assert err.context["return_code"] == 6

    def test_empty_stderr(self) -> None:
        err = CommandExecutionError(return_code=1)
        assert err.message == "Command failed"


class TestConfigError:
    def test_defaults(self) -> None:
        err = ConfigError(source="config.yaml")
        assert err.code == ERROR_CONFIG_INVALID
        assert "config.yaml" in err.message
