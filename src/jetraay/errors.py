"""
Exception hierarchy for Jetraay.

All Jetraay exceptions inherit from JetraayError, allowing callers to catch
every store, serialization and executor failure with a single except clause.

Exception Categories:
    - StorageError: The SQLite backend failed (connect, read, write)
    - SerializationError: A stored snapshot could not be decoded
    - NotFoundError: A record id or (id, version) pair does not exist
    - CommandExecutionError: The external request command failed
    - ConfigError: Configuration could not be loaded or is invalid

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors carry context (record id, version, operation)
    - Errors render as "[E<code>] message" for the CLI and as dicts for JSON
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Storage errors: 1xxx
ERROR_STORAGE_CONNECTION = 1001
ERROR_STORAGE_WRITE = 1002
ERROR_STORAGE_READ = 1003

# Serialization errors: 2xxx
ERROR_SERIALIZATION = 2001

# Lookup errors: 3xxx
ERROR_RECORD_NOT_FOUND = 3001
ERROR_VERSION_NOT_FOUND = 3002

# External command errors: 4xxx
ERROR_COMMAND_FAILED = 4001

# Configuration errors: 5xxx
ERROR_CONFIG_INVALID = 5001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class JetraayError(Exception):
    """
    Base exception for all Jetraay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(JetraayError):
    """
    Base class for storage/database errors.

    Attributes:
        operation: The operation that failed (e.g., "upsert", "list_for")
    """

    operation: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["operation"] = self.operation


@dataclass
class StorageConnectionError(StorageError):
    """Raised when the database file cannot be opened."""

    db_path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to connect to database: {self.db_path}"
        if self.code == 0:
            self.code = ERROR_STORAGE_CONNECTION
        if not self.suggestion:
            self.suggestion = "Check that the data directory exists and is writable"
        super().__post_init__()
        self.context["db_path"] = self.db_path


@dataclass
class StorageWriteError(StorageError):
    """Raised when a write statement or commit fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database write failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageReadError(StorageError):
    """Raised when a query fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database read failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_READ
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


# =============================================================================
# Serialization Errors
# =============================================================================


@dataclass
class SerializationError(JetraayError):
    """
    Raised when a stored snapshot fails to decode.

    Attributes:
        record_id: Record the payload belongs to
        version: History version, if the payload is a snapshot
        underlying_error: The decoder's message
    """

    record_id: str = ""
    version: int | None = None
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            target = self.record_id
            if self.version is not None:
                target = f"{self.record_id} v{self.version}"
            self.message = f"Corrupt snapshot for {target}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SERIALIZATION
        self.context.update({
            "record_id": self.record_id,
            "version": self.version,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Lookup Errors
# =============================================================================


@dataclass
class NotFoundError(JetraayError):
    """
    Base class for lookups that found nothing.

    Attributes:
        record_id: The record id that was requested
    """

    record_id: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["record_id"] = self.record_id


@dataclass
class RecordNotFoundError(NotFoundError):
    """Raised when a record id has no current-state row."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Record not found: {self.record_id}"
        if self.code == 0:
            self.code = ERROR_RECORD_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Run 'jetraay list' to see saved records"
        super().__post_init__()


@dataclass
class VersionNotFoundError(NotFoundError):
    """Raised when a record has no history entry at the requested version."""

    version: int = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Version {self.version} not found for record {self.record_id}"
        if self.code == 0:
            self.code = ERROR_VERSION_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Run 'jetraay history <id>' to see recorded versions"
        super().__post_init__()
        self.context["version"] = self.version


# =============================================================================
# External Command Errors
# =============================================================================


@dataclass
class CommandExecutionError(JetraayError):
    """
    Raised when the external request command fails.

    Attributes:
        command: The argv that was run
        return_code: Process exit status, None if it never started
        stderr: Captured error output
    """

    command: list[str] = field(default_factory=list)
    return_code: int | None = None
    stderr: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = self.stderr.strip() or "Command failed"
        if self.code == 0:
            self.code = ERROR_COMMAND_FAILED
        self.context.update({
            "command": self.command,
            "return_code": self.return_code,
            "stderr": self.stderr,
        })


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(JetraayError):
    """Raised when configuration is missing or invalid."""

    source: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration in {self.source}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context["source"] = self.source
