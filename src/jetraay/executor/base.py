"""
Base classes for the command executor interface.

This module defines how Jetraay sends a request preset:
- CommandExecutor: Abstract base class every executor implements
- CommandOutput: Standardized result of one execution

Design Principles:
    - Executors are injected, so callers and tests can swap in a fake
    - Executors return CommandOutput for expected failures (non-zero exit,
      missing binary, timeout) instead of raising
    - unwrap() converts a failed output into CommandExecutionError for
      callers that prefer exceptions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jetraay.errors import CommandExecutionError

if TYPE_CHECKING:
    from jetraay.schema import Record


@dataclass(frozen=True)
class CommandOutput:
    """
    Standardized output from running a request.

    Attributes:
        success: Whether the command exited successfully
        stdout: Captured standard output (the response) on success
        error: Captured error output or failure description otherwise
        return_code: Process exit status, None if it never ran
        metadata: Additional metadata about the execution
    """

    success: bool
    stdout: str = ""
    error: str | None = None
    return_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, stdout: str, return_code: int = 0, **metadata: Any) -> "CommandOutput":
        """Create a successful output."""
        return cls(success=True, stdout=stdout, return_code=return_code, metadata=metadata)

    @classmethod
    def fail(cls, error: str, return_code: int | None = None, **metadata: Any) -> "CommandOutput":
        """Create a failed output."""
        return cls(success=False, error=error, return_code=return_code, metadata=metadata)

    def unwrap(self) -> str:
        """
        Return stdout, or raise if the command failed.

        Raises:
            CommandExecutionError: Carrying the captured error output
        """
        if self.success:
            return self.stdout
        raise CommandExecutionError(
            command=list(self.metadata.get("cmd", [])),
            return_code=self.return_code,
            stderr=self.error or "",
        )


class CommandExecutor(ABC):
    """
    Abstract base class for request executors.

    Subclasses must implement execute(). The contract is synchronous: run
    once, no retry, and report stdout on success or the error output on
    failure.

    Example:
        class RecordingExecutor(CommandExecutor):
            def __init__(self):
                self.calls = []

            def execute(self, method, url, headers, body=None):
                self.calls.append((method, url, headers, body))
                return CommandOutput.ok("{}")
    """

    @property
    def name(self) -> str:
        """Identifier used in logs."""
        return self.__class__.__name__

    @abstractmethod
    def execute(
        self,
        method: str,
        url: str,
        headers: list[str],
        body: str | None = None,
    ) -> CommandOutput:
        """
        Send one request.

        Args:
            method: HTTP method token
            url: Request target
            headers: Header lines in "Key: Value" form
            body: Optional payload

        Returns:
            CommandOutput with the response or the failure reason
        """
        ...

    def execute_record(self, record: "Record") -> CommandOutput:
        """Send a saved preset."""
        return self.execute(record.method, record.url, list(record.headers), record.body)

    def __repr__(self) -> str:
        return f"<CommandExecutor: {self.name}>"
