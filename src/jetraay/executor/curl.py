"""
curl-backed executor for Jetraay.

Sends a preset by running the external ``curl`` binary:

    curl -X <method> <url> [-H <header>]... [-d <body>]

Security Note:
    The command is always passed to subprocess as a list (NO shell=True).
    Header values and bodies are single argv entries, so nothing in a preset
    is ever interpreted by a shell.
"""

import shlex
import subprocess
from typing import TYPE_CHECKING

from jetraay.executor.base import CommandExecutor, CommandOutput
from jetraay.observability import get_logger

if TYPE_CHECKING:
    from jetraay.schema import Record

logger = get_logger("executor")

DEFAULT_TIMEOUT_SECONDS = 60


def build_curl_args(
    method: str,
    url: str,
    headers: list[str],
    body: str | None = None,
    binary: str = "curl",
) -> list[str]:
    """Build the argv for one request."""
    cmd = [binary, "-X", method, url]
    for header in headers:
        cmd.extend(["-H", header])
    if body is not None:
        cmd.extend(["-d", body])
    return cmd


def render_curl_command(record: "Record") -> str:
    """The record as a copy-pasteable shell command."""
    return shlex.join(build_curl_args(record.method, record.url, record.headers, record.body))


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("utf-8", errors="replace")


class CurlExecutor(CommandExecutor):
    """
    Run requests through an external curl process.

    Arguments:
        binary: Executable to run (default "curl", looked up in PATH)
        timeout_seconds: Kill the process after this many seconds

    Example:
        output = CurlExecutor().execute("GET", "https://example.com", [])
        if output.success:
            print(output.stdout)
        else:
            print(output.error)
    """

    def __init__(self, binary: str = "curl", timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.binary = binary
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return "curl"

    def execute(
        self,
        method: str,
        url: str,
        headers: list[str],
        body: str | None = None,
    ) -> CommandOutput:
        cmd = build_curl_args(method, url, headers, body, binary=self.binary)
        logger.info("executing_command", cmd=cmd)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.timeout_seconds,
                shell=False,
            )
        except subprocess.TimeoutExpired:
            logger.error("command_timeout", cmd=cmd, timeout=self.timeout_seconds)
            return CommandOutput.fail(
                f"Command timed out after {self.timeout_seconds} seconds",
                cmd=cmd,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            logger.error("command_not_found", executable=self.binary)
            return CommandOutput.fail(
                f"Executable not found: {self.binary}",
                cmd=cmd,
                executable=self.binary,
            )
        except PermissionError:
            logger.error("command_permission_denied", executable=self.binary)
            return CommandOutput.fail(
                f"Permission denied executing: {self.binary}",
                cmd=cmd,
                executable=self.binary,
            )
        except OSError as e:
            logger.error("command_failed_to_start", cmd=cmd, error=str(e))
            return CommandOutput.fail(
                f"OS error executing command: {e}",
                cmd=cmd,
                error_type=type(e).__name__,
            )

        stdout = _decode(result.stdout)
        stderr = _decode(result.stderr)

        if result.returncode != 0:
            logger.error("command_failed", return_code=result.returncode, stderr=stderr)
            return CommandOutput.fail(stderr, return_code=result.returncode, cmd=cmd)

        logger.info("command_succeeded", stdout_size=len(result.stdout))
        return CommandOutput.ok(stdout, return_code=result.returncode, cmd=cmd)
