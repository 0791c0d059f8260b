"""
Unit tests for request executors.

Tests cover:
- curl argument construction
- Shell rendering of a preset
- Process execution outcomes (success, failure, missing binary, timeout)
- CommandOutput helpers
"""

import os
import shlex
import sys
from pathlib import Path

import pytest

from jetraay.errors import CommandExecutionError
from jetraay.executor import (
    CommandExecutor,
    CommandOutput,
    CurlExecutor,
    build_curl_args,
    render_curl_command,
)
from jetraay.schema import Record

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return path


class TestBuildCurlArgs:
    def test_minimal(self) -> None:
        assert build_curl_args("GET", "http://x", []) == ["curl", "-X", "GET", "http://x"]

    def test_headers_in_order(self) -> None:
        args = build_curl_args("GET", "http://x", ["A: 1", "B: 2"])
        assert args[4:] == ["-H", "A: 1", "-H", "B: 2"]

    def test_body(self) -> None:
        args = build_curl_args("POST", "http://x", [], '{"a": 1}')
        assert args[-2:] == ["-d", '{"a": 1}']

    def test_empty_body_is_sent(self) -> None:
        assert build_curl_args("POST", "http://x", [], "")[-2:] == ["-d", ""]

    def test_no_body_flag_when_absent(self) -> None:
        assert "-d" not in build_curl_args("POST", "http://x", [], None)

    def test_custom_binary(self) -> None:
        assert build_curl_args("GET", "http://x", [], binary="/opt/curl")[0] == "/opt/curl"


class TestRenderCurlCommand:
    def test_quotes_arguments(self) -> None:
        record = Record(
            id="a",
            method="POST",
            url="http://x/?a=1&b=2",
            headers=["Content-Type: application/json"],
            body='{"name": "it\'s"}',
        )
        rendered = render_curl_command(record)
        assert shlex.split(rendered) == [
            "curl",
            "-X",
            "POST",
            "http://x/?a=1&b=2",
            "-H",
            "Content-Type: application/json",
            "-d",
            '{"name": "it\'s"}',
        ]


class TestCommandOutput:
    def test_ok(self) -> None:
        output = CommandOutput.ok("body", cmd=["curl"])
        assert output.success is True
        assert output.return_code == 0
        assert output.unwrap() == "body"
        assert output.metadata == {"cmd": ["curl"]}

    def test_fail_unwrap_raises(self) -> None:
        output = CommandOutput.fail("curl: (6) Could not resolve host", return_code=6, cmd=["curl", "-X", "GET", "http://nope"])
        with pytest.raises(CommandExecutionError) as exc_info:
            output.unwrap()
        assert exc_info.value.return_code == 6
        assert "Could not resolve host" in str(exc_info.value)
        assert exc_info.value.command == ["curl", "-X", "GET", "http://nope"]


@posix_only
class TestCurlExecutor:
    """Tests that run real processes in place of curl."""

    def test_success_returns_stdout(self) -> None:
        output = CurlExecutor(binary="echo").execute("GET", "http://x", ["A: 1"], "payload")
        assert output.success
        assert output.stdout == "-X GET http://x -H A: 1 -d payload\n"
        assert output.metadata["cmd"][0] == "echo"

    def test_execute_record(self, sample_record: Record) -> None:
        output = CurlExecutor(binary="echo").execute_record(sample_record)
        assert output.stdout == "-X GET http://x -H Accept: */*\n"

    def test_nonzero_exit(self) -> None:
        output = CurlExecutor(binary="false").execute("GET", "http://x", [])
        assert not output.success
        assert output.return_code == 1

    def test_stderr_is_reported(self, temp_dir: Path) -> None:
        script = write_script(temp_dir / "fake-curl", "echo 'connection refused' >&2\nexit 7\n")
        output = CurlExecutor(binary=str(script)).execute("GET", "http://x", [])
        assert not output.success
        assert output.return_code == 7
        assert output.error.strip() == "connection refused"

    def test_arguments_are_not_shell_interpreted(self, temp_dir: Path) -> None:
        script = write_script(temp_dir / "fake-curl", 'printf "%s\\n" "$@"\n')
        output = CurlExecutor(binary=str(script)).execute(
            "POST", "http://x", ["X-Cmd: $(whoami)"], "; rm -rf /"
        )
        assert output.stdout.splitlines() == [
            "-X",
            "POST",
            "http://x",
            "-H",
            "X-Cmd: $(whoami)",
            "-d",
            "; rm -rf /",
        ]

    def test_missing_binary(self) -> None:
        output = CurlExecutor(binary="jetraay-no-such-binary").execute("GET", "http://x", [])
        assert not output.success
        assert output.return_code is None
        assert "not found" in output.error

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores file modes")
    def test_permission_denied(self, temp_dir: Path) -> None:
        script = temp_dir / "not-executable"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)
        output = CurlExecutor(binary=str(script)).execute("GET", "http://x", [])
        assert not output.success
        assert "Permission denied" in output.error

    def test_timeout(self, temp_dir: Path) -> None:
        script = write_script(temp_dir / "slow-curl", "exec sleep 5\n")
        output = CurlExecutor(binary=str(script), timeout_seconds=0.2).execute("GET", "http://x", [])
        assert not output.success
        assert "timed out" in output.error

    def test_name(self) -> None:
        assert CurlExecutor().name == "curl"


class TestCustomExecutor:
    def test_subclass_receives_record_fields(self, sample_record: Record) -> None:
        class RecordingExecutor(CommandExecutor):
            def __init__(self) -> None:
                self.calls = []

            def execute(self, method, url, headers, body=None):
                self.calls.append((method, url, headers, body))
                return CommandOutput.ok("{}")

        executor = RecordingExecutor()
        assert executor.execute_record(sample_record).stdout == "{}"
        assert executor.calls == [("GET", "http://x", ["Accept: */*"], None)]
        assert repr(executor) == "<CommandExecutor: RecordingExecutor>"
