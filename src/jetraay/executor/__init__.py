"""
Command executor module for Jetraay.

Sending a preset is delegated to an executor object rather than a direct
system call, so callers can inject a fake in tests.

Available executors:
    - CurlExecutor: Runs the external curl binary

Helpers:
    - build_curl_args: The argv contract (method, url, headers, body)
    - render_curl_command: The same command as a shell-quoted string
"""

from jetraay.executor.base import CommandExecutor, CommandOutput
from jetraay.executor.curl import CurlExecutor, build_curl_args, render_curl_command

__all__ = [
    "CommandExecutor",
    "CommandOutput",
    "CurlExecutor",
    "build_curl_args",
    "render_curl_command",
]
