"""Logging setup for Jetraay."""

from jetraay.observability.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
