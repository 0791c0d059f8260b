"""
Pytest configuration and fixtures for Jetraay tests.

This module provides shared fixtures used across unit and integration tests.
Every fixture points the store at its own temporary directory.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from jetraay.engine import PresetEngine
from jetraay.observability import setup_logging
from jetraay.schema import JetraayConfig, Record
from jetraay.store import HistoryLedger, JetraayDB, RecordStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_dir: Path) -> JetraayConfig:
    """Configuration rooted in the temporary directory."""
    return JetraayConfig(data_dir=temp_dir / "data")


@pytest.fixture
def db(temp_dir: Path) -> Generator[JetraayDB, None, None]:
    """A fresh database file."""
    database = JetraayDB(temp_dir / "test.db")
    yield database
    database.close()


@pytest.fixture
def records(db: JetraayDB) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def ledger(db: JetraayDB) -> HistoryLedger:
    return HistoryLedger(db)


@pytest.fixture
def engine(config: JetraayConfig) -> Generator[PresetEngine, None, None]:
    """An engine with a temporary database."""
    eng = PresetEngine(config)
    yield eng
    eng.close()


@pytest.fixture
def sample_record() -> Record:
    """A simple GET preset."""
    return Record(
        id="rec-1",
        name="Users",
        method="GET",
        url="http://x",
        headers=["Accept: */*"],
        body=None,
    )


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Send warnings and above to the current stderr; CLI runs reconfigure logging."""
    setup_logging("warning")
