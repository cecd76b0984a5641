"""
Shared pytest fixtures for the ledger-sync test suite.

This module provides fixtures that are automatically available to all test files:
- Temporary ledger files
- A temporary SQLite record store seeded with rows
- An in-memory fake record store
- A recording sleep function so retry tests never actually wait
"""

import sqlite3
from collections.abc import Callable
from pathlib import Path

import pytest

from tests.helpers import FakeStore

# ============================================================================
# LEDGER FIXTURES
# ============================================================================


@pytest.fixture
def write_ledger_file(tmp_path: Path) -> Callable[..., Path]:
    """
    Return a helper that writes raw ledger text to ``tmp_path / "ledger.txt"``.

    The text is written byte-for-byte (no newline translation) so tests can
    assert exact round-trips, including ``\\r\\n`` line endings.
    """

    def _write(text: str, name: str = "ledger.txt") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


# ============================================================================
# SLEEP FIXTURES
# ============================================================================


@pytest.fixture
def sleeps() -> list[float]:
    """List that collects the delays passed to ``fake_sleep``."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], None]:
    """Sleep replacement that records the delay instead of waiting."""
    return sleeps.append


# ============================================================================
# RECORD STORE FIXTURES
# ============================================================================


@pytest.fixture
def records_db(tmp_path: Path) -> Path:
    """
    Create an SQLite record store with a ``records`` table.

    Seeded rows: ids 1, 2, 3, 121 with a NULL payload.

    Returns:
        Path to the database file.
    """
    db_path = tmp_path / "records.db"
    connection = sqlite3.connect(db_path)
    try:
        connection.execute("CREATE TABLE records (id INTEGER PRIMARY KEY, payload TEXT)")
        connection.executemany(
            "INSERT INTO records (id, payload) VALUES (?, NULL)",
            [(1,), (2,), (3,), (121,)],
        )
        connection.commit()
    finally:
        connection.close()
    return db_path


@pytest.fixture
def fake_store() -> FakeStore:
    """An open :class:`FakeStore` that accepts every update."""
    store = FakeStore()
    store.open()
    return store
