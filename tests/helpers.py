"""
Shared test helpers.

Plain functions and classes used by several test modules.  Fixtures live in
``conftest.py``; anything a test needs to import by name lives here.
"""

import sqlite3
from pathlib import Path

from ledger_sync.errors import StoreOperationContext, StoreUpdateError


def read_raw(path: Path) -> str:
    """Read a file back without newline translation."""
    return path.read_bytes().decode("utf-8")


def fetch_payload(db_path: Path, record_id: int, table: str = "records") -> str | None:
    """Return the payload column of one row."""
    connection = sqlite3.connect(db_path)
    try:
        row = connection.execute(
            f"SELECT payload FROM {table} WHERE id = ?", (record_id,)
        ).fetchone()
    finally:
        connection.close()
    return row[0] if row else None


class FakeStore:
    """
    In-memory record store.

    Attributes:
        updates: ``(record_id, payload)`` pairs accepted, in call order.
        failing: Record ids whose update raises :exc:`StoreUpdateError`.
        on_update: Optional hook called after each accepted update.
    """

    name = "fake"

    def __init__(self, failing: set[str] | None = None, on_update=None) -> None:
        self.updates: list[tuple[str, str]] = []
        self.failing = set(failing or ())
        self.on_update = on_update
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def ping(self) -> None:
        return None

    def update(self, record_id: str, payload: str) -> None:
        if record_id in self.failing:
            raise StoreUpdateError(
                context=StoreOperationContext(operation="fake.update", details=record_id)
            )
        self.updates.append((record_id, payload))
        if self.on_update is not None:
            self.on_update(record_id, payload)
