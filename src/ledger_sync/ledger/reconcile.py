"""Reconciliation filter: which records still need work."""

from __future__ import annotations

from collections.abc import Iterable

from ledger_sync.ledger.types import Record


def select_pending(records: Iterable[Record]) -> list[Record]:
    """Return the records whose status is not Done, preserving order."""
    return [record for record in records if record.is_pending]
