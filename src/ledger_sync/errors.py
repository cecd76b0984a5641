"""Typed exceptions for ledger-sync.

The core ledger functions never raise for malformed content; these exceptions
describe infrastructure failures at the edges: reading or writing the ledger
file and talking to the record store.

Design intent:
    - Domain outcomes such as "record not found in the ledger" are returned
      as values (see :class:`~ledger_sync.ledger.types.MarkOutcome`).
    - Infrastructure failures raise typed exceptions so the orchestrator can
      decide whether to retry, skip a record, or abort the pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class LedgerSyncError(RuntimeError):
    """Base exception for all ledger-sync failures."""


# ── Ledger file ───────────────────────────────────────────────────────────────


class LedgerReadError(LedgerSyncError):
    """Reading the ledger file failed.

    Attributes:
        path: The ledger file that could not be read.
        transient: True when the failure is a busy/locked condition that a
            later attempt may clear.
    """

    transient: bool = False

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


class LedgerBusyError(LedgerReadError):
    """The ledger file stayed locked/busy for every read attempt."""

    transient = True


class LedgerUnreadableError(LedgerReadError):
    """The ledger file is missing, not permitted, or not valid UTF-8."""


class LedgerWriteError(LedgerSyncError):
    """Writing the updated ledger text back to disk failed."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


# ── Record store ──────────────────────────────────────────────────────────────


@dataclass(slots=True)
class StoreOperationContext:
    """Structured operation metadata carried by store exceptions.

    Attributes:
        operation: Stable operation identifier, e.g. ``"sqlite.update"``.
        details: Optional human-readable context for logs.
    """

    operation: str
    details: str | None = None


class StoreError(LedgerSyncError):
    """Base exception for record-store failures.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: StoreOperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause


class StoreConnectionError(StoreError):
    """The store could not be opened or reached."""


class StoreUpdateError(StoreError):
    """The store rejected or failed a keyed update."""
