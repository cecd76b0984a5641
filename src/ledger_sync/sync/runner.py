"""One reconciliation pass over the ledger file.

The sequence is always:

1. Read the ledger (busy reads retried by :func:`~ledger_sync.fs.read_ledger`).
2. Decode it and select the pending records.  A trailing record without its
   terminator is still being appended; it is left for a later pass.
3. Push each pending record to the store, one at a time.  A failed update
   excludes only that record.
4. Read the ledger again and take that text as the snapshot to edit, so
   records appended while the store was busy are not overwritten.
5. Insert Done markers for the records the store accepted.
6. Write the file only if the text changed.

Failure isolation
-----------------
Store failures and records that could not be located are reported in the
:class:`PassReport` and logged as warnings; such records stay pending and are
picked up again by the next pass.  Read and write failures raise
(:exc:`~ledger_sync.errors.LedgerReadError`,
:exc:`~ledger_sync.errors.LedgerWriteError`): the pass is aborted and the next
trigger starts over.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ledger_sync.errors import StoreError
from ledger_sync.fs import read_ledger, write_ledger
from ledger_sync.ledger import MarkResult, Record, apply_done_markers, scan
from ledger_sync.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreFailure:
    """A record whose store update failed during the pass."""

    record: Record
    error: str


@dataclass
class PassReport:
    """What one pass did.

    Attributes:
        path: Ledger file the pass ran against.
        pending: Records selected as pending from the first read.
        updated: Records the store accepted, in update order.
        failed: Records the store rejected, with the error message.
        mark: Result of the marking step, or ``None`` when nothing was
            accepted by the store.
        written: True when the ledger file was rewritten.
    """

    path: Path
    pending: list[Record] = field(default_factory=list)
    updated: list[Record] = field(default_factory=list)
    failed: list[StoreFailure] = field(default_factory=list)
    mark: MarkResult | None = None
    written: bool = False

    @property
    def marked(self) -> list[Record]:
        return self.mark.marked if self.mark else []

    @property
    def not_found(self) -> list[Record]:
        return self.mark.not_found if self.mark else []

    def summary(self) -> str:
        return (
            f"{len(self.pending)} pending, {len(self.updated)} updated, "
            f"{len(self.failed)} failed, {len(self.marked)} marked, "
            f"{len(self.not_found)} not found, "
            f"{'written' if self.written else 'unchanged'}"
        )


def select_terminated_pending(text: str) -> list[Record]:
    """Return the pending records of ``text`` that are closed by a terminator."""
    pending: list[Record] = []
    for scanned in scan(text):
        if not scanned.record.is_pending:
            continue
        if scanned.terminator is None:
            logger.debug(
                "Skipping unterminated record ID=%s payload=%s",
                scanned.record.id,
                scanned.record.payload,
            )
            continue
        pending.append(scanned.record)
    return pending


def push_records(
    store: RecordStore, records: list[Record]
) -> tuple[list[Record], list[StoreFailure]]:
    """Update each record in the store, collecting successes and failures.

    One record's failure never stops the others.
    """
    updated: list[Record] = []
    failed: list[StoreFailure] = []
    for record in records:
        logger.debug("Processing: ID=%s, payload=%s", record.id, record.payload)
        try:
            store.update(record.id, record.payload)
        except StoreError as exc:
            logger.warning("Store update failed for ID=%s: %s", record.id, exc)
            failed.append(StoreFailure(record=record, error=str(exc)))
        else:
            updated.append(record)
    return updated, failed


def run_pass(
    path: Path | str,
    store: RecordStore,
    *,
    read_attempts: int = 3,
    read_delay_seconds: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> PassReport:
    """Run one full reconciliation pass.

    Args:
        path: Ledger file.
        store: An open record store.
        read_attempts: Busy-read attempts per read.
        read_delay_seconds: Base delay between busy-read attempts.
        sleep: Sleep function, replaced in tests.

    Returns:
        A :class:`PassReport`.

    Raises:
        LedgerReadError: The ledger could not be read.
        LedgerWriteError: The updated ledger could not be written.
    """
    path = Path(path)
    report = PassReport(path=path)

    def _read() -> str:
        return read_ledger(
            path, attempts=read_attempts, delay_seconds=read_delay_seconds, sleep=sleep
        )

    report.pending = select_terminated_pending(_read())
    logger.info("Found %d pending record(s) in %s", len(report.pending), path.name)
    if not report.pending:
        return report

    report.updated, report.failed = push_records(store, report.pending)
    if not report.updated:
        logger.info("Pass finished: %s", report.summary())
        return report

    report.mark = apply_done_markers(_read(), report.updated)
    for record in report.not_found:
        logger.warning(
            "ID=%s payload=%s was updated in the store but has no unmarked entry in %s; "
            "it stays pending",
            record.id,
            record.payload,
            path.name,
        )

    if report.mark.changed:
        write_ledger(path, report.mark.text)
        report.written = True

    logger.info("Pass finished: %s", report.summary())
    return report
