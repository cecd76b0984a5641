"""Ledger package: the parsing and reconciliation engine.

Every function here is pure: text in, values out.  Nothing reads or writes
files, talks to the record store, sleeps, or retries.

Public surface
--------------
- :func:`decode`: raw ledger text → ordered records.
- :func:`select_pending`: records still waiting for the store.
- :func:`apply_done_markers`: insert ``" ; OK"`` for records the store accepted.
- :func:`find_unmarked_span`: locate one record's unmarked occurrence.
- :class:`Record`, :class:`RecordStatus`, :class:`MarkResult`, :class:`MarkOutcome`.

Usage example
-------------
::

    from ledger_sync.ledger import apply_done_markers, decode, select_pending

    pending = select_pending(decode(text))
    accepted = [r for r in pending if push_to_store(r)]
    result = apply_done_markers(text, accepted)
    if result.changed:
        path.write_text(result.text, encoding="utf-8")
"""

from ledger_sync.ledger.codec import decode, encode, scan
from ledger_sync.ledger.matcher import RecordMatcher, find_unmarked_span
from ledger_sync.ledger.mutator import apply_done_markers
from ledger_sync.ledger.reconcile import select_pending
from ledger_sync.ledger.types import (
    MarkOutcome,
    MarkResult,
    Record,
    RecordStatus,
    ScannedRecord,
    Span,
)

__all__ = [
    "MarkOutcome",
    "MarkResult",
    "Record",
    "RecordMatcher",
    "RecordStatus",
    "ScannedRecord",
    "Span",
    "apply_done_markers",
    "decode",
    "encode",
    "find_unmarked_span",
    "scan",
    "select_pending",
]
