"""Typed records and results for the ledger engine.

All dataclasses are frozen: a decoded record is a view over the raw ledger
text, never something that is edited in place.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

#: Terminator closing every record in the ledger.
TERMINATOR = "."

#: Separator between the fields of a record.
SEPARATOR = ";"

#: Status token that marks a record as processed (compared case-insensitively).
DONE_TOKEN = "OK"

#: Literal text inserted immediately before the terminator of a marked record.
DONE_MARKER = " ; OK"

#: Written at the start of the file by some Windows editors; never part of a token.
BYTE_ORDER_MARK = "\ufeff"


def normalize_token(value: str) -> str:
    """Return ``value`` with every whitespace character and byte order mark removed."""
    return "".join(value.replace(BYTE_ORDER_MARK, "").split())


def is_done_token(token: str) -> bool:
    """Return True when ``token`` is the ``OK`` status token, in any case."""
    return normalize_token(token).upper() == DONE_TOKEN


class RecordStatus(enum.Enum):
    """Processing state of a ledger record."""

    PENDING = "pending"
    DONE = "done"


@dataclass(frozen=True)
class Record:
    """One ``id;payload[;status].`` unit of work.

    Attributes:
        id: Opaque identifier token, typically digits.  Case-sensitive.
        payload: Secondary token pushed to the record store for this id.
        status: :attr:`RecordStatus.DONE` once an ``OK`` token is present.
    """

    id: str
    payload: str
    status: RecordStatus = RecordStatus.PENDING

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for matching: whitespace-free ``(id, payload)``."""
        return normalize_token(self.id), normalize_token(self.payload)

    @property
    def is_pending(self) -> bool:
        return self.status is RecordStatus.PENDING


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` character range in the raw ledger text."""

    start: int
    end: int


@dataclass(frozen=True)
class ScannedRecord:
    """A decoded record together with its offsets in the raw text.

    Attributes:
        record: The decoded record.
        start: Offset of the first character of the id.
        terminator: Offset of the closing ``.``, or ``None`` for a trailing
            fragment that has not been terminated yet.
    """

    record: Record
    start: int
    terminator: int | None

    @property
    def span(self) -> Span | None:
        """``[start, terminator)``, or ``None`` when unterminated."""
        if self.terminator is None:
            return None
        return Span(self.start, self.terminator)


MarkStatus = Literal["marked", "already_marked", "not_found"]


@dataclass(frozen=True)
class MarkOutcome:
    """Per-record result of :func:`~ledger_sync.ledger.mutator.apply_done_markers`.

    Attributes:
        record: The record the caller asked to mark.
        status: One of:
            - ``"marked"``: a Done marker was inserted at ``span.end``.
            - ``"already_marked"``: every matching occurrence is already Done.
            - ``"not_found"``: no terminated occurrence is left to mark.
        span: The occurrence that was marked, or ``None``.
    """

    record: Record
    status: MarkStatus
    span: Span | None = None


@dataclass(frozen=True)
class MarkResult:
    """Rewritten ledger text plus what happened to each requested record."""

    text: str
    changed: bool
    outcomes: tuple[MarkOutcome, ...] = ()

    @property
    def marked(self) -> list[Record]:
        return [o.record for o in self.outcomes if o.status == "marked"]

    @property
    def not_found(self) -> list[Record]:
        return [o.record for o in self.outcomes if o.status == "not_found"]
