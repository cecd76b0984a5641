"""Record matcher: locate a record's occurrence in the raw ledger text.

Matching is by normalised identity: the whitespace-free ``(id, payload)``
pair.  Because the scanner already ignores whitespace inside tokens and
around separators, ``"1 2 1 ;4 1 7."`` in the file matches a record with id
``"121"`` and payload ``"417"``.

An occurrence qualifies for marking when it is

- terminated (a trailing fragment still being appended is left alone),
- not already Done (no ``OK`` status token), and
- not already consumed by an earlier lookup in the same pass.

Among qualifying occurrences the earliest wins, so two logical duplicates in
the caller's list claim two distinct occurrences in file order instead of
collapsing onto the first one.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Collection

from ledger_sync.ledger.codec import scan
from ledger_sync.ledger.types import MarkOutcome, Record, ScannedRecord, Span


def find_unmarked_span(
    text: str, record: Record, consumed: Collection[Span] = ()
) -> Span | None:
    """Return the span of the first unmarked, unconsumed occurrence of ``record``.

    Args:
        text: Raw ledger text.
        record: Record to locate; its id and payload are normalised first.
        consumed: Spans already claimed earlier in the same pass.

    Returns:
        ``Span(start, terminator)`` where ``start`` is the first id character
        and ``terminator`` is the offset of the closing ``.`` (exclusive), or
        ``None`` if no qualifying occurrence exists.
    """
    key = record.key
    for scanned in scan(text):
        span = scanned.span
        if span is None or scanned.record.key != key:
            continue
        if not scanned.record.is_pending or span in consumed:
            continue
        return span
    return None


class RecordMatcher:
    """Single-scan matcher serving many lookups against one text snapshot.

    The text is scanned once on construction; each :meth:`claim` is then a
    dictionary lookup.  The matcher owns the consumed-span bookkeeping, so a
    given occurrence is handed out at most once.

    Example::

        matcher = RecordMatcher("121;417. 121;417.")
        matcher.claim(Record("121", "417")).span   # Span(0, 7)
        matcher.claim(Record("121", "417")).span   # Span(9, 16)
        matcher.claim(Record("121", "417")).status # "not_found"
    """

    def __init__(self, text: str) -> None:
        self._unmarked: dict[tuple[str, str], deque[ScannedRecord]] = defaultdict(deque)
        self._marked: set[tuple[str, str]] = set()
        for scanned in scan(text):
            if scanned.terminator is None:
                continue
            key = scanned.record.key
            if scanned.record.is_pending:
                self._unmarked[key].append(scanned)
            else:
                self._marked.add(key)

    def claim(self, record: Record) -> MarkOutcome:
        """Consume and return the next unmarked occurrence of ``record``.

        Returns:
            A :class:`MarkOutcome` with status ``"marked"`` and the claimed
            span, or ``"already_marked"`` / ``"not_found"`` with no span.
            The already-marked classification applies when the record has at
            least one Done occurrence and no unmarked one left.
        """
        key = record.key
        pending = self._unmarked.get(key)
        if pending:
            scanned = pending.popleft()
            return MarkOutcome(record=record, status="marked", span=scanned.span)
        if key in self._marked:
            return MarkOutcome(record=record, status="already_marked")
        return MarkOutcome(record=record, status="not_found")
