"""Ledger mutator: insert Done markers into the raw ledger text.

Only the characters of the marker are added; every other byte of the file,
including the formatting of unrelated records, is left as it was.

The sequence is always:

1. Scan the snapshot once and claim one occurrence per requested record
   (:class:`~ledger_sync.ledger.matcher.RecordMatcher`).
2. Insert ``" ; OK"`` before each claimed terminator, highest offset first,
   so earlier offsets stay valid.
3. Trim surrounding whitespace of the rewritten text.

If nothing was claimed the input text is returned untouched and ``changed``
is False.  Callers must skip the write in that case: a no-op write would wake
the file watcher and start another pass for nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ledger_sync.ledger.matcher import RecordMatcher
from ledger_sync.ledger.types import DONE_MARKER, MarkResult, Record

logger = logging.getLogger(__name__)


def apply_done_markers(text: str, records: Iterable[Record]) -> MarkResult:
    """Mark ``records`` as Done in ``text``.

    Args:
        text: One immutable snapshot of the ledger file.
        records: Records whose store update succeeded, in the order they
            should claim occurrences.  A record listed twice claims two
            distinct occurrences.

    Returns:
        A :class:`MarkResult`.  Applying the same records to ``result.text``
        again yields ``changed=False``.
    """
    matcher = RecordMatcher(text)
    outcomes = tuple(matcher.claim(record) for record in records)

    anchors = sorted(
        (o.span.end for o in outcomes if o.status == "marked" and o.span is not None),
        reverse=True,
    )
    for outcome in outcomes:
        if outcome.status == "not_found":
            logger.debug(
                "no unmarked occurrence of %s;%s", outcome.record.id, outcome.record.payload
            )

    if not anchors:
        return MarkResult(text=text, changed=False, outcomes=outcomes)

    new_text = text
    for anchor in anchors:
        new_text = new_text[:anchor] + DONE_MARKER + new_text[anchor:]
    new_text = new_text.strip()

    return MarkResult(text=new_text, changed=new_text != text, outcomes=outcomes)
