"""Ledger codec: decodes raw ledger text into records.

Format
------
A ledger is a flat stream of records with no line structure::

    record := WS* ID WS* ';' WS* PAYLOAD WS* (';' WS* STATUS WS*)? '.'

Whitespace (newlines included) is insignificant everywhere, even between the
characters of a token: ``"1 2 1 ; 4 1 7 ."`` decodes to id ``"121"`` and
payload ``"417"``.
A byte order mark at the start of the file is ignored the same way, and is
left in place when the file is rewritten.

Scanning
--------
:func:`scan` walks the raw text once, left to right, cutting it at every
terminator and every separator while keeping the raw offsets.  Each yielded
:class:`~ledger_sync.ledger.types.ScannedRecord` therefore knows both its
decoded identity and where it lives in the original text, which is what the
matcher needs to rewrite the file in place.  :func:`decode` is the
offset-free view over the same scan.

Leniency
--------
Decoding never raises.  A fragment without an id or a payload is dropped;
a trailing fragment without a terminator still decodes (the file may be in
the middle of an append) but carries no span, so it is never marked.

Status tokens
-------------
The third field is the status token.  Any further ``;``-separated fields are
status tokens too: a record is Done when at least one of them is ``OK`` in any
case.  ``"7;8;NOK ; OK."`` is therefore Done, which keeps a marker appended
after a foreign status token effective.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ledger_sync.ledger.types import (
    BYTE_ORDER_MARK,
    DONE_TOKEN,
    SEPARATOR,
    TERMINATOR,
    Record,
    RecordStatus,
    ScannedRecord,
    is_done_token,
    normalize_token,
)


def scan(text: str) -> Iterator[ScannedRecord]:
    """Yield every well-formed record in ``text`` with its raw offsets.

    Records are yielded in order of appearance.  Malformed fragments are
    skipped silently.

    Args:
        text: Raw ledger text, exactly as read from disk.

    Yields:
        :class:`ScannedRecord` instances.  ``terminator`` is ``None`` only
        for a final fragment that has no closing ``.``.
    """
    pos = 0
    length = len(text)
    while pos < length:
        terminator = text.find(TERMINATOR, pos)
        end = length if terminator == -1 else terminator
        scanned = _scan_fragment(text, pos, end, None if terminator == -1 else terminator)
        if scanned is not None:
            yield scanned
        if terminator == -1:
            break
        pos = terminator + 1


def decode(text: str) -> list[Record]:
    """Decode raw ledger text into its ordered sequence of records.

    Example::

        records = decode("121;417. 121;418;OK.")
        # -> [Record("121", "417", PENDING), Record("121", "418", DONE)]
    """
    return [scanned.record for scanned in scan(text)]


def encode(records: Iterable[Record], *, separator: str = "\n") -> str:
    """Render records in canonical form, one ``id;payload[;OK].`` per entry.

    Used to seed new ledgers; existing ledgers are never re-encoded, they are
    edited in place by :func:`~ledger_sync.ledger.mutator.apply_done_markers`.
    """
    parts = []
    for record in records:
        fields = [record.id, record.payload]
        if record.status is RecordStatus.DONE:
            fields.append(DONE_TOKEN)
        parts.append(SEPARATOR.join(fields) + TERMINATOR)
    return separator.join(parts)


# ── Internal helpers ──────────────────────────────────────────────────────────


def _field_bounds(text: str, start: int, end: int) -> list[tuple[int, int]]:
    """Split ``text[start:end]`` on the separator, returning raw offsets."""
    bounds = []
    field_start = start
    while True:
        sep = text.find(SEPARATOR, field_start, end)
        if sep == -1:
            bounds.append((field_start, end))
            return bounds
        bounds.append((field_start, sep))
        field_start = sep + 1


def _scan_fragment(
    text: str, start: int, end: int, terminator: int | None
) -> ScannedRecord | None:
    """Decode one terminator-delimited fragment, or return None if malformed."""
    bounds = _field_bounds(text, start, end)
    if len(bounds) < 2:
        return None

    id_start, id_end = bounds[0]
    payload_start, payload_end = bounds[1]
    raw_id = text[id_start:id_end]
    raw_payload = text[payload_start:payload_end]

    record_id = normalize_token(raw_id)
    payload = normalize_token(raw_payload)
    if not record_id or not payload:
        return None

    done = any(is_done_token(text[s:e]) for s, e in bounds[2:])
    record = Record(
        id=record_id,
        payload=payload,
        status=RecordStatus.DONE if done else RecordStatus.PENDING,
    )

    # Offset of the first id character; leading whitespace and a byte order
    # mark belong to no token.
    lead = raw_id.lstrip().lstrip(BYTE_ORDER_MARK).lstrip()
    first = id_start + len(raw_id) - len(lead)
    return ScannedRecord(record=record, start=first, terminator=terminator)
