"""Ledger file reader and writer.

The ledger is read and written as UTF-8 with newline translation disabled,
so ``\\r\\n`` line endings and every other byte outside an inserted marker
survive a read/write cycle unchanged.

Busy retries
------------
Another program may hold the ledger open while it appends to it.  A read that
fails with a busy/locked condition is retried up to ``attempts`` times with a
linearly increasing delay (``delay_seconds * attempt``).  Any other failure
(missing file, permission denied, invalid UTF-8) is raised immediately.

Writes are never retried here; a failed write aborts the pass and the next
trigger starts over from a fresh read.
"""

from __future__ import annotations

import errno
import logging
import time
from collections.abc import Callable
from pathlib import Path

from ledger_sync.errors import LedgerBusyError, LedgerUnreadableError, LedgerWriteError

logger = logging.getLogger(__name__)

_TRANSIENT_ERRNOS = frozenset({errno.EBUSY, errno.EAGAIN})

# ERROR_SHARING_VIOLATION and ERROR_LOCK_VIOLATION, surfaced on Windows as
# PermissionError with a ``winerror`` attribute.
_TRANSIENT_WINERRORS = frozenset({32, 33})


def is_transient_error(exc: OSError) -> bool:
    """Return True when ``exc`` is a busy/locked condition worth retrying."""
    if exc.errno in _TRANSIENT_ERRNOS:
        return True
    return getattr(exc, "winerror", None) in _TRANSIENT_WINERRORS


def read_ledger(
    path: Path | str,
    *,
    attempts: int = 3,
    delay_seconds: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Read the whole ledger file, retrying while it is busy.

    Args:
        path: Ledger file path.
        attempts: Maximum number of reads, at least one is always made.
        delay_seconds: Base delay; the wait after attempt ``n`` is
            ``delay_seconds * n``.
        sleep: Sleep function, replaced in tests.

    Returns:
        The raw file content.

    Raises:
        LedgerBusyError: Every attempt hit a busy/locked condition.
        LedgerUnreadableError: The file is missing, not readable, or not
            valid UTF-8.
    """
    path = Path(path)
    attempts = max(1, attempts)
    last_error: OSError | None = None

    for attempt in range(1, attempts + 1):
        try:
            with path.open("r", encoding="utf-8", newline="") as fh:
                return fh.read()
        except UnicodeDecodeError as exc:
            raise LedgerUnreadableError(path, f"not valid UTF-8: {exc}") from exc
        except OSError as exc:
            if not is_transient_error(exc):
                raise LedgerUnreadableError(path, str(exc)) from exc
            last_error = exc
            logger.warning("Ledger busy (attempt %d/%d): %s", attempt, attempts, exc)
            if attempt < attempts:
                delay = delay_seconds * attempt
                logger.debug("Retrying ledger read in %.1fs", delay)
                sleep(delay)

    raise LedgerBusyError(
        path, f"still busy after {attempts} attempts: {last_error}"
    ) from last_error


def write_ledger(path: Path | str, text: str) -> None:
    """Overwrite the ledger file with ``text``.

    Raises:
        LedgerWriteError: The file could not be written.
    """
    path = Path(path)
    try:
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as exc:
        raise LedgerWriteError(path, str(exc)) from exc
    logger.debug("ledger: wrote %d characters to %s", len(text), path.name)
