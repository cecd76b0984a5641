"""Tests for ledger file reading and writing (busy retries, byte preservation)."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from ledger_sync.errors import LedgerBusyError, LedgerUnreadableError, LedgerWriteError
from ledger_sync.fs import is_transient_error, read_ledger, write_ledger
from tests.helpers import read_raw


def _busy_open(
    monkeypatch: pytest.MonkeyPatch, failures: int, err: int = errno.EBUSY
) -> list[int]:
    """Make ``Path.open`` raise ``err`` for the first ``failures`` calls."""
    calls: list[int] = []
    real_open = Path.open

    def fake_open(self, *args, **kwargs):
        calls.append(1)
        if len(calls) <= failures:
            raise OSError(err, "Device or resource busy")
        return real_open(self, *args, **kwargs)

    monkeypatch.setattr(Path, "open", fake_open)
    return calls


@pytest.mark.unit
class TestIsTransientError:
    @pytest.mark.parametrize("code", [errno.EBUSY, errno.EAGAIN])
    def test_busy_errnos_are_transient(self, code: int) -> None:
        assert is_transient_error(OSError(code, "busy")) is True

    @pytest.mark.parametrize("code", [errno.ENOENT, errno.EACCES, errno.EISDIR])
    def test_other_errnos_are_not(self, code: int) -> None:
        assert is_transient_error(OSError(code, "nope")) is False

    @pytest.mark.parametrize("winerror", [32, 33])
    def test_windows_sharing_violations_are_transient(self, winerror: int) -> None:
        exc = PermissionError(errno.EACCES, "in use by another process")
        exc.winerror = winerror
        assert is_transient_error(exc) is True


class TestReadLedger:
    def test_byte_order_mark_is_kept(self, write_ledger_file) -> None:
        path = write_ledger_file("\ufeff1;2.")
        assert read_ledger(path) == "\ufeff1;2."

    def test_reads_text_verbatim(self, write_ledger_file) -> None:
        path = write_ledger_file("1;2.\r\n 3 ; 4 .\r\n")
        assert read_ledger(path) == "1;2.\r\n 3 ; 4 .\r\n"

    def test_accepts_str_path(self, write_ledger_file) -> None:
        path = write_ledger_file("1;2.")
        assert read_ledger(str(path)) == "1;2."

    def test_retries_busy_file_with_linear_backoff(
        self, write_ledger_file, monkeypatch, sleeps, fake_sleep
    ) -> None:
        path = write_ledger_file("1;2.")
        calls = _busy_open(monkeypatch, failures=2)

        text = read_ledger(path, attempts=3, delay_seconds=5.0, sleep=fake_sleep)

        assert text == "1;2."
        assert len(calls) == 3
        assert sleeps == [5.0, 10.0]

    def test_gives_up_after_all_attempts(
        self, write_ledger_file, monkeypatch, sleeps, fake_sleep
    ) -> None:
        path = write_ledger_file("1;2.")
        calls = _busy_open(monkeypatch, failures=10)

        with pytest.raises(LedgerBusyError) as exc_info:
            read_ledger(path, attempts=3, delay_seconds=1.0, sleep=fake_sleep)

        assert len(calls) == 3
        assert sleeps == [1.0, 2.0]
        assert exc_info.value.transient is True
        assert exc_info.value.path == path

    def test_at_least_one_attempt_is_made(self, write_ledger_file, fake_sleep) -> None:
        path = write_ledger_file("1;2.")
        assert read_ledger(path, attempts=0, sleep=fake_sleep) == "1;2."

    def test_permission_error_is_not_retried(
        self, write_ledger_file, monkeypatch, sleeps, fake_sleep
    ) -> None:
        path = write_ledger_file("1;2.")
        calls = _busy_open(monkeypatch, failures=1, err=errno.EACCES)

        with pytest.raises(LedgerUnreadableError) as exc_info:
            read_ledger(path, attempts=3, sleep=fake_sleep)

        assert len(calls) == 1
        assert sleeps == []
        assert exc_info.value.transient is False

    def test_missing_file_is_unreadable(self, tmp_path, fake_sleep) -> None:
        with pytest.raises(LedgerUnreadableError):
            read_ledger(tmp_path / "missing.txt", sleep=fake_sleep)

    def test_invalid_utf8_is_unreadable(self, tmp_path, fake_sleep) -> None:
        path = tmp_path / "ledger.txt"
        path.write_bytes(b"1;\xff\xfe.")

        with pytest.raises(LedgerUnreadableError, match="UTF-8"):
            read_ledger(path, sleep=fake_sleep)


class TestWriteLedger:
    def test_writes_bytes_without_newline_translation(self, tmp_path) -> None:
        path = tmp_path / "ledger.txt"
        write_ledger(path, "1;2 ; OK.\r\n3;4.")
        assert read_raw(path) == "1;2 ; OK.\r\n3;4."

    def test_overwrites_existing_content(self, write_ledger_file) -> None:
        path = write_ledger_file("1;2. 3;4. 5;6.")
        write_ledger(path, "1;2 ; OK.")
        assert read_raw(path) == "1;2 ; OK."

    def test_writes_utf8(self, tmp_path) -> None:
        path = tmp_path / "ledger.txt"
        write_ledger(path, "ação;1.")
        assert read_raw(path) == "ação;1."

    def test_write_failure_raises_ledger_write_error(self, tmp_path) -> None:
        with pytest.raises(LedgerWriteError) as exc_info:
            write_ledger(tmp_path, "1;2.")
        assert exc_info.value.path == tmp_path
