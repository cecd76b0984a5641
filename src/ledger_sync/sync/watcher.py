"""File watcher: runs a pass whenever the ledger is created or changed.

Passes never overlap.  :class:`PassScheduler` owns a single worker thread;
file events only set a wake-up flag, so any number of events that arrive while
a pass is running collapse into exactly one follow-up pass.

A pass that rewrites the ledger produces one more change event.  The pass it
triggers finds nothing left to mark, does not write, and the loop settles.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ledger_sync.errors import LedgerSyncError

logger = logging.getLogger(__name__)


class PassScheduler:
    """Serialise pass execution on one worker thread.

    Args:
        run: Callable running one pass.  Its return value is ignored.
        debounce_seconds: Quiet period after a wake-up before the pass
            starts, so a burst of writes triggers one pass.
    """

    def __init__(self, run: Callable[[], Any], *, debounce_seconds: float = 0.0) -> None:
        self._run = run
        self._debounce_seconds = debounce_seconds
        self._wake = threading.Event()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None
        self.passes_run = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._loop, name="ledger-sync-pass", daemon=True)
        self._thread.start()

    def trigger(self) -> None:
        """Request a pass.  Returns immediately."""
        self._wake.set()

    def stop(self, timeout: float | None = None) -> None:
        """Stop after the pass in flight, if any, completes."""
        self._stopping.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while True:
            self._wake.wait()
            if self._stopping.is_set():
                return
            if self._debounce_seconds and self._stopping.wait(self._debounce_seconds):
                return
            self._wake.clear()
            self._run_one()

    def _run_one(self) -> None:
        try:
            self._run()
        except LedgerSyncError as exc:
            logger.error("Pass aborted: %s", exc)
        except Exception:
            logger.exception("Unexpected error during pass; watcher keeps running")
        finally:
            self.passes_run += 1


class LedgerEventHandler(FileSystemEventHandler):
    """Forward create/modify/move-in events for one file to ``on_change``."""

    def __init__(self, path: Path, on_change: Callable[[], None]) -> None:
        super().__init__()
        self.path = path
        self._on_change = on_change

    def _is_target(self, raw_path: bytes | str) -> bool:
        return Path(os.fsdecode(raw_path)).resolve() == self.path

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.src_path):
            logger.info("File added: %s", self.path)
            self._on_change()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.src_path):
            logger.info("File changed: %s", self.path)
            self._on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.dest_path):
            logger.info("File replaced: %s", self.path)
            self._on_change()

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.src_path):
            logger.info("File removed: %s", self.path)


class LedgerWatcher:
    """Watch one ledger file and run serialised passes on change.

    The watcher observes the file's parent directory, so the ledger may be
    created after the watcher starts.

    Example::

        with LedgerWatcher(path, lambda: run_pass(path, store)) as watcher:
            watcher.wait()
    """

    def __init__(
        self,
        path: Path | str,
        run: Callable[[], Any],
        *,
        debounce_seconds: float = 0.5,
        run_on_start: bool = True,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.path = Path(path).resolve()
        self.run_on_start = run_on_start
        self.scheduler = PassScheduler(run, debounce_seconds=debounce_seconds)
        self.handler = LedgerEventHandler(self.path, self.scheduler.trigger)
        self._observer_factory = observer_factory
        self._observer: Any = None

    def start(self) -> None:
        self.scheduler.start()
        self._observer = self._observer_factory()
        self._observer.schedule(self.handler, str(self.path.parent), recursive=False)
        self._observer.start()
        logger.info("Watching file: %s", self.path)
        if self.run_on_start and self.path.exists():
            self.scheduler.trigger()

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self.scheduler.stop()
        logger.info("Watcher stopped")

    def wait(self, poll_seconds: float = 1.0) -> None:
        """Block until the observer thread exits (or KeyboardInterrupt)."""
        while self._observer is not None and self._observer.is_alive():
            self._observer.join(poll_seconds)

    def __enter__(self) -> LedgerWatcher:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()
