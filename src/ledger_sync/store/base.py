"""Record store contract.

A record store is anything that durably accepts a keyed update: "set the
payload of record ``id``".  The store handle is owned by whoever runs the
passes (the CLI or the watcher), opened once, passed into every pass, and
closed on shutdown::

    with create_store(config.store) as store:
        run_pass(path, store)
"""

from __future__ import annotations

from typing import Any, Protocol


class RecordStore(Protocol):
    """Structural type accepted by :func:`~ledger_sync.sync.runner.run_pass`."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def update(self, record_id: str, payload: str) -> None: ...

    def ping(self) -> None: ...


class BaseRecordStore:
    """Shared open/close lifecycle for the concrete stores.

    Subclasses implement :meth:`_open`, :meth:`_close`, :meth:`update` and
    :meth:`ping`.  :meth:`open` is idempotent; :meth:`close` on a store that
    was never opened is a no-op.
    """

    name = "store"

    def __init__(self) -> None:
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        if self._is_open:
            return
        self._open()
        self._is_open = True

    def close(self) -> None:
        if not self._is_open:
            return
        try:
            self._close()
        finally:
            self._is_open = False

    def __enter__(self) -> BaseRecordStore:
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._is_open:
            raise RuntimeError(
                f"{type(self).__name__} is not open. "
                "Call open() or use it as a context manager first."
            )

    def _open(self) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError

    def update(self, record_id: str, payload: str) -> None:
        raise NotImplementedError

    def ping(self) -> None:
        raise NotImplementedError
