"""Record store clients.

Public surface
--------------
- :class:`RecordStore`: structural type the pass runner accepts.
- :class:`SqliteRecordStore`: updates rows in an SQLite table.
- :class:`HttpRecordStore`: PUTs updates to a REST service.
- :func:`create_store`: build the store selected in configuration.
"""

from __future__ import annotations

from ledger_sync.config import StoreSettings
from ledger_sync.store.base import BaseRecordStore, RecordStore
from ledger_sync.store.http_store import HttpRecordStore
from ledger_sync.store.sqlite_store import SqliteRecordStore


def create_store(settings: StoreSettings) -> BaseRecordStore:
    """Build an unopened store for ``settings.backend``.

    Raises:
        ValueError: Unknown backend name.
    """
    if settings.backend == "sqlite":
        return SqliteRecordStore(
            settings.absolute_sqlite_path,
            table=settings.table,
            id_column=settings.id_column,
            payload_column=settings.payload_column,
            connect_attempts=settings.connect_attempts,
            connect_delay_seconds=settings.connect_delay_seconds,
        )
    if settings.backend == "http":
        return HttpRecordStore(settings.http_base_url, timeout=settings.http_timeout_seconds)
    raise ValueError(f"Unknown record store backend: {settings.backend!r}")


__all__ = [
    "BaseRecordStore",
    "HttpRecordStore",
    "RecordStore",
    "SqliteRecordStore",
    "create_store",
]
