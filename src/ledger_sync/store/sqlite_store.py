"""SQLite-backed record store.

Each accepted record becomes one parameterised statement::

    UPDATE "<table>" SET "<payload_column>" = ? WHERE "<id_column>" = ?

Table and column names come from configuration and are quoted as SQL
identifiers; values are always bound parameters.  An update that matches no
row is a failure: the record stays pending in the ledger and is retried on
the next pass.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path

from ledger_sync.errors import StoreConnectionError, StoreOperationContext, StoreUpdateError
from ledger_sync.store.base import BaseRecordStore

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote ``name`` as an SQLite identifier.

    Raises:
        ValueError: If ``name`` is empty or contains a NUL character.
    """
    if not name or not name.strip() or "\x00" in name:
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return '"' + name.replace('"', '""') + '"'


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply connection-level SQLite pragmas.

    ``busy_timeout`` lets SQLite wait out short write locks held by other
    processes instead of failing the update immediately.
    """
    connection.execute("PRAGMA busy_timeout = 5000")
    return connection


class SqliteRecordStore(BaseRecordStore):
    """Record store writing to one table of an SQLite database.

    Args:
        path: Database file.  It must already exist; the store never creates
            schema.
        table: Table holding the records.
        id_column: Column matched against the ledger id.
        payload_column: Column receiving the ledger payload.
        connect_attempts: Maximum number of connection attempts.
        connect_delay_seconds: Base delay between attempts, multiplied by the
            attempt number.
        sleep: Sleep function, replaced in tests.
    """

    name = "sqlite"

    def __init__(
        self,
        path: Path | str,
        *,
        table: str = "records",
        id_column: str = "id",
        payload_column: str = "payload",
        connect_attempts: int = 3,
        connect_delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__()
        self.path = Path(path)
        self.table = table
        self.connect_attempts = max(1, connect_attempts)
        self.connect_delay_seconds = connect_delay_seconds
        self._sleep = sleep
        self._connection: sqlite3.Connection | None = None
        self._update_sql = (
            f"UPDATE {quote_identifier(table)} "
            f"SET {quote_identifier(payload_column)} = ? "
            f"WHERE {quote_identifier(id_column)} = ?"
        )
        self._ping_sql = f"SELECT 1 FROM {quote_identifier(table)} LIMIT 1"

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            RuntimeError: If the store has not been opened.
        """
        self._require_open()
        assert self._connection is not None
        return self._connection

    def _open(self) -> None:
        # mode=rw: a missing database file fails instead of being created.
        uri = f"{self.path.resolve().as_uri()}?mode=rw"
        last_error: sqlite3.Error | None = None

        for attempt in range(1, self.connect_attempts + 1):
            try:
                logger.info(
                    "Connecting to record store (attempt %d/%d): %s",
                    attempt,
                    self.connect_attempts,
                    self.path,
                )
                # Passes run on the watcher worker thread, one at a time.
                connection = sqlite3.connect(uri, uri=True, check_same_thread=False)
                self._connection = configure_connection(connection)
                logger.info("Record store connection established")
                return
            except sqlite3.Error as exc:
                last_error = exc
                logger.error("Connection attempt %d failed: %s", attempt, exc)
                if attempt < self.connect_attempts:
                    delay = self.connect_delay_seconds * attempt
                    logger.info("Retrying in %.1fs...", delay)
                    self._sleep(delay)

        raise StoreConnectionError(
            context=StoreOperationContext(
                operation="sqlite.connect",
                details=f"{self.path} after {self.connect_attempts} attempts: {last_error}",
            ),
            cause=last_error,
        )

    def _close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
            logger.info("Record store connection closed")
        except sqlite3.Error as exc:
            logger.error("Error closing record store connection: %s", exc)
        finally:
            self._connection = None

    def update(self, record_id: str, payload: str) -> None:
        """Set ``payload`` on the row whose id column equals ``record_id``.

        Raises:
            StoreUpdateError: The statement failed or matched no row.
            RuntimeError: The store is not open.
        """
        connection = self.connection
        try:
            cursor = connection.execute(self._update_sql, (payload, record_id))
            connection.commit()
        except sqlite3.Error as exc:
            try:
                connection.rollback()
            except sqlite3.Error:
                # Preserve the original exception while best-effort rolling back.
                pass
            raise StoreUpdateError(
                context=StoreOperationContext(
                    operation="sqlite.update", details=f"id={record_id!r}: {exc}"
                ),
                cause=exc,
            ) from exc

        if cursor.rowcount == 0:
            raise StoreUpdateError(
                context=StoreOperationContext(
                    operation="sqlite.update",
                    details=f"id={record_id!r}: no row in {self.table!r}",
                )
            )
        logger.debug("Updated: ID=%s, payload=%s", record_id, payload)

    def ping(self) -> None:
        """Check that the configured table can be queried.

        Raises:
            StoreConnectionError: The query failed.
        """
        try:
            self.connection.execute(self._ping_sql).fetchone()
        except sqlite3.Error as exc:
            raise StoreConnectionError(
                context=StoreOperationContext(operation="sqlite.ping", details=str(exc)),
                cause=exc,
            ) from exc
