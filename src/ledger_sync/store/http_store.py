"""HTTP-backed record store.

Talks to a REST service exposing::

    GET  {base_url}/health              -> 2xx when the service is up
    PUT  {base_url}/records/{id}        body: {"payload": "<payload>"}

Any 2xx response to the ``PUT`` counts as a durable update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import quote

import requests

from ledger_sync.errors import StoreConnectionError, StoreOperationContext, StoreUpdateError
from ledger_sync.store.base import BaseRecordStore

logger = logging.getLogger(__name__)


class HttpRecordStore(BaseRecordStore):
    """Record store that pushes updates to an HTTP API.

    Args:
        base_url: Service root, e.g. ``http://localhost:8000``.
        timeout: Per-request timeout in seconds.
        session_factory: Callable returning a :class:`requests.Session`;
            replaced in tests.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: int = 30,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session_factory = session_factory
        self._session: requests.Session | None = None

    @property
    def session(self) -> requests.Session:
        self._require_open()
        assert self._session is not None
        return self._session

    def _open(self) -> None:
        self._session = self._session_factory()

    def _close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def record_url(self, record_id: str) -> str:
        return f"{self.base_url}/records/{quote(record_id, safe='')}"

    def update(self, record_id: str, payload: str) -> None:
        """PUT the payload for ``record_id``.

        Raises:
            StoreUpdateError: Connection failure, timeout or non-2xx status.
        """
        url = self.record_url(record_id)
        try:
            response = self.session.request(
                method="PUT",
                url=url,
                json={"payload": payload},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise StoreUpdateError(
                context=StoreOperationContext(
                    operation="http.update", details=f"id={record_id!r}: {exc}"
                ),
                cause=exc,
            ) from exc

        if not 200 <= response.status_code < 300:
            raise StoreUpdateError(
                context=StoreOperationContext(
                    operation="http.update",
                    details=f"id={record_id!r}: HTTP {response.status_code} from {url}",
                )
            )
        logger.debug("Updated: ID=%s, payload=%s", record_id, payload)

    def ping(self) -> None:
        url = f"{self.base_url}/health"
        try:
            response = self.session.request(method="GET", url=url, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise StoreConnectionError(
                context=StoreOperationContext(operation="http.ping", details=str(exc)),
                cause=exc,
            ) from exc
        if not 200 <= response.status_code < 300:
            raise StoreConnectionError(
                context=StoreOperationContext(
                    operation="http.ping", details=f"HTTP {response.status_code} from {url}"
                )
            )
