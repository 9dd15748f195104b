"""
High-level fetch API for http_txn.

This module provides the Client class, which creates transactions
with its own id sequence, transfer factory and event dispatcher, and
the module-level ``fetch`` helpers backed by a default client.
"""

import json
from typing import Any, Callable, Optional

from .deferred import Deferred
from .events import EventDispatcher
from .headers import Headers, HeadersInit
from .http_primitives import PROTOCOL_1_1, Request, Response
from .streams import ChunkStream
from .transaction import IdSequence, Transaction
from .transfer import H11Transfer, TransferPrimitive


TransferFactory = Callable[[], TransferPrimitive]


class Client:
    """
    Factory for transactions sharing configuration.

    Every transaction created by a client takes its id from the client's
    sequence and reports to the client's dispatcher.
    """

    def __init__(
        self,
        transfer_factory: TransferFactory = H11Transfer,
        dispatcher: Optional[EventDispatcher] = None,
        ids: Optional[IdSequence] = None,
        select_timeout: Optional[float] = None,
        encoding: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            transfer_factory: Creates one transfer primitive per transaction
            dispatcher: Event dispatcher (process-wide one if None)
            ids: Transaction id sequence (process-wide one if None)
            select_timeout: Wait bound passed to each transaction
            encoding: Text encoding passed to each transaction
        """
        self._transfer_factory = transfer_factory
        self._dispatcher = dispatcher or EventDispatcher.instance()
        self._ids = ids or IdSequence.default()
        self._select_timeout = select_timeout
        self._encoding = encoding

    def transaction(self, request: Request) -> Transaction:
        """Create a transaction for ``request``."""
        return Transaction(
            request,
            transfer=self._transfer_factory(),
            dispatcher=self._dispatcher,
            ids=self._ids,
            select_timeout=self._select_timeout,
            encoding=self._encoding,
        )

    def _build_request(
        self,
        url: str,
        data: Optional[str],
        method: Optional[str],
        headers: Optional[HeadersInit],
    ) -> Request:
        return Request(
            method or "GET",
            url,
            PROTOCOL_1_1,
            Headers(headers),
            data or "",
        )

    def fetch(
        self,
        url: str,
        data: str = "",
        method: str = "",
        headers: Optional[HeadersInit] = None,
    ) -> "Deferred[Response]":
        """
        Perform a request and return a deferred response.

        Args:
            url: Absolute URL
            data: Request body
            method: HTTP method (GET if empty)
            headers: Request headers

        Returns:
            Deferred resolving to the Response
        """
        transaction = self.transaction(self._build_request(url, data, method, headers))

        async def run() -> Response:
            try:
                return await transaction.exec()
            finally:
                transaction.release()

        return Deferred(run)

    def fetch_json(
        self,
        url: str,
        data: Any = None,
        method: str = "",
        headers: Optional[HeadersInit] = None,
    ) -> "Deferred[Any]":
        """
        Perform a JSON request and return the deferred decoded body.

        ``data`` is JSON-encoded unless it is None; Content-Type is set
        to application/json.
        """
        merged = Headers(headers)
        merged.set("Content-Type", "application/json")
        body = json.dumps(data) if data is not None else ""

        return self.fetch(url, body, method, merged).then(lambda response: response.json())

    def fetch_stream(
        self,
        url: str,
        data: Optional[str] = None,
        method: Optional[str] = None,
        headers: Optional[HeadersInit] = None,
        separator: Optional[str] = None,
    ) -> ChunkStream:
        """
        Perform a request and stream the response body.

        Args:
            url: Absolute URL
            data: Optional request body
            method: HTTP method (GET if empty)
            headers: Request headers
            separator: Chunk separator (CRLF if None)

        Returns:
            Async iterator of raw body chunks, releasing the transaction
            when exhausted
        """
        transaction = self.transaction(self._build_request(url, data, method, headers))
        return transaction.stream(separator)


_default_client: Optional[Client] = None


def get_default_client() -> Client:
    """Return the client used by the module-level helpers."""
    global _default_client
    if _default_client is None:
        _default_client = Client()
    return _default_client


def set_default_client(client: Optional[Client]) -> None:
    """Replace the default client (None restores a fresh one on next use)."""
    global _default_client
    _default_client = client


def fetch(
    url: str,
    data: str = "",
    method: str = "",
    headers: Optional[HeadersInit] = None,
) -> "Deferred[Response]":
    """Perform a request with the default client."""
    return get_default_client().fetch(url, data, method, headers)


def fetch_json(
    url: str,
    data: Any = None,
    method: str = "",
    headers: Optional[HeadersInit] = None,
) -> "Deferred[Any]":
    """Perform a JSON request with the default client."""
    return get_default_client().fetch_json(url, data, method, headers)


def fetch_stream(
    url: str,
    data: Optional[str] = None,
    method: Optional[str] = None,
    headers: Optional[HeadersInit] = None,
    separator: Optional[str] = None,
) -> ChunkStream:
    """Stream a response body with the default client."""
    return get_default_client().fetch_stream(url, data, method, headers, separator)
