"""
Pytest configuration for http_txn tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import socket
import threading
import time
from typing import List, Optional

import pytest

from http_txn.client import Client, set_default_client
from http_txn.events import EventDispatcher
from http_txn.http_primitives import Request
from http_txn.transaction import IdSequence, Transaction
from http_txn.transfer import MockTransfer


@pytest.fixture
def dispatcher():
    """Create an isolated event dispatcher."""
    return EventDispatcher()


@pytest.fixture
def ids():
    """Create a fresh id sequence starting at 1."""
    return IdSequence()


@pytest.fixture
def recorded_events(dispatcher):
    """Record every "sending" and "done" event as (name, *args)."""
    events = []
    dispatcher.add_listener("sending", lambda *args: events.append(("sending",) + args))
    dispatcher.add_listener("done", lambda *args: events.append(("done",) + args))
    return events


@pytest.fixture
def make_transaction(dispatcher, ids):
    """Create a transaction over a MockTransfer scripted with chunks."""
    def _create(
        chunks: List[bytes],
        request: Optional[Request] = None,
        **kwargs,
    ) -> Transaction:
        transfer = kwargs.pop("transfer", None) or MockTransfer(chunks)
        return Transaction(
            request or Request.get("http://example.com/api"),
            transfer=transfer,
            dispatcher=dispatcher,
            ids=ids,
            **kwargs,
        )
    return _create


@pytest.fixture
def sample_response_bytes():
    """A complete raw response, as delivered by a transfer."""
    return (
        b"HTTP/1.1 201 Created\r\n"
        b"Content-Type: application/json\r\n"
        b"Location: http://example.com/users/123\r\n"
        b"\r\n"
        b'{"id": 123}'
    )


@pytest.fixture
def mock_client(dispatcher, ids):
    """Create a Client whose transfers replay the given chunks."""
    def _create(chunks: List[bytes]) -> Client:
        transfers: List[MockTransfer] = []

        def factory() -> MockTransfer:
            transfer = MockTransfer(chunks)
            transfers.append(transfer)
            return transfer

        client = Client(transfer_factory=factory, dispatcher=dispatcher, ids=ids)
        client.transfers = transfers
        return client
    return _create


@pytest.fixture
def default_client_reset():
    """Restore the module-level default client after the test."""
    yield
    set_default_client(None)


class CannedHTTPServer:
    """
    One-shot HTTP server on localhost.

    Accepts a single connection, reads one request (head and
    Content-Length body), replies with the scripted parts and closes.
    """

    def __init__(self, parts: List[bytes], delay: float = 0.01) -> None:
        self._parts = parts
        self._delay = delay
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(5.0)
        self.port = self._sock.getsockname()[1]
        self.received = b""
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def url(self, path: str = "/") -> str:
        return f"http://127.0.0.1:{self.port}{path}"

    def _serve(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5.0)
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(4096)
                if not chunk:
                    return
                data += chunk

            head, _, body = data.partition(b"\r\n\r\n")
            length = 0
            for line in head.split(b"\r\n")[1:]:
                name, _, value = line.partition(b":")
                if name.strip().lower() == b"content-length":
                    length = int(value.strip())
            while len(body) < length:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                body += chunk
            self.received = head + b"\r\n\r\n" + body

            for part in self._parts:
                conn.sendall(part)
                time.sleep(self._delay)

    def close(self) -> None:
        self._sock.close()
        self._thread.join(timeout=5.0)


@pytest.fixture
def http_server():
    """Start canned servers and close them after the test."""
    servers: List[CannedHTTPServer] = []

    def _start(parts: List[bytes]) -> CannedHTTPServer:
        server = CannedHTTPServer(parts)
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.close()


@pytest.fixture
def unused_port() -> int:
    """A localhost port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
