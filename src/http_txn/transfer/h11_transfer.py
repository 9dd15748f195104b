"""
Socket transfer implementation for http_txn.

This module implements H11Transfer, a TransferPrimitive that performs
one HTTP/1.1 exchange over a non-blocking socket, using h11 for
request framing and response parsing.
"""

import errno
import logging
import select
import socket
import ssl
import time
from enum import Enum
from typing import Any, Dict, Optional

import h11

from ..exceptions import (
    ConnectionError,
    ProtocolError,
    TimeoutError,
    TransferError,
)
from .base import ByteSink, HeaderLines, TransferPrimitive
from .utils import (
    TransferURL,
    create_connection_socket,
    create_ssl_context,
    get_socket_error,
    parse_url,
)

logger = logging.getLogger(__name__)

_CONNECT_PENDING = (0, errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EALREADY)
_WOULD_BLOCK = (BlockingIOError, ssl.SSLWantReadError, ssl.SSLWantWriteError)


class TransferPhase(Enum):
    """Phases of a socket transfer."""
    NEW = "new"                  # Created, not yet configured
    CONNECTING = "connecting"    # TCP connect in progress
    HANDSHAKING = "handshaking"  # TLS handshake in progress
    SENDING = "sending"          # Writing the serialized request
    RECEIVING = "receiving"      # Reading the response
    DONE = "done"                # Response complete
    CLOSED = "closed"            # Released, cannot be used


class H11Transfer(TransferPrimitive):
    """
    HTTP/1.1 transfer over a non-blocking socket.

    Every ``step()`` advances the exchange as far as it can without
    blocking. The byte sink receives the response head, re-rendered as
    on the wire, followed by the de-framed body.
    """

    # Default configuration
    DEFAULT_CONNECT_TIMEOUT = 30.0  # 30 seconds
    DEFAULT_READ_SIZE = 65536  # 64KB reads

    def __init__(
        self,
        connect_timeout: Optional[float] = None,
        read_size: Optional[int] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ):
        """
        Initialize the transfer.

        Args:
            connect_timeout: Timeout for connect and TLS handshake in seconds
            read_size: Maximum bytes read from the socket at once
            ssl_context: SSL context for https URLs (default context if None)
        """
        self._connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT
        self._read_size = read_size or self.DEFAULT_READ_SIZE
        self._ssl_context = ssl_context

        self._h11_connection = h11.Connection(h11.CLIENT)
        self._phase = TransferPhase.NEW
        self._url: Optional[TransferURL] = None
        self._sock: Optional[socket.socket] = None
        self._sink: Optional[ByteSink] = None
        self._outgoing = b""
        self._deadline: Optional[float] = None

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0

    def configure(
        self,
        method: str,
        url: str,
        headers: HeaderLines,
        body: Optional[bytes] = None,
    ) -> None:
        """
        Serialize the request and prepare to connect.

        A Host header is added when missing, and Content-Length when a
        body is given without any framing header.

        Raises:
            TransferError: If already configured or the URL is invalid
            ProtocolError: If h11 rejects the request
        """
        if self._phase is not TransferPhase.NEW:
            raise TransferError(f"Transfer cannot be configured in phase {self._phase.value}")

        try:
            self._url = parse_url(url)
        except ValueError as e:
            raise TransferError(str(e), e) from e

        lines = list(headers)
        names = {name.lower() for name, _ in lines}
        if "host" not in names:
            lines.insert(0, ("Host", self._url.host_header))
        if body and not names & {"content-length", "transfer-encoding"}:
            lines.append(("Content-Length", str(len(body))))

        try:
            data = self._h11_connection.send(h11.Request(
                method=method.encode("ascii"),
                target=self._url.target.encode("utf-8"),
                headers=[(n.encode("ascii"), v.encode("utf-8")) for n, v in lines],
            ))
            if body:
                data += self._h11_connection.send(h11.Data(data=body))
            data += self._h11_connection.send(h11.EndOfMessage())
        except (h11.LocalProtocolError, UnicodeEncodeError) as e:
            raise ProtocolError(f"Invalid request: {e}", e) from e

        self._outgoing = data
        self._phase = TransferPhase.CONNECTING
        logger.debug(f"Transfer configured: {method} {url} ({len(data)} bytes to send)")

    def register_byte_sink(self, sink: ByteSink) -> None:
        self._sink = sink

    def step(self) -> bool:
        """
        Advance connect, handshake, send and receive without blocking.

        Returns:
            True while the response is not complete

        Raises:
            ConnectionError: If a socket operation fails
            TimeoutError: If connecting takes longer than the timeout
            ProtocolError: If the server response violates HTTP/1.1
        """
        if self._phase is TransferPhase.CLOSED:
            raise TransferError("Transfer is released")
        if self._phase is TransferPhase.NEW:
            raise TransferError("Transfer is not configured")

        try:
            if self._phase is TransferPhase.CONNECTING:
                self._connect()
            if self._phase is TransferPhase.HANDSHAKING:
                self._handshake()
            if self._phase is TransferPhase.SENDING:
                self._send()
            if self._phase is TransferPhase.RECEIVING:
                self._receive()
        except TransferError:
            self._close_socket()
            raise
        except h11.ProtocolError as e:
            self._close_socket()
            raise ProtocolError(str(e), e) from e
        except OSError as e:
            self._close_socket()
            raise ConnectionError(str(e), e) from e

        return self._phase is not TransferPhase.DONE

    def _connect(self) -> None:
        assert self._url is not None
        host, port = self._url.host, self._url.port

        if self._sock is None:
            self._sock = create_connection_socket(host)
            self._deadline = time.monotonic() + self._connect_timeout
            code = self._sock.connect_ex((host, port))
            if code not in _CONNECT_PENDING:
                raise ConnectionError(f"Failed to connect to {host}:{port}: {errno.errorcode.get(code, code)}")

        _, writable, _ = select.select([], [self._sock], [], 0)
        if not writable:
            self._check_deadline()
            return

        error = get_socket_error(self._sock)
        if error is not None:
            raise ConnectionError(f"Failed to connect to {host}:{port}: {error}")

        logger.debug(f"Connected to {host}:{port}")

        if self._url.is_tls:
            context = self._ssl_context or create_ssl_context(alpn_protocols=["http/1.1"])
            self._sock = context.wrap_socket(
                self._sock, server_hostname=host, do_handshake_on_connect=False
            )
            self._phase = TransferPhase.HANDSHAKING
        else:
            self._phase = TransferPhase.SENDING

    def _handshake(self) -> None:
        assert isinstance(self._sock, ssl.SSLSocket)
        try:
            self._sock.do_handshake()
        except (ssl.SSLWantReadError, ssl.SSLWantWriteError):
            self._check_deadline()
            return
        self._phase = TransferPhase.SENDING

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise TimeoutError("Connection timed out", timeout=self._connect_timeout)

    def _send(self) -> None:
        assert self._sock is not None
        while self._outgoing:
            try:
                sent = self._sock.send(self._outgoing)
            except _WOULD_BLOCK:
                return
            self._outgoing = self._outgoing[sent:]
            self._bytes_sent += sent
        self._phase = TransferPhase.RECEIVING

    def _receive(self) -> None:
        assert self._sock is not None
        while True:
            event = self._h11_connection.next_event()

            if event is h11.NEED_DATA:
                try:
                    data = self._sock.recv(self._read_size)
                except _WOULD_BLOCK:
                    return
                except ssl.SSLZeroReturnError:
                    data = b""
                # An empty read tells h11 the peer closed the connection
                self._h11_connection.receive_data(data)
                self._bytes_received += len(data)
                continue

            if isinstance(event, h11.InformationalResponse):
                continue

            if isinstance(event, h11.Response):
                self._emit(self._render_head(event))
                continue

            if isinstance(event, h11.Data):
                self._emit(bytes(event.data))
                continue

            if isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                self._phase = TransferPhase.DONE
                self._close_socket()
                logger.debug(
                    f"Transfer done: {self._bytes_sent} bytes sent, "
                    f"{self._bytes_received} bytes received"
                )
                return

    @staticmethod
    def _render_head(event: h11.Response) -> bytes:
        lines = [
            b"HTTP/%s %d %s" % (event.http_version, event.status_code, event.reason)
        ]
        lines.extend(name + b": " + value for name, value in event.headers.raw_items())
        return b"\r\n".join(lines) + b"\r\n\r\n"

    def _emit(self, chunk: bytes) -> None:
        if chunk and self._sink is not None:
            self._sink(chunk)

    def wait_readable(self, timeout: float) -> None:
        """
        Wait until the socket is ready for the current phase.

        Args:
            timeout: Maximum wait in seconds (0 polls without waiting)
        """
        sock = self._sock
        if sock is None or self._phase in (TransferPhase.DONE, TransferPhase.CLOSED):
            return

        if isinstance(sock, ssl.SSLSocket) and sock.pending():
            return

        writers = [sock] if self._phase in (
            TransferPhase.CONNECTING,
            TransferPhase.HANDSHAKING,
            TransferPhase.SENDING,
        ) else []

        try:
            select.select([sock], writers, [], timeout)
        except (OSError, ValueError) as e:
            raise ConnectionError(f"select failed: {e}", e) from e

    def _close_socket(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def release(self) -> None:
        """Close the socket. Safe to call at any phase."""
        self._close_socket()
        self._phase = TransferPhase.CLOSED

    @property
    def is_released(self) -> bool:
        return self._phase is TransferPhase.CLOSED

    @property
    def phase(self) -> TransferPhase:
        return self._phase

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get transfer metrics.

        Returns:
            Dictionary with transfer metrics
        """
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "phase": self._phase.value,
        }
