"""
HTTP transaction engine for http_txn.

This module implements the Transaction class that drives a single
HTTP exchange through a non-blocking TransferPrimitive, either to
completion (``exec``) or as a stream of separator-delimited chunks
(``stream``).
"""

import asyncio
import itertools
import logging
import threading
from enum import Enum
from typing import List, Optional

from .events import EVENT_DONE, EVENT_SENDING, EventDispatcher
from .exceptions import HTTPCoreError, StreamError, TransferError
from .http_primitives import DELIMITER, LINEBREAK, Request, Response
from .streams import ChunkStream
from .transfer import H11Transfer, TransferPrimitive

logger = logging.getLogger(__name__)

_DELIMITER_BYTES = DELIMITER.encode("ascii")


class TransactionState(Enum):
    """States of a transaction. Transitions only move forward."""
    SENDING = "sending"                # Created, transfer not started
    RECEIVING_HEAD = "receiving_head"  # Waiting for the end of the response head
    RECEIVING_BODY = "receiving_body"  # Head consumed by a stream, body pending
    DONE = "done"                      # Transfer complete, response available


class IdSequence:
    """Thread-safe monotonic id generator, starting at 1 by default."""

    _default: Optional["IdSequence"] = None
    _default_lock = threading.Lock()

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> "IdSequence":
        """Return the process-wide sequence."""
        with cls._default_lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


class Transaction:
    """
    One HTTP request/response exchange.

    The transaction owns its transfer primitive and buffers. It is
    single-use: the response is materialized at most once, and a chunk
    stream can be requested at most once.
    """

    # Default configuration
    DEFAULT_SELECT_TIMEOUT = 0.0  # poll without waiting
    DEFAULT_SEPARATOR = LINEBREAK
    DEFAULT_ENCODING = "utf-8"

    def __init__(
        self,
        request: Request,
        transfer: Optional[TransferPrimitive] = None,
        dispatcher: Optional[EventDispatcher] = None,
        ids: Optional[IdSequence] = None,
        select_timeout: Optional[float] = None,
        encoding: Optional[str] = None,
    ):
        """
        Initialize the transaction and configure its transfer.

        Args:
            request: The HTTP request to send; its target is the full URL
            transfer: Transfer primitive to drive (H11Transfer if None)
            dispatcher: Event dispatcher (process-wide one if None)
            ids: Id sequence (process-wide one if None)
            select_timeout: Wait bound in seconds for each poll
            encoding: Encoding of the request body and received text
        """
        self._released = False
        self._id = (ids or IdSequence.default()).next_id()
        self._request = request
        self._transfer = transfer if transfer is not None else H11Transfer()
        self._dispatcher = dispatcher or EventDispatcher.instance()
        self._select_timeout = (
            self.DEFAULT_SELECT_TIMEOUT if select_timeout is None else select_timeout
        )
        self._encoding = encoding or self.DEFAULT_ENCODING

        self._state = TransactionState.SENDING
        self._running = True
        self._buffer = bytearray()
        self._message = bytearray()
        self._packets = 0
        self._response: Optional[Response] = None
        self._error: Optional[BaseException] = None
        self._streamed = False
        self._head_consumed = False
        self._complete = False

        body = request.body.encode(self._encoding) if request.body else None
        self._transfer.configure(request.method, request.target, request.headers.lines(), body)
        self._transfer.register_byte_sink(self._on_bytes)

        logger.debug(f"Transaction {self._id} created: {request.method} {request.target}")

    def _on_bytes(self, chunk: bytes) -> None:
        self._buffer += chunk
        self._message += chunk
        self._packets += 1

    def _set_state(self, state: TransactionState) -> None:
        logger.debug(f"Transaction {self._id}: {self._state.value} -> {state.value}")
        self._state = state

    def _ensure_usable(self) -> None:
        if self._error is not None:
            raise StreamError(f"Transaction {self._id} failed", self._error)
        if self._released:
            raise StreamError(f"Transaction {self._id} is released")

    async def poll(self) -> None:
        """
        Advance the transfer by one non-blocking step.

        The first call dispatches the "sending" event. Each call ends by
        yielding to the event loop once.

        Raises:
            TransferError: If the transfer fails; the transaction is then unusable
            StreamError: If the transaction already failed or was released
        """
        self._ensure_usable()

        if self._state is TransactionState.SENDING:
            self._set_state(TransactionState.RECEIVING_HEAD)
            self._dispatcher.dispatch(EVENT_SENDING, self, self._request)

        try:
            self._running = self._transfer.step()
            if not self._running:
                self._complete = True
            self._transfer.wait_readable(self._select_timeout)
        except HTTPCoreError as e:
            self._fail(e)
            raise
        except OSError as e:
            error = TransferError(str(e), e)
            self._fail(error)
            raise error from e

        await asyncio.sleep(0)

    def _fail(self, error: BaseException) -> None:
        self._error = error
        self._running = False
        logger.error(f"Transaction {self._id} failed: {error}")

    async def exec(self) -> Response:
        """
        Run the transaction to completion.

        Returns:
            The response, parsed once and cached

        Raises:
            TransferError: If the transfer fails
            MalformedMessage: If the received bytes are not a valid response
        """
        if self._state is TransactionState.DONE:
            return self._materialize()

        # A completed transfer may already be released by its stream
        if not self._complete:
            self._ensure_usable()

        while self._running:
            await self.poll()

        self._set_state(TransactionState.DONE)
        response = self._materialize()

        logger.debug(
            f"Transaction {self._id} done: {response.status_code} "
            f"({self._packets} packets, {len(self._message)} bytes)"
        )
        self._dispatcher.dispatch(EVENT_DONE, self, self._request, response)

        return response

    def _materialize(self) -> Response:
        if self._response is None:
            self._response = Response.from_message(self._decode(self._message))
        return self._response

    def _decode(self, data: bytes) -> str:
        return bytes(data).decode(self._encoding, errors="replace")

    async def get_response(self) -> Response:
        """Return the cached response, completing the transaction if needed."""
        if self._response is not None:
            return self._response
        return await self.exec()

    def stream(self, separator: Optional[str] = None) -> ChunkStream:
        """
        Stream the response body as separator-delimited chunks.

        Args:
            separator: Chunk separator (CRLF if None)

        Returns:
            A non-restartable async iterator of chunks

        Raises:
            StreamError: If a stream was already requested or the
                         transaction is complete
        """
        if self._streamed:
            raise StreamError(f"Transaction {self._id} was already streamed")
        if self._state is TransactionState.DONE:
            raise StreamError(f"Transaction {self._id} is already complete")
        self._ensure_usable()

        self._streamed = True
        return ChunkStream(self, separator or self.DEFAULT_SEPARATOR)

    def _carve(self, separator: bytes) -> List[str]:
        """Consume the head once, then cut complete chunks out of the buffer."""
        if not self._head_consumed:
            _, found, rest = self._buffer.partition(_DELIMITER_BYTES)
            if not found:
                return []
            self._buffer = bytearray(rest)
            self._head_consumed = True
            if self._state is TransactionState.RECEIVING_HEAD:
                self._set_state(TransactionState.RECEIVING_BODY)

        # Carving continues after exec() completed the transaction
        if separator not in self._buffer:
            return []

        *pieces, rest = self._buffer.split(separator)
        self._buffer = rest
        return [self._decode(piece) for piece in pieces if piece]

    def _flush(self) -> Optional[str]:
        """Take whatever is left in the buffer."""
        if not self._buffer:
            return None
        remainder = self._decode(self._buffer)
        self._buffer = bytearray()
        return remainder

    def release(self) -> None:
        """Release the transfer. Safe to call at any point, more than once."""
        if not self._released:
            self._released = True
            self._running = False
            self._transfer.release()
            logger.debug(f"Transaction {self._id} released")

    close = release

    def __del__(self) -> None:
        if getattr(self, "_transfer", None) is not None and not self._released:
            self.release()

    async def __aenter__(self) -> "Transaction":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    @property
    def id(self) -> int:
        return self._id

    @property
    def request(self) -> Request:
        return self._request

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def packets(self) -> int:
        """Number of chunks received from the transfer."""
        return self._packets

    @property
    def running(self) -> bool:
        """Whether the transfer still has outstanding work."""
        return self._running

    @property
    def is_done(self) -> bool:
        return self._state is TransactionState.DONE

    @property
    def response(self) -> Optional[Response]:
        """The cached response, or None if not materialized yet."""
        return self._response

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def transfer(self) -> TransferPrimitive:
        return self._transfer

    def __repr__(self) -> str:
        return (
            f"<Transaction {self._id} {self._request.method} "
            f"{self._request.target} [{self._state.value}]>"
        )
