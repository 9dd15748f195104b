"""
Streaming framework for http_txn.

This module provides the chunk stream returned by ``Transaction.stream``.
Consumption drives the transfer: each ``__anext__`` polls the transaction
only until a complete chunk is available.
"""

from collections import deque
from typing import AsyncIterable, Deque, List, TYPE_CHECKING

from .exceptions import StreamError

if TYPE_CHECKING:
    from .transaction import Transaction  # Forward reference


class ChunkStream:
    """
    Lazy, finite, non-restartable sequence of response body chunks.

    The response head is consumed once, then the body is cut on every
    occurrence of the separator. Only complete pieces are produced while
    the transfer runs; the remainder is produced as a final chunk once
    the transfer is complete. Empty pieces are skipped. The transaction
    is released once the transfer is exhausted, or earlier by ``aclose()``.
    """

    def __init__(self, transaction: "Transaction", separator: str) -> None:
        """
        Initialize ChunkStream.

        Args:
            transaction: The Transaction that owns this stream
            separator: Non-empty chunk separator
        """
        if not separator:
            raise ValueError("separator must be a non-empty string")

        self._transaction = transaction
        self._separator = separator
        self._separator_bytes = separator.encode(transaction.encoding)
        self._pending: Deque[str] = deque()
        self._exhausted = False
        self._closed = False
        self._chunks_read = 0

    def __aiter__(self) -> "ChunkStream":
        """Return self as async iterator."""
        if self._closed:
            raise StreamError("Cannot iterate over closed stream")
        return self

    async def __anext__(self) -> str:
        """Get next chunk of data."""
        if self._closed:
            raise StreamError("Cannot read from closed stream")

        transaction = self._transaction
        while not self._pending:
            if self._exhausted:
                raise StopAsyncIteration

            if transaction.running:
                await transaction.poll()
                self._pending.extend(transaction._carve(self._separator_bytes))
                continue

            self._pending.extend(transaction._carve(self._separator_bytes))
            remainder = transaction._flush()
            if remainder:
                self._pending.append(remainder)
            self._exhausted = True
            # The response stays available through get_response()
            transaction.release()

        self._chunks_read += 1
        return self._pending.popleft()

    async def aread(self) -> str:
        """Read the remaining chunks and join them with the separator."""
        if self._closed:
            raise StreamError("Cannot read from closed stream")

        return self._separator.join(await stream_to_list(self))

    async def aclose(self) -> None:
        """Close the stream and release the transaction."""
        if not self._closed:
            self._closed = True
            self._pending.clear()
            self._transaction.release()

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def closed(self) -> bool:
        """Get whether the stream is closed."""
        return self._closed

    @property
    def exhausted(self) -> bool:
        """Get whether every chunk has been produced."""
        return self._exhausted and not self._pending

    @property
    def chunks_read(self) -> int:
        """Get the number of chunks produced so far."""
        return self._chunks_read


async def stream_to_list(stream: AsyncIterable[str]) -> List[str]:
    """
    Convert stream to list of chunks.

    Args:
        stream: Async iterable of chunks

    Returns:
        List of chunks
    """
    chunks = []
    async for chunk in stream:
        chunks.append(chunk)
    return chunks
