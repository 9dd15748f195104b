"""
Mock transfer implementation for testing.

This module provides a scripted TransferPrimitive that can be used for
unit testing transactions without requiring actual network connections.
"""

from typing import Iterable, List, Optional

from ..exceptions import TransferError
from .base import ByteSink, HeaderLines, TransferPrimitive


class MockTransfer(TransferPrimitive):
    """
    Mock transfer for testing.
    
    Each ``step()`` delivers the next scripted chunk to the byte sink.
    The transfer reports completion once every chunk was delivered.
    """
    
    def __init__(
        self,
        chunks: Iterable[bytes] = (),
        error: Optional[Exception] = None,
        error_at: int = 0,
    ):
        """
        Initialize the mock transfer.
        
        Args:
            chunks: Data delivered to the byte sink, one chunk per step.
            error: Optional exception raised instead of a step.
            error_at: Zero-based index of the step that raises ``error``.
        """
        self._chunks: List[bytes] = list(chunks)
        self._error = error
        self._error_at = error_at
        self._sink: Optional[ByteSink] = None
        self._released = False
        self.steps = 0
        self.waits: List[float] = []
        self.method: Optional[str] = None
        self.url: Optional[str] = None
        self.headers: HeaderLines = []
        self.body: Optional[bytes] = None
    
    def configure(
        self,
        method: str,
        url: str,
        headers: HeaderLines,
        body: Optional[bytes] = None,
    ) -> None:
        self.method = method
        self.url = url
        self.headers = list(headers)
        self.body = body
    
    def register_byte_sink(self, sink: ByteSink) -> None:
        self._sink = sink
    
    def step(self) -> bool:
        """
        Deliver the next chunk.
        
        Raises:
            TransferError: If the transfer was released.
        """
        if self._released:
            raise TransferError("Transfer is released")
        
        index = self.steps
        self.steps += 1
        
        if self._error is not None and index == self._error_at:
            raise self._error
        
        if self._chunks:
            chunk = self._chunks.pop(0)
            if self._sink is not None:
                self._sink(chunk)
        
        return bool(self._chunks)
    
    def wait_readable(self, timeout: float) -> None:
        self.waits.append(timeout)
    
    def release(self) -> None:
        self._released = True
    
    @property
    def is_released(self) -> bool:
        return self._released
    
    def add_chunk(self, chunk: bytes) -> None:
        """
        Script more data to be delivered.
        
        Args:
            chunk: The data to add.
        """
        self._chunks.append(chunk)
