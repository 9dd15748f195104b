"""
Transfer primitive interface for http_txn.

This module defines the TransferPrimitive interface: an opaque,
non-blocking byte transport that a Transaction drives step by step.
The engine makes no assumption about DNS, TLS or connection reuse.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from typing_extensions import Protocol


HeaderLines = List[Tuple[str, str]]


class ByteSink(Protocol):
    """Callable receiving every chunk of response bytes."""

    def __call__(self, chunk: bytes) -> None: ...


class TransferPrimitive(ABC):
    """
    Interface for non-blocking transfer implementations.
    
    A primitive is configured once, then advanced with ``step()`` until
    it reports that no work remains. Received bytes (response head
    followed by the body) are pushed to the registered byte sink.
    """
    
    @abstractmethod
    def configure(
        self,
        method: str,
        url: str,
        headers: HeaderLines,
        body: Optional[bytes] = None,
    ) -> None:
        """
        Configure the exchange to perform.
        
        Args:
            method: The HTTP method.
            url: The absolute URL to request.
            headers: Header lines, one (name, value) pair per line.
            body: Optional request body.
        """
        pass
    
    @abstractmethod
    def register_byte_sink(self, sink: ByteSink) -> None:
        """
        Register the callback receiving response bytes.
        
        Args:
            sink: Called with each chunk of bytes, in arrival order.
        """
        pass
    
    @abstractmethod
    def step(self) -> bool:
        """
        Perform as much work as possible without blocking.
        
        Returns:
            True while the transfer still has outstanding work.
        
        Raises:
            TransferError: If the transfer failed.
        """
        pass
    
    @abstractmethod
    def wait_readable(self, timeout: float) -> None:
        """
        Wait up to ``timeout`` seconds for the transfer to have more work.
        
        Raises:
            TransferError: If waiting failed.
        """
        pass
    
    @abstractmethod
    def release(self) -> None:
        """
        Release the transfer and any underlying resources.
        
        Must be safe to call more than once and before completion.
        """
        pass
    
    @property
    @abstractmethod
    def is_released(self) -> bool:
        """Check if the transfer has been released."""
        pass
