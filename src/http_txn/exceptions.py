"""
Custom exceptions for http_txn.

This module defines the exception hierarchy used throughout
the library for message validation, parsing and transfer errors.
"""

from typing import Optional


class HTTPCoreError(Exception):
    """Base exception for all http_txn errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class MessageError(HTTPCoreError, ValueError):
    """Raised when an HTTP message or one of its parts is invalid."""


class InvalidHeaderName(MessageError):
    """Raised when a header name is not a valid RFC 7230 token."""
    
    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid header name: {name!r}")
        self.name = name


class InvalidHeaderValue(MessageError):
    """Raised when a header value cannot be represented as a string."""
    
    def __init__(self, value: object) -> None:
        super().__init__(
            f"Header value must be stringable, got {type(value).__name__}"
        )
        self.value = value


class InvalidStatusCode(MessageError):
    """Raised when a status code is outside the 100-599 range."""
    
    def __init__(self, status_code: object) -> None:
        super().__init__(f"Invalid HTTP status code: {status_code!r}")
        self.status_code = status_code


class MalformedMessage(MessageError):
    """Raised when a raw HTTP message cannot be parsed."""
    
    def __init__(self, kind: str, line: str) -> None:
        super().__init__(f"Malformed {kind}: {line!r}")
        self.line = line


class MalformedRequestLine(MalformedMessage):
    """Raised when a request line lacks method, target or protocol."""
    
    def __init__(self, line: str) -> None:
        super().__init__("request line", line)


class MalformedStatusLine(MalformedMessage):
    """Raised when a status line does not match PROTOCOL CODE [REASON]."""
    
    def __init__(self, line: str) -> None:
        super().__init__("status line", line)


class MalformedHeaderLine(MalformedMessage):
    """Raised when a header line has no name/value separator."""
    
    def __init__(self, line: str) -> None:
        super().__init__("header line", line)


class TransferError(HTTPCoreError):
    """Raised when the underlying transfer primitive fails."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Transfer error: {message}", cause)


class ConnectionError(TransferError):
    """Raised when there's an error with network connections."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(TransferError):
    """Raised when the peer violates the HTTP protocol."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class TimeoutError(TransferError):
    """Raised when an operation times out."""
    
    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")


class StreamError(HTTPCoreError):
    """Raised when a transaction or its chunk stream is misused."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)
