"""
Unit tests for custom exceptions.

Tests the exception hierarchy to ensure proper error handling
and cause tracking.
"""

import pytest

from http_txn.exceptions import (
    HTTPCoreError,
    MessageError,
    InvalidHeaderName,
    InvalidHeaderValue,
    InvalidStatusCode,
    MalformedMessage,
    MalformedRequestLine,
    MalformedStatusLine,
    MalformedHeaderLine,
    TransferError,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    StreamError,
)


class TestHTTPCoreError:
    """Test base HTTPCoreError class."""

    def test_basic_creation(self) -> None:
        """Test creating basic HTTPCoreError."""
        error = HTTPCoreError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.cause is None

    def test_with_cause(self) -> None:
        """Test creating HTTPCoreError with cause."""
        original_error = ValueError("Original error")
        error = HTTPCoreError("Test error message", cause=original_error)
        assert error.cause == original_error


class TestMessageErrors:
    """Test message validation and parsing errors."""

    def test_invalid_header_name(self) -> None:
        """Test InvalidHeaderName keeps the rejected name."""
        error = InvalidHeaderName("bad header")
        assert error.name == "bad header"
        assert "Invalid header name: 'bad header'" in str(error)

    def test_invalid_header_value(self) -> None:
        """Test InvalidHeaderValue names the rejected type."""
        error = InvalidHeaderValue(None)
        assert error.value is None
        assert "NoneType" in str(error)

    def test_invalid_status_code(self) -> None:
        """Test InvalidStatusCode keeps the rejected code."""
        error = InvalidStatusCode(600)
        assert error.status_code == 600
        assert "600" in str(error)

    def test_malformed_lines(self) -> None:
        """Test malformed line errors keep the offending line."""
        assert MalformedRequestLine("GET").line == "GET"
        assert "Malformed status line: 'HTTP/1.1 OK'" in str(MalformedStatusLine("HTTP/1.1 OK"))
        assert "Malformed header line" in str(MalformedHeaderLine("Host"))

    def test_message_errors_are_value_errors(self) -> None:
        """Test validation errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise InvalidHeaderName("x y")


class TestTransferErrors:
    """Test transfer error classes."""

    def test_transfer_error(self) -> None:
        """Test creating basic TransferError."""
        error = TransferError("step failed")
        assert error.message == "Transfer error: step failed"

    def test_connection_error_with_cause(self) -> None:
        """Test creating ConnectionError with cause."""
        original_error = OSError("Network unreachable")
        error = ConnectionError("Connection failed", cause=original_error)
        assert "Connection error: Connection failed" in str(error)
        assert error.cause == original_error

    def test_protocol_error(self) -> None:
        """Test creating basic ProtocolError."""
        error = ProtocolError("Invalid HTTP version")
        assert "Protocol error: Invalid HTTP version" in str(error)

    def test_timeout_with_value(self) -> None:
        """Test creating TimeoutError with timeout value."""
        error = TimeoutError("Connection timed out", timeout=30.0)
        assert "Timeout error: Connection timed out (timeout: 30.0s)" in str(error)

    def test_stream_error(self) -> None:
        """Test creating StreamError."""
        error = StreamError("Transaction 1 was already streamed")
        assert error.message == "Stream error: Transaction 1 was already streamed"


class TestExceptionHierarchy:
    """Test exception hierarchy and inheritance."""

    def test_inheritance(self) -> None:
        """Test that all exceptions inherit from HTTPCoreError."""
        for cls in (
            MessageError,
            InvalidHeaderName,
            InvalidHeaderValue,
            InvalidStatusCode,
            MalformedMessage,
            TransferError,
            StreamError,
        ):
            assert issubclass(cls, HTTPCoreError)

    def test_parsing_errors(self) -> None:
        """Test that line errors share MalformedMessage."""
        assert issubclass(MalformedRequestLine, MalformedMessage)
        assert issubclass(MalformedStatusLine, MalformedMessage)
        assert issubclass(MalformedHeaderLine, MalformedMessage)

    def test_transfer_errors(self) -> None:
        """Test that transport failures share TransferError."""
        assert issubclass(ConnectionError, TransferError)
        assert issubclass(ProtocolError, TransferError)
        assert issubclass(TimeoutError, TransferError)
        assert not issubclass(StreamError, TransferError)
