"""
Transfer primitives for http_txn.

This module provides the non-blocking byte transport a Transaction
drives, together with the socket-based and mock implementations.
"""

from .base import ByteSink, HeaderLines, TransferPrimitive
from .h11_transfer import H11Transfer, TransferPhase
from .mock import MockTransfer
from .utils import (
    TransferURL,
    create_connection_socket,
    create_ssl_context,
    format_host_header,
    get_address_family,
    get_socket_error,
    is_ipv6_address,
    parse_url,
)

__all__ = [
    "ByteSink",
    "HeaderLines",
    "TransferPrimitive",
    "H11Transfer",
    "TransferPhase",
    "MockTransfer",
    "TransferURL",
    "create_connection_socket",
    "create_ssl_context",
    "format_host_header",
    "get_address_family",
    "get_socket_error",
    "is_ipv6_address",
    "parse_url",
]
