"""
Transfer utilities for http_txn.

This module provides utility functions used by the socket-based transfer:
URL splitting, non-blocking socket creation and SSL context setup.
"""

import os
import socket
import ssl
from typing import List, NamedTuple, Optional
from urllib.parse import urlsplit


SUPPORTED_SCHEMES = ("http", "https")


class TransferURL(NamedTuple):
    """Immutable representation of the parts of a URL a transfer needs."""
    scheme: str
    host: str
    port: int
    target: str

    @property
    def is_tls(self) -> bool:
        return self.scheme == "https"

    @property
    def host_header(self) -> str:
        return format_host_header(self.host, self.port, self.scheme)


def parse_url(url: str) -> TransferURL:
    """
    Parse URL into the components needed to open a transfer.

    Args:
        url: Absolute http or https URL

    Returns:
        TransferURL with the request target (path and query)

    Raises:
        ValueError: If URL is malformed or uses another scheme
    """
    parsed = urlsplit(url)

    scheme = (parsed.scheme or "http").lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ValueError(f"Unsupported URL scheme: {scheme!r}")

    host = parsed.hostname or ""
    if not host:
        raise ValueError(f"No hostname found in URL: {url!r}")

    port = parsed.port
    if port is None:
        port = 443 if scheme == "https" else 80

    target = parsed.path or "/"
    if parsed.query:
        target += "?" + parsed.query

    return TransferURL(scheme=scheme, host=host, port=port, target=target)


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format host header for HTTP requests.

    Args:
        host: Hostname
        port: Port number
        scheme: URL scheme

    Returns:
        Formatted host header string
    """
    if is_ipv6_address(host):
        host = f"[{host}]"
    if (scheme == "https" and port == 443) or (scheme == "http" and port == 80):
        return host
    return f"{host}:{port}"


def is_ipv6_address(host: str) -> bool:
    """
    Check if a host string is an IPv6 address.

    Args:
        host: Host string to check

    Returns:
        True if the host is an IPv6 address
    """
    try:
        socket.inet_pton(socket.AF_INET6, host)
        return True
    except (OSError, ValueError):
        return False


def get_address_family(host: str) -> int:
    """
    Determine the appropriate address family for a host.

    Args:
        host: Host string

    Returns:
        Socket address family (AF_INET or AF_INET6)
    """
    if is_ipv6_address(host):
        return socket.AF_INET6
    return socket.AF_INET


def create_connection_socket(host: str) -> socket.socket:
    """
    Create a non-blocking TCP socket for connecting to a host.

    Args:
        host: Hostname or IP address

    Returns:
        Configured socket ready for ``connect_ex``

    Raises:
        OSError: If socket creation fails
    """
    sock = socket.socket(get_address_family(host), socket.SOCK_STREAM)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    sock.setblocking(False)
    return sock


def get_socket_error(sock: socket.socket) -> Optional[str]:
    """
    Get the pending error message for a socket.

    Args:
        sock: Socket object

    Returns:
        Error message or None if no error
    """
    try:
        error_code = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as e:
        return str(e)
    if error_code == 0:
        return None
    return os.strerror(error_code)


def create_ssl_context(
    alpn_protocols: Optional[List[str]] = None,
    verify: bool = True,
) -> ssl.SSLContext:
    """
    Create a client SSL context.

    Args:
        alpn_protocols: Optional list of ALPN protocols to negotiate
        verify: Whether to verify the peer certificate and hostname

    Returns:
        Configured SSL context
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    return context
