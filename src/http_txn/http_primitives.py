"""
HTTP primitives for http_txn.

This module defines the core data structures for HTTP requests and responses.
All classes are immutable to ensure thread safety and simplify reasoning.
Both can be parsed from and serialized to their exact wire representation.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import (
    InvalidStatusCode,
    MalformedHeaderLine,
    MalformedRequestLine,
    MalformedStatusLine,
)
from .headers import Headers, HeadersInit


LINEBREAK = "\r\n"
DELIMITER = "\r\n\r\n"

PROTOCOL_1_0 = "HTTP/1.0"
PROTOCOL_1_1 = "HTTP/1.1"
PROTOCOL_2_0 = "HTTP/2.0"
PROTOCOL_3_0 = "HTTP/3.0"

# Standard HTTP reason phrases
REASON_PHRASES: Dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
}

STATUS_LINE_RE = re.compile(r"^(HTTP/\d+(?:\.\d+)?)\s+(\d{3})(?:\s+(.*))?$")


class Message:
    """
    Base HTTP message: protocol, headers and body.

    Subclasses provide the start line; serialization is shared.
    """

    LINEBREAK = LINEBREAK
    DELIMITER = DELIMITER

    PROTOCOL_1_0 = PROTOCOL_1_0
    PROTOCOL_1_1 = PROTOCOL_1_1
    PROTOCOL_2_0 = PROTOCOL_2_0
    PROTOCOL_3_0 = PROTOCOL_3_0

    protocol: str
    headers: Headers
    body: str

    def _own_headers(self, headers: Optional[HeadersInit]) -> None:
        # The message keeps its own copy; callers cannot mutate it afterwards.
        object.__setattr__(self, "headers", Headers(headers))

    def start_line(self) -> str:
        raise NotImplementedError

    def serialize(self) -> str:
        """Return the full wire representation of the message."""
        head = [self.start_line()]
        if len(self.headers):
            head.append(str(self.headers))
        return LINEBREAK.join(head) + DELIMITER + self.body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protocol": self.protocol,
            "headers": self.headers.all(),
            "body": self.body,
        }

    def header_line(self, name: str) -> str:
        """Get a header as a comma-joined line (case-insensitive)."""
        return self.headers.get_line(name)

    def __str__(self) -> str:
        return self.serialize()


def _split_message(raw: str) -> List[str]:
    head, _, body = raw.partition(DELIMITER)
    return head.split(LINEBREAK) + [body]


@dataclass(frozen=True)
class Request(Message):
    """
    Immutable HTTP request representation.

    The method is upper-cased and trailing slashes are stripped from
    the target at construction. Once created, the request cannot be
    modified.
    """

    method: str
    target: str
    protocol: str = PROTOCOL_1_1
    headers: Headers = field(default_factory=Headers, hash=False)
    body: str = ""

    def __post_init__(self) -> None:
        """Normalize request data after initialization."""
        object.__setattr__(self, "method", str(self.method).upper())
        object.__setattr__(self, "target", str(self.target).rstrip("/"))
        self._own_headers(self.headers)

    def start_line(self) -> str:
        return f"{self.method} {self.target} {self.protocol}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(method=self.method, target=self.target)
        return data

    @classmethod
    def from_message(cls, message: str) -> "Request":
        """
        Parse a raw HTTP request.

        Args:
            message: Request line, header lines, CRLF CRLF and body

        Returns:
            New Request instance

        Raises:
            MalformedRequestLine: If method, target or protocol is missing
            MalformedHeaderLine: If a header line lacks ": "
        """
        *head, body = _split_message(message)
        request_line = head[0]

        parts = request_line.split(" ", 2)
        if len(parts) != 3 or not parts[0] or not parts[2]:
            raise MalformedRequestLine(request_line)
        method, target, protocol = parts

        headers = Headers()
        for line in head[1:]:
            name, sep, value = line.partition(": ")
            if not sep:
                raise MalformedHeaderLine(line)
            headers.add(name, value)

        return cls(method, target, protocol, headers, body)

    @classmethod
    def get(cls, target: str, headers: Optional[HeadersInit] = None) -> "Request":
        """Create a GET request."""
        return cls("GET", target, headers=Headers(headers))

    @classmethod
    def post(
        cls,
        target: str,
        data: str,
        headers: Optional[HeadersInit] = None,
    ) -> "Request":
        """Create a POST request with Content-Length set from ``data``."""
        merged = Headers(headers)
        merged.set("Content-Length", len(data.encode("utf-8")))
        return cls("POST", target, headers=merged, body=data)

    @classmethod
    def post_json(
        cls,
        target: str,
        data: Any,
        headers: Optional[HeadersInit] = None,
    ) -> "Request":
        """Create a POST request with a JSON-encoded body."""
        merged = Headers(headers)
        merged.set("Content-Type", "application/json")
        return cls.post(target, json.dumps(data), merged)


@dataclass(frozen=True)
class Response(Message):
    """
    Immutable HTTP response representation.

    The reason phrase falls back to the standard phrase for the status
    code, or an empty string for unknown codes.
    """

    status_code: int = 200
    reason_phrase: str = ""
    protocol: str = PROTOCOL_1_1
    headers: Headers = field(default_factory=Headers, hash=False)
    body: str = ""

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        code = self.status_code
        if isinstance(code, bool) or not isinstance(code, int) or not 100 <= code <= 599:
            raise InvalidStatusCode(code)

        if not self.reason_phrase:
            object.__setattr__(self, "reason_phrase", REASON_PHRASES.get(code, ""))

        self._own_headers(self.headers)

    @property
    def status_text(self) -> str:
        return self.reason_phrase

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)

    def start_line(self) -> str:
        return f"{self.protocol} {self.status_code} {self.reason_phrase}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(status_code=self.status_code, reason_phrase=self.reason_phrase)
        return data

    @classmethod
    def from_message(cls, raw: str) -> "Response":
        """
        Parse a raw HTTP response message into a Response instance.

        Args:
            raw: Full HTTP response (status line + headers + CRLF + body)

        Returns:
            New Response instance

        Raises:
            MalformedStatusLine: If the status line does not match
            MalformedHeaderLine: If a header line has no colon
            InvalidStatusCode: If the status code is out of range
        """
        *head, body = _split_message(raw)
        status_line = head[0]

        match = STATUS_LINE_RE.match(status_line)
        if match is None:
            raise MalformedStatusLine(status_line)

        protocol, code, reason = match.groups()

        headers = Headers()
        for line in head[1:]:
            if line == "":
                continue
            name, sep, value = line.partition(":")
            if not sep:
                raise MalformedHeaderLine(line)
            headers.add(name.strip(), value.lstrip())

        return cls(int(code), reason or "", protocol, headers, body)

    @classmethod
    def create(cls, body: str = "", headers: Optional[HeadersInit] = None) -> "Response":
        """Create a 200 OK response."""
        return cls(200, "OK", headers=Headers(headers), body=body)

    @classmethod
    def create_json(
        cls,
        status_code: int,
        data: Any,
        headers: Optional[HeadersInit] = None,
    ) -> "Response":
        """Create a JSON response with the given status code."""
        payload = json.dumps(data)

        merged = Headers(headers)
        merged.set("Content-Type", "application/json")
        merged.set("Content-Length", len(payload.encode("utf-8")))

        return cls(status_code, headers=merged, body=payload)

    @classmethod
    def create_redirect(
        cls,
        location: str,
        status_code: int = 302,
        headers: Optional[HeadersInit] = None,
    ) -> "Response":
        """Create a redirect response with a Location header."""
        merged = Headers(headers)
        merged.set("Location", location)

        return cls(status_code, headers=merged)
