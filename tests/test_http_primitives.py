"""
Unit tests for HTTP primitives.

Tests the Request and Response classes to ensure they parse and
serialize wire messages exactly and maintain immutability.
"""

import dataclasses
import json

import pytest

from http_txn.exceptions import (
    InvalidStatusCode,
    MalformedHeaderLine,
    MalformedRequestLine,
    MalformedStatusLine,
)
from http_txn.headers import Headers
from http_txn.http_primitives import Message, Request, Response


RAW_REQUEST = (
    "POST /users HTTP/1.1\r\n"
    "Host: example.com\r\n"
    "Content-Length: 50\r\n"
    "\r\n"
    "name=Foo"
)

RAW_RESPONSE = (
    "HTTP/1.1 201 Created\r\n"
    "Content-Type: application/json\r\n"
    "Location: http://example.com/users/123\r\n"
    "\r\n"
    '{\r\n  "message": "New user created"\r\n}'
)


class TestMessage:
    """Test constants shared by all messages."""

    def test_constants(self) -> None:
        assert Message.LINEBREAK == "\r\n"
        assert Message.DELIMITER == "\r\n\r\n"
        assert Message.PROTOCOL_1_1 == "HTTP/1.1"
        assert Request.PROTOCOL_2_0 == "HTTP/2.0"


class TestRequest:
    """Test Request class functionality."""

    def test_create(self) -> None:
        """Test creating a Request with defaults."""
        request = Request("GET", "/api")
        assert request.method == "GET"
        assert request.target == "/api"
        assert request.protocol == "HTTP/1.1"
        assert len(request.headers) == 0
        assert request.body == ""

    def test_normalization(self) -> None:
        """Test method is upper-cased and trailing slashes stripped."""
        request = Request("post", "http://example.com/users/")
        assert request.method == "POST"
        assert request.target == "http://example.com/users"

    def test_headers_from_mapping(self) -> None:
        """Test plain mappings are converted to Headers."""
        request = Request("GET", "/", headers={"accept": "*/*"})
        assert isinstance(request.headers, Headers)
        assert request.headers.all() == {"Accept": ["*/*"]}

    def test_headers_are_copied(self) -> None:
        """Test the caller's Headers cannot change the request."""
        headers = Headers({"X-Trace": "1"})
        request = Request("GET", "/", headers=headers)
        headers.set("X-Trace", "2")
        assert request.headers.get_line("X-Trace") == "1"

    def test_immutability(self) -> None:
        """Test that Request is immutable."""
        request = Request("GET", "/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.method = "POST"
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.target = "/other"

    def test_hashable(self) -> None:
        """Test requests can be hashed and equal requests hash alike."""
        first = Request("GET", "/a", headers={"Accept": ["a", "b"]})
        second = Request.from_message(first.serialize())
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_from_message(self) -> None:
        """Test parsing a raw request."""
        request = Request.from_message(RAW_REQUEST)
        assert request.method == "POST"
        assert request.target == "/users"
        assert request.protocol == "HTTP/1.1"
        assert request.headers.get_line("Host") == "example.com"
        assert request.headers.get_line("content-length") == "50"
        assert request.body == "name=Foo"

    def test_from_message_without_body(self) -> None:
        """Test a message without delimiter has an empty body."""
        request = Request.from_message("GET /x HTTP/1.1\r\nHost: a")
        assert request.body == ""
        assert request.headers.get_line("Host") == "a"

    def test_from_message_body_kept_verbatim(self) -> None:
        """Test only the first delimiter splits head and body."""
        request = Request.from_message("PUT /x HTTP/1.1\r\n\r\na\r\n\r\nb")
        assert request.body == "a\r\n\r\nb"
        assert len(request.headers) == 0

    def test_from_message_repeated_headers(self) -> None:
        """Test repeated header lines append values."""
        request = Request.from_message("GET / HTTP/1.1\r\nCookie: a=1\r\nCookie: b=2\r\n\r\n")
        assert request.headers.get("Cookie") == ["a=1", "b=2"]

    @pytest.mark.parametrize("line", ["GET", "GET /x", " /x HTTP/1.1", "GET /x "])
    def test_malformed_request_line(self, line: str) -> None:
        """Test missing request-line fields are rejected."""
        with pytest.raises(MalformedRequestLine):
            Request.from_message(line + "\r\nHost: a\r\n\r\n")

    def test_malformed_header_line(self) -> None:
        """Test header lines without ': ' are rejected."""
        with pytest.raises(MalformedHeaderLine):
            Request.from_message("GET / HTTP/1.1\r\nHost:example.com\r\n\r\n")

    def test_serialize(self) -> None:
        """Test the wire representation."""
        request = Request("POST", "/users", headers={"Host": "example.com"}, body="name=Foo")
        assert request.serialize() == (
            "POST /users HTTP/1.1\r\nHost: example.com\r\n\r\nname=Foo"
        )
        assert str(request) == request.serialize()

    def test_serialize_without_headers(self) -> None:
        """Test a request without headers has a single delimiter."""
        assert Request("GET", "/x").serialize() == "GET /x HTTP/1.1\r\n\r\n"

    @pytest.mark.parametrize("request_", [
        Request("GET", "/"),
        Request("GET", "/search?q=1", headers={"Accept": "*/*"}),
        Request("POST", "/users", "HTTP/1.0", {"Host": "a", "X-Id": "7"}, "a=1\r\n\r\nb=2"),
        Request("GET", "/x", headers={"X-Custom-Token": ["abc123", "def456"]}),
    ])
    def test_round_trip(self, request_: Request) -> None:
        """Test parse(serialize(r)) == r."""
        assert Request.from_message(request_.serialize()) == request_

    def test_get_builder(self) -> None:
        """Test the GET builder."""
        request = Request.get("http://example.com/api", {"Accept": "application/json"})
        assert request.method == "GET"
        assert request.headers.get_line("accept") == "application/json"

    def test_post_builder(self) -> None:
        """Test Content-Length is the UTF-8 byte length."""
        request = Request.post("/form", "héllo", {"Content-Type": "text/plain"})
        assert request.method == "POST"
        assert request.body == "héllo"
        assert request.headers.get_line("Content-Length") == "6"
        assert request.headers.get_line("Content-Type") == "text/plain"

    def test_post_json_builder(self) -> None:
        """Test JSON POST keeps caller headers and forces the content type."""
        request = Request.post_json(
            "/api",
            {"a": 1},
            {"X-Trace": "t", "Content-Type": "text/plain"},
        )
        assert json.loads(request.body) == {"a": 1}
        assert request.headers.get_line("X-Trace") == "t"
        assert request.headers.get_line("Content-Type") == "application/json"
        assert request.headers.get_line("Content-Length") == str(len(request.body))

    def test_to_dict(self) -> None:
        data = Request("GET", "/x", headers={"A": "1"}).to_dict()
        assert data == {
            "protocol": "HTTP/1.1",
            "headers": {"A": ["1"]},
            "body": "",
            "method": "GET",
            "target": "/x",
        }


class TestResponse:
    """Test Response class functionality."""

    def test_create_basic(self) -> None:
        """Test creating a basic Response."""
        response = Response()
        assert response.status_code == 200
        assert response.reason_phrase == "OK"
        assert response.status_text == "OK"
        assert response.protocol == "HTTP/1.1"
        assert response.body == ""

    @pytest.mark.parametrize("code", [99, 600, -1, 1000])
    def test_status_code_bounds(self, code: int) -> None:
        """Test out-of-range codes are rejected."""
        with pytest.raises(InvalidStatusCode):
            Response(code)

    @pytest.mark.parametrize("code", ["200", 200.0, True])
    def test_status_code_type(self, code) -> None:
        """Test non-integer codes are rejected."""
        with pytest.raises(InvalidStatusCode):
            Response(code)

    def test_reason_phrase_resolution(self) -> None:
        """Test explicit phrase, table lookup, then empty string."""
        assert Response(201).reason_phrase == "Created"
        assert Response(201, "Made").reason_phrase == "Made"
        assert Response(299).reason_phrase == ""
        assert Response(100).reason_phrase == "Continue"
        assert Response(599).reason_phrase == ""

    def test_immutability(self) -> None:
        """Test that Response is immutable."""
        response = Response()
        with pytest.raises(dataclasses.FrozenInstanceError):
            response.status_code = 404

    def test_hashable(self) -> None:
        assert hash(Response(404, headers={"X-A": "1"})) == hash(Response(404))

    def test_from_message(self) -> None:
        """Test parsing a raw response."""
        response = Response.from_message(RAW_RESPONSE)
        assert response.protocol == "HTTP/1.1"
        assert response.status_code == 201
        assert response.reason_phrase == "Created"
        assert response.headers.get_line("Location") == "http://example.com/users/123"
        assert response.headers.get_line("Content-Type") == "application/json"
        assert response.body == '{\r\n  "message": "New user created"\r\n}'

    def test_from_message_without_reason(self) -> None:
        """Test a missing reason falls back to the table."""
        response = Response.from_message("HTTP/1.1 404\r\n\r\n")
        assert response.status_code == 404
        assert response.reason_phrase == "Not Found"

    def test_from_message_custom_reason(self) -> None:
        response = Response.from_message("HTTP/2 200 All Good\r\n\r\nok")
        assert response.protocol == "HTTP/2"
        assert response.reason_phrase == "All Good"
        assert response.body == "ok"

    def test_from_message_header_split_on_first_colon(self) -> None:
        """Test header values may contain colons and lack a space."""
        response = Response.from_message("HTTP/1.1 200 OK\r\nX:1\r\nDate: Mon, 01 Jan 2024 10:00:00 GMT\r\n\r\n")
        assert response.headers.get_line("X") == "1"
        assert response.headers.get_line("Date") == "Mon, 01 Jan 2024 10:00:00 GMT"

    def test_from_message_skips_empty_lines(self) -> None:
        response = Response.from_message("HTTP/1.1 200 OK\r\nA: 1\r\n")
        assert response.headers.all() == {"A": ["1"]}

    @pytest.mark.parametrize("line", ["HTTP/1.1 OK", "FOO 200 OK", "HTTP/1.1 20 OK", ""])
    def test_malformed_status_line(self, line: str) -> None:
        """Test invalid status lines are rejected."""
        with pytest.raises(MalformedStatusLine):
            Response.from_message(line + "\r\n\r\n")

    def test_malformed_header_line(self) -> None:
        """Test header lines without colon are rejected."""
        with pytest.raises(MalformedHeaderLine):
            Response.from_message("HTTP/1.1 200 OK\r\nBad line\r\n\r\n")

    def test_from_message_invalid_code(self) -> None:
        """Test the range check applies to parsed codes."""
        with pytest.raises(InvalidStatusCode):
            Response.from_message("HTTP/1.1 700 Weird\r\n\r\n")

    def test_serialize(self) -> None:
        """Test the wire representation."""
        response = Response.create("hi", {"Content-Type": "text/plain"})
        assert response.serialize() == "HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\nhi"

    @pytest.mark.parametrize("response", [
        Response(),
        Response(404, body="missing"),
        Response(299, headers={"X-A": "1", "Server": "test"}, body="x\r\n\r\ny"),
        Response(201, "Made", "HTTP/1.0", {"Location": "/u/1"}),
        Response(200, headers={"Set-Cookie": ["a=1", "b=2"], "Vary": "Accept"}),
    ])
    def test_round_trip(self, response: Response) -> None:
        """Test parse(serialize(r)) == r."""
        assert Response.from_message(response.serialize()) == response

    def test_create_builder(self) -> None:
        response = Response.create("body", {"X-A": "1"})
        assert (response.status_code, response.reason_phrase) == (200, "OK")
        assert response.body == "body"
        assert response.headers.get_line("x-a") == "1"

    def test_create_json_builder(self) -> None:
        """Test JSON body with content headers."""
        response = Response.create_json(201, {"id": 1})
        assert response.status_code == 201
        assert response.reason_phrase == "Created"
        assert response.body == '{"id": 1}'
        assert response.headers.get_line("Content-Type") == "application/json"
        assert response.headers.get_line("Content-Length") == "9"
        assert response.json() == {"id": 1}

    def test_create_redirect_builder(self) -> None:
        response = Response.create_redirect("/login")
        assert response.status_code == 302
        assert response.reason_phrase == "Found"
        assert response.headers.get_line("Location") == "/login"
        assert response.body == ""

        permanent = Response.create_redirect("/new", 301, {"Cache-Control": "no-cache"})
        assert permanent.reason_phrase == "Moved Permanently"
        assert permanent.headers.get_line("cache-control") == "no-cache"

    def test_ok(self) -> None:
        assert Response(204).ok
        assert not Response(302).ok
        assert not Response(500).ok

    def test_to_dict(self) -> None:
        data = Response(404).to_dict()
        assert data["status_code"] == 404
        assert data["reason_phrase"] == "Not Found"
        assert data["headers"] == {}
