"""
Example usage of http_txn messages and headers.

Parses raw messages, builds new ones and inspects headers without any
network access.
"""

from http_txn import Headers, Request, Response


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
    '{"message": "New user created"}'
)


def headers_example():
    print("=== Headers Example ===")

    headers = Headers()
    headers.set("content-type", "text/html; charset=utf-8")
    headers.add("x-custom-token", "abc123")
    headers.add("X-CUSTOM-TOKEN", "def456")

    print(f"Names: {list(headers)}")
    print(f"Token values: {headers.get('X-Custom-Token')}")
    print(f"Token line: {headers['x-custom-token']}")
    print(f"Rendered:\n{headers}")


def request_example():
    print("=== Request Example ===")

    request = Request.from_message(RAW_REQUEST)
    print(f"Method: {request.method}")
    print(f"Target: {request.target}")
    print(f"Host: {request.header_line('host')}")
    print(f"Body: {request.body}")

    built = Request.post_json("http://example.com/users", {"name": "Foo"})
    print(f"Built request:\n{built}")


def response_example():
    print("=== Response Example ===")

    response = Response.from_message(RAW_RESPONSE)
    print(f"Status: {response.status_code} {response.reason_phrase}")
    print(f"Location: {response.header_line('Location')}")
    print(f"JSON: {response.json()}")

    redirect = Response.create_redirect("/login")
    print(f"Redirect:\n{redirect.serialize()}")


if __name__ == "__main__":
    headers_example()
    print()
    request_example()
    print()
    response_example()
