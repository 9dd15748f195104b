"""
Example usage of http_txn streaming.

This example demonstrates consuming a newline-delimited JSON response,
such as a chat completion stream, chunk by chunk while it arrives.
"""

import asyncio
import json
import sys

from http_txn import Request, Transaction, fetch_stream


async def stream_lines():
    """Example: Streaming a line-delimited response."""
    print("=== Line Streaming Example ===")

    transaction = Transaction(Request.get("http://httpbin.org/stream/5"), select_timeout=0.05)
    stream = transaction.stream("\n")

    try:
        async for line in stream:
            event = json.loads(line)
            print(f"Chunk {stream.chunks_read}: id={event['id']}")

        # The full response is still available once the stream is consumed
        response = await transaction.get_response()
        print(f"Status: {response.status_code}, total body: {len(response.body)} characters")
    finally:
        await stream.aclose()


async def stream_chat(url: str, prompt: str):
    """Example: Printing tokens of a chat stream as they arrive."""
    print("=== Chat Streaming Example ===")

    body = json.dumps({"prompt": prompt, "stream": True})
    stream = fetch_stream(
        url,
        body,
        "POST",
        {"Content-Type": "application/json"},
        separator="\n",
    )

    async for chunk in stream:
        message = json.loads(chunk)
        sys.stdout.write(message.get("response", ""))
        sys.stdout.flush()

        if message.get("done"):
            break

    await stream.aclose()
    print()


async def main():
    """Run all streaming examples."""
    await stream_lines()

    if len(sys.argv) > 1:
        await stream_chat(sys.argv[1], " ".join(sys.argv[2:]) or "Why is the sky blue?")


if __name__ == "__main__":
    asyncio.run(main())
