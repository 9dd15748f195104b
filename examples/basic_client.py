"""
Basic client example using http_txn.

This example demonstrates blocking transactions, the fetch helpers
and the file-based transaction log.
"""

import asyncio
import logging
import tempfile

from http_txn import Request, Transaction, TransactionLogger, fetch, fetch_json

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def simple_get_request():
    """Demonstrate a simple GET request."""
    logger.info("Making simple GET request...")

    request = Request.get("http://httpbin.org/get", {"Accept": "application/json"})

    async with Transaction(request, select_timeout=0.05) as transaction:
        response = await transaction.exec()

        logger.info(f"Response status: {response.status_code} {response.reason_phrase}")
        logger.info(f"Response body length: {len(response.body)} characters")
        logger.info(f"Packets received: {transaction.packets}")


async def post_request_with_body():
    """Demonstrate a POST request with a JSON body."""
    logger.info("Making POST request with body...")

    request = Request.post_json("http://httpbin.org/post", {"message": "Hello, World!"})

    async with Transaction(request, select_timeout=0.05) as transaction:
        response = await transaction.exec()
        logger.info(f"Response status: {response.status_code}")
        logger.info(f"Echoed JSON: {response.json().get('json')}")


async def fetch_helpers():
    """Demonstrate the fetch helpers and continuations."""
    logger.info("Using fetch helpers...")

    status = await fetch("http://httpbin.org/status/418").then(lambda r: r.status_code)
    logger.info(f"Teapot status: {status}")

    data = await fetch_json("http://httpbin.org/anything", {"id": 1}, "PUT")
    logger.info(f"Method seen by server: {data['method']}")


async def logged_transactions():
    """Demonstrate writing transactions to a log directory."""
    with tempfile.TemporaryDirectory() as dirpath:
        transaction_logger = TransactionLogger.enable(dirpath)
        try:
            await fetch("http://httpbin.org/headers")
            with open(transaction_logger.path_for(1), encoding="utf-8") as f:
                logger.info(f"Transaction log:\n{f.read()}")
        finally:
            transaction_logger.disable()


async def main():
    """Run all examples."""
    logger.info("Starting client examples...")

    try:
        await logged_transactions()
        print()

        await simple_get_request()
        print()

        await post_request_with_body()
        print()

        await fetch_helpers()

    except Exception as e:
        logger.error(f"Example failed: {e}")
        raise

    logger.info("All examples completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
