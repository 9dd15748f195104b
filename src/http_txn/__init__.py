"""
http_txn - HTTP message model and non-blocking transaction engine

Wire-accurate HTTP headers, requests and responses, and a transaction
engine that drives one exchange through a non-blocking transfer,
either to completion or as a stream of chunks.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .headers import Headers
from .http_primitives import Message, Request, Response
from .transaction import IdSequence, Transaction, TransactionState
from .streams import ChunkStream, stream_to_list
from .events import EVENT_DONE, EVENT_SENDING, EventDispatcher
from .deferred import Deferred
from .client import Client, fetch, fetch_json, fetch_stream, get_default_client
from .transaction_log import TransactionLogger
from .exceptions import (
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

__all__ = [
    "Headers",
    "Message",
    "Request",
    "Response",
    "IdSequence",
    "Transaction",
    "TransactionState",
    "ChunkStream",
    "stream_to_list",
    "EVENT_DONE",
    "EVENT_SENDING",
    "EventDispatcher",
    "Deferred",
    "Client",
    "fetch",
    "fetch_json",
    "fetch_stream",
    "get_default_client",
    "TransactionLogger",
    "HTTPCoreError",
    "MessageError",
    "InvalidHeaderName",
    "InvalidHeaderValue",
    "InvalidStatusCode",
    "MalformedMessage",
    "MalformedRequestLine",
    "MalformedStatusLine",
    "MalformedHeaderLine",
    "TransferError",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
    "StreamError",
]
