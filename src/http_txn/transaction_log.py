"""
File-based transaction log for http_txn.

TransactionLogger subscribes to the "sending" and "done" events and
appends each request and response to ``transaction.NNNN.txt`` in a
directory, one file per transaction id.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

from .events import EVENT_DONE, EVENT_SENDING, EventDispatcher
from .http_primitives import Request, Response

if TYPE_CHECKING:
    from .transaction import Transaction

logger = logging.getLogger(__name__)

SEPARATOR = "\n" + "—" * 56 + "\n"


class TransactionLogger:
    """Writes raw requests and responses of transactions to files."""

    def __init__(self, dirpath: Union[str, "os.PathLike[str]"]) -> None:
        """
        Args:
            dirpath: Existing directory receiving the log files

        Raises:
            ValueError: If the directory does not exist
        """
        self._dirpath = Path(dirpath)
        if not self._dirpath.is_dir():
            raise ValueError(f'Directory "{self._dirpath}" does not exist.')
        self._dispatcher: Optional[EventDispatcher] = None

    @property
    def dirpath(self) -> Path:
        return self._dirpath

    def path_for(self, transaction_id: int) -> Path:
        return self._dirpath / f"transaction.{transaction_id:04d}.txt"

    def _append(self, transaction_id: int, title: str, payload: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        entry = f"[{timestamp}] {title} {transaction_id}:{SEPARATOR}{payload}{SEPARATOR}"
        with open(self.path_for(transaction_id), "a", encoding="utf-8") as f:
            f.write(entry)

    def log_sending(self, transaction: "Transaction", request: Request) -> None:
        self._append(transaction.id, "Sending request", request.serialize())

    def log_done(self, transaction: "Transaction", request: Request, response: Response) -> None:
        self._append(transaction.id, "Received response", response.serialize())

    def subscribe(self, dispatcher: Optional[EventDispatcher] = None) -> None:
        self._dispatcher = dispatcher or EventDispatcher.instance()
        self._dispatcher.add_listener(EVENT_SENDING, self.log_sending)
        self._dispatcher.add_listener(EVENT_DONE, self.log_done)

    def disable(self) -> None:
        """Unsubscribe from the dispatcher it was enabled on."""
        if self._dispatcher is not None:
            self._dispatcher.remove_listener(EVENT_SENDING, self.log_sending)
            self._dispatcher.remove_listener(EVENT_DONE, self.log_done)
            self._dispatcher = None

    @classmethod
    def enable(
        cls,
        dirpath: Union[str, "os.PathLike[str]"],
        dispatcher: Optional[EventDispatcher] = None,
    ) -> "TransactionLogger":
        """Clear the directory, then log every transaction into it."""
        clear_directory(dirpath)
        transaction_logger = cls(dirpath)
        transaction_logger.subscribe(dispatcher)
        logger.debug(f"Transaction log enabled in {transaction_logger.dirpath}")
        return transaction_logger


def clear_directory(dirpath: Union[str, "os.PathLike[str]"], recursive: bool = False) -> bool:
    """
    Delete the files of a directory.

    Entries whose resolved path lies outside the directory (such as
    symlinks pointing elsewhere) are left alone. Sub-directories are
    emptied and removed only when ``recursive`` is True.

    Returns:
        False if the directory does not exist
    """
    base = Path(dirpath).resolve()
    if not base.is_dir():
        return False

    for item in base.iterdir():
        real = item.resolve()
        if base not in real.parents:
            continue

        if item.is_dir():
            if recursive:
                clear_directory(real, recursive=True)
                real.rmdir()
            continue

        real.unlink()

    return True
