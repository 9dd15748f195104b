"""
Publish/subscribe event bus for http_txn.

Transactions dispatch ``"sending"`` and ``"done"`` events here so that
instrumentation (such as the transaction log) can subscribe without the
engine depending on it.
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional

from typing_extensions import Protocol

logger = logging.getLogger(__name__)

EVENT_SENDING = "sending"
EVENT_DONE = "done"


class Listener(Protocol):
    def __call__(self, *args: Any) -> Any: ...


class EventDispatcher:
    """
    Named-event dispatcher.

    Listeners are called synchronously, in registration order, with the
    positional arguments passed to ``dispatch``. Errors raised by a
    listener propagate to the dispatching code.
    """

    _instance: Optional["EventDispatcher"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    @classmethod
    def instance(cls) -> "EventDispatcher":
        """Return the process-wide dispatcher."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)
        logger.debug(f"Listener added for '{event}' ({len(self._listeners[event])} total)")

    def remove_listener(self, event: str, listener: Listener) -> bool:
        """Remove a listener. Returns False if it was not registered."""
        listeners = self._listeners.get(event, [])
        if listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def listeners(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, []))

    def dispatch(self, event: str, *args: Any) -> int:
        """
        Call every listener registered for ``event``.

        Returns:
            Number of listeners called
        """
        listeners = self.listeners(event)
        for listener in listeners:
            listener(*args)
        return len(listeners)

    def clear(self, event: Optional[str] = None) -> None:
        """Remove all listeners, or only those of one event."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
