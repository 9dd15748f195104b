"""
Deferred results for http_txn.

A Deferred schedules a zero-argument computation on the running event
loop and lets callers register continuations with ``then`` or simply
``await`` it.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Generator, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Deferred(Generic[T]):
    """
    Handle on a computation running as an asyncio task.

    Must be created while an event loop is running.
    """

    def __init__(self, computation: Callable[[], Union[T, Awaitable[T]]]) -> None:
        """
        Schedule ``computation``.

        Args:
            computation: Zero-argument callable returning a value or an awaitable
        """
        self._task: "asyncio.Task[T]" = asyncio.ensure_future(self._run(computation))

    @staticmethod
    async def _run(computation: Callable[[], Any]) -> Any:
        return await _resolve(computation())

    def then(self, continuation: Callable[[T], Union[U, Awaitable[U]]]) -> "Deferred[U]":
        """
        Register a continuation invoked with this computation's result.

        Returns:
            A Deferred for the continuation's result. Errors of this
            computation propagate to it without calling ``continuation``.
        """
        async def chained() -> U:
            return await _resolve(continuation(await self._task))

        return Deferred(chained)

    def done(self) -> bool:
        return self._task.done()

    def result(self) -> T:
        """Return the result of a finished computation (raises if pending)."""
        return self._task.result()

    def cancel(self) -> bool:
        return self._task.cancel()

    def __await__(self) -> Generator[Any, None, T]:
        return self._task.__await__()
