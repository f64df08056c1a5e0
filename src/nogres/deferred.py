"""
Deferred — an already-settled awaitable plus the callback adapter.

Every runtime operation of the double computes its outcome synchronously
as an ``(error, value)`` pair. `settle()` turns that pair into what the
caller asked for:

- no callback: a Deferred that resolves with ``value`` or rejects with ``error``
- callback:    ``callback(error, value)`` runs immediately and the Deferred
               resolves with whatever the callback returned

Usage:
    result = await client.query("SELECT 1")

    client.query("SELECT 1", callback=lambda err, res: ...)
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Generator

from nogres.errors import RejectedValue

Callback = Callable[[Any, Any], Any]


class Deferred:
    """
    A settled result that can be awaited, inspected, or chained.

    Mirrors the read side of ``asyncio.Future`` (``done``, ``result``,
    ``exception``) but needs no running event loop, so callback-style
    callers in plain synchronous tests work too.
    """

    __slots__ = ("_value", "_error", "_rejected")

    def __init__(self, value: Any = None, error: Any = None, rejected: bool = False):
        self._value = value
        self._error = error
        self._rejected = rejected

    @classmethod
    def resolved(cls, value: Any = None) -> Deferred:
        return cls(value=value)

    @classmethod
    def rejected(cls, error: Any) -> Deferred:
        return cls(error=error, rejected=True)

    def done(self) -> bool:
        return True

    @property
    def is_rejected(self) -> bool:
        return self._rejected

    def exception(self) -> Any:
        """The rejection value, verbatim (not wrapped), or None."""
        return self._error if self._rejected else None

    def result(self) -> Any:
        """Return the value, or raise the rejection.

        Exceptions are raised as the identical object; any other rejection
        value is raised inside a `RejectedValue`.
        """
        if self._rejected:
            if isinstance(self._error, BaseException):
                raise self._error
            raise RejectedValue(self._error)
        return self._value

    def then(self, transform: Callable[[Any], Any]) -> Deferred:
        """Map a resolved value; rejections pass through untouched.

        A transform that raises rejects the returned Deferred instead of
        raising out of the caller.
        """
        if self._rejected:
            return self
        try:
            return Deferred.resolved(transform(self._value))
        except Exception as exc:
            return Deferred.rejected(exc)

    async def _settle(self) -> Any:
        value = self.result()
        # A coroutine returned by an async callback is chained, not returned raw
        if inspect.isawaitable(value):
            return await value
        return value

    def __await__(self) -> Generator[Any, None, Any]:
        return self._settle().__await__()

    def __repr__(self) -> str:
        if self._rejected:
            return f"<Deferred rejected={self._error!r}>"
        return f"<Deferred resolved={self._value!r}>"


def settle(error: Any, value: Any, callback: Callback | None = None) -> Deferred:
    """Deliver an ``(error, value)`` outcome through the caller's chosen mode."""
    if callback is not None:
        return Deferred.resolved(callback(error, value))
    if error is not None:
        return Deferred.rejected(error)
    return Deferred.resolved(value)
