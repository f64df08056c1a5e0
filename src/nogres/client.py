"""
Client — a scripted stand-in for a single database connection.

Register the queries the code under test is expected to run, in order,
then hand the client to that code:

    client = Client()
    client.expect(re.compile(r"^SELECT", re.I), [2], [{"firstname": "Jayne"}])
    await client.connect()

    result = await client.query("SELECT firstname FROM customer WHERE id = $1", [2])
    assert result.rows == [{"firstname": "Jayne"}]

    client.done()  # raises if any expectation was not consumed

Each query consumes the head expectation and either resolves with its
rows, rejects with its configured error, or rejects with an
UnexpectedQueryError / UnexpectedParamsError describing the mismatch.
"""

from __future__ import annotations

import logging
from typing import Any

from nogres.contracts import (
    Expectation,
    Notification,
    Pattern,
    QueryConfig,
    QueryResult,
)
from nogres.deferred import Callback, Deferred, settle
from nogres.errors import (
    NotConnectedError,
    UnexpectedParamsError,
    UnexpectedQueryError,
)
from nogres.events import EventEmitter, Handler
from nogres.expectations import ExpectationStore
from nogres.fetch import FetchMixin
from nogres.matching import params_equal

logger = logging.getLogger(__name__)


class Client(FetchMixin, EventEmitter):
    """
    Connection double with a FIFO queue of expectations.

    Not thread-safe. All operations run to completion without yielding to
    the event loop, which is what keeps dequeue → match → respond atomic
    with respect to other coroutines sharing the client.
    """

    def __init__(self) -> None:
        super().__init__()
        self._store = ExpectationStore()
        self._connected = False
        self._connect_error: Any = None
        # channel → callbacks registered through add_listener()
        self._channel_listeners: dict[str, list[Handler]] = {}

    @property
    def expectations(self) -> list[Expectation]:
        """Pending expectations, head first."""
        return list(self._store)

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ── Driver surface ────────────────────────────────────────────

    def connect(self, callback: Callback | None = None) -> Deferred:
        """Connect, or deliver the error armed with `error_on_connect`."""
        return settle(self.open(), None, callback)

    def query(
        self,
        sql: Any,
        params: Any = None,
        callback: Callback | None = None,
    ) -> Deferred:
        """
        Run ``sql`` against the next expectation.

        ``sql`` may be statement text or a ``{text, values}`` record
        (QueryConfig, mapping or object). A callable in the ``params``
        slot is taken as the callback.
        """
        if callable(params) and callback is None:
            params, callback = None, params
        statement = QueryConfig.coerce(sql, params)
        error, result = self._run(statement)
        return settle(error, result, callback)

    def release(self, *_: Any) -> None:
        """No-op: there is no pool to hand the connection back to."""

    def close(self) -> Deferred:
        self._connected = False
        return Deferred.resolved(None)

    # ── Mock configuration ────────────────────────────────────────

    def expect(
        self,
        sql: Pattern,
        params: list | tuple | None = None,
        returns: Any = None,
    ) -> Expectation:
        """
        Queue an expectation and return it.

        Args:
            sql: exact statement text, or a compiled regex searched against it
            params: required parameter list; None accepts any parameters
            returns: rows to resolve with (default none), or an exception
                instance to reject with

        Raises:
            ConfigurationError: immediately, if the arguments are malformed
        """
        return self._store.enqueue(sql, params, returns)

    def error_on_connect(self, error: Any) -> None:
        """Make the next ``connect()`` fail with ``error``, verbatim."""
        self._connect_error = error

    def done(self) -> None:
        """Raise UnresolvedExpectationsError if any expectation is still pending."""
        self._store.assert_drained()

    def reset(self) -> None:
        """Drop every pending expectation."""
        dropped = self._store.clear()
        if dropped:
            logger.warning("Reset discarded %d unmet expectation(s)", dropped)

    # ── Notifications ─────────────────────────────────────────────

    def notify(self, channel: str, payload: str = "", pid: int = 0) -> bool:
        """
        Simulate a NOTIFY arriving on ``channel``.

        Emits ``"notification"`` with a Notification and calls any
        ``add_listener`` callbacks as ``callback(client, pid, channel, payload)``.
        """
        delivered = self.emit("notification", Notification(channel, payload, pid))
        for callback in list(self._channel_listeners.get(channel, [])):
            callback(self, pid, channel, payload)
            delivered = True
        return delivered

    async def add_listener(self, channel: str, callback: Handler) -> None:
        self._channel_listeners.setdefault(channel, []).append(callback)

    async def remove_listener(self, channel: str, callback: Handler) -> None:
        callbacks = self._channel_listeners.get(channel, [])
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._channel_listeners.pop(channel, None)

    # ── Connection state ──────────────────────────────────────────

    def open(self) -> Any:
        """
        Connect if possible and return the outcome as a value.

        Returns None on success (or when already connected), otherwise the
        error armed with `error_on_connect`, unraised. `connect()` and
        `Pool` build their delivery modes on top of this.
        """
        if self._connected:
            return None
        if self._connect_error is not None:
            logger.debug("Connect refused: %r", self._connect_error)
            return self._connect_error
        self._connected = True
        return None

    # ── Internals ─────────────────────────────────────────────────

    def _run(self, statement: QueryConfig) -> tuple[Any, QueryResult | None]:
        """Dequeue, match and respond in one synchronous step."""
        sql, params = statement.text, statement.values

        if not self._connected:
            return NotConnectedError(), None

        expectation = self._store.dequeue_next()
        if expectation is None:
            logger.debug("No expectation left for %s", sql, extra={"sql": sql})
            return UnexpectedQueryError(sql), None

        if not expectation.matches_statement(sql):
            logger.debug("Statement mismatch for %s", sql, extra={"sql": sql})
            return UnexpectedQueryError(sql, expectation.sql), None

        if expectation.params is not None and not params_equal(params, expectation.params):
            logger.debug(
                "Params mismatch for %s", sql, extra={"sql": sql, "params": params}
            )
            return UnexpectedParamsError(sql, expectation.params, params), None

        if expectation.throws is not None:
            logger.debug("Raising configured error for %s", sql, extra={"outcome": "error"})
            return expectation.throws, None

        logger.debug(
            "Matched %s",
            sql,
            extra={"sql": sql, "outcome": "rows", "pending": len(self._store)},
        )
        rows = expectation.returns if expectation.returns is not None else []
        return None, QueryResult.from_rows(rows)
