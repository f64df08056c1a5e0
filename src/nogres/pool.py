"""
Pool — a pool-shaped wrapper around one long-lived Client.

Code that takes a pool (``pool.query(...)``, ``async with pool.acquire()``)
can be handed this instead. Every call is forwarded to the single
underlying client, so expectations registered on the pool and on
``pool.client`` share one queue.
"""

from __future__ import annotations

from typing import Any

from nogres.client import Client
from nogres.contracts import Expectation, Pattern
from nogres.core.config import PoolConfig
from nogres.core.config import config as default_config
from nogres.deferred import Callback, Deferred, settle
from nogres.fetch import FetchMixin


class _PoolAcquireContext:
    """``async with pool.acquire() as conn`` / ``conn = await pool.acquire()``."""

    def __init__(self, pool: Pool) -> None:
        self._pool = pool

    async def __aenter__(self) -> Client:
        return await self._pool.connect()

    async def __aexit__(self, *args: Any) -> None:
        await self._pool.release(self._pool.client)

    def __await__(self):
        return self._pool.connect().__await__()


class Pool(FetchMixin):
    """Single-client pool double."""

    def __init__(self, config: PoolConfig | None = None) -> None:
        self._config = config or default_config.pool
        self._client = Client()

    @property
    def client(self) -> Client:
        return self._client

    @property
    def expectations(self) -> list[Expectation]:
        return self._client.expectations

    def connect(self, callback: Callback | None = None) -> Deferred:
        """Connect the client; resolve with it, or with the armed connect error."""
        error = self._client.open()
        return settle(error, None if error is not None else self._client, callback)

    def query(
        self,
        sql: Any,
        params: Any = None,
        callback: Callback | None = None,
    ) -> Deferred:
        """Connect (when autoconnect is on) and forward to ``Client.query``."""
        if callable(params) and callback is None:
            params, callback = None, params
        if self._config.autoconnect:
            error = self._client.open()
            if error is not None:
                return settle(error, None, callback)
        return self._client.query(sql, params, callback)

    def acquire(self) -> _PoolAcquireContext:
        return _PoolAcquireContext(self)

    def release(self, connection: Any = None) -> Deferred:
        """No-op: the single client stays checked out for the pool's lifetime."""
        return Deferred.resolved(None)

    def expect(
        self,
        sql: Pattern,
        params: list | tuple | None = None,
        returns: Any = None,
    ) -> Expectation:
        return self._client.expect(sql, params, returns)

    def done(self) -> None:
        self._client.done()

    def reset(self) -> None:
        self._client.reset()

    def end(self, callback: Any = None) -> Deferred:
        """Nothing to shut down; invoke ``callback()`` right away if given."""
        return Deferred.resolved(callback() if callback is not None else None)
