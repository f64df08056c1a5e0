"""Tests for Pool — the single-client pool wrapper."""

import pytest

from nogres import Client, Pool, RejectedValue, UnexpectedQueryError
from nogres.core.config import PoolConfig
from tests.conftest import ORDERS_SQL


# ─── connect ─────────────────────────────────────────────────


class TestConnect:
    def test_callback_receives_the_client(self, pool: Pool):
        seen = []
        pool.connect(lambda err, client: seen.append((err, client)))

        assert seen == [(None, pool.client)]
        assert pool.client.is_connected

    @pytest.mark.asyncio
    async def test_await_returns_the_client(self, pool: Pool):
        client = await pool.connect()
        assert client is pool.client
        assert isinstance(client, Client)
        assert pool.client.is_connected

    def test_passes_through_client_error_via_callback(self, pool: Pool):
        error = RuntimeError("bar")
        pool.client.error_on_connect(error)

        seen = []
        pool.connect(lambda err, client: seen.append((err, client)))

        assert seen == [(error, None)]
        assert not pool.client.is_connected

    @pytest.mark.asyncio
    async def test_passes_through_client_error(self, pool: Pool):
        pool.client.error_on_connect(RuntimeError("bar"))
        with pytest.raises(RuntimeError, match="bar"):
            await pool.connect()
        assert not pool.client.is_connected


# ─── query ───────────────────────────────────────────────────


class TestQuery:
    @pytest.mark.asyncio
    async def test_runs_a_query_with_the_underlying_client(self, pool: Pool):
        rows = [{"name": "foo"}, {"name": "bar"}]
        pool.expect(ORDERS_SQL, [1, 2, 3], rows)

        result = await pool.query(ORDERS_SQL, [1, 2, 3])
        assert result.rows == rows
        assert result.row_count == 2

        pool.expect(ORDERS_SQL, [1, 2, 3], rows)
        seen = []
        pool.query(ORDERS_SQL, [1, 2, 3], lambda err, res: seen.append((err, res)))
        assert seen[0][0] is None
        assert seen[0][1].rows == rows
        pool.done()

    @pytest.mark.asyncio
    async def test_connect_error_surfaces_through_query(self, pool: Pool):
        pool.client.error_on_connect("down")
        pool.expect(ORDERS_SQL)

        with pytest.raises(RejectedValue):
            await pool.query(ORDERS_SQL)

        seen = []
        pool.query(ORDERS_SQL, lambda err, res: seen.append(err))
        assert seen == ["down"]
        # Nothing was consumed
        assert len(pool.expectations) == 1

    @pytest.mark.asyncio
    async def test_without_autoconnect_requires_explicit_connect(self):
        pool = Pool(PoolConfig(autoconnect=False))
        pool.expect(ORDERS_SQL)

        seen = []
        pool.query(ORDERS_SQL, lambda err, res: seen.append(str(err)))
        assert seen == ["Attempted to query when client not connected"]

        await pool.connect()
        assert (await pool.query(ORDERS_SQL)).row_count == 0
        pool.done()

    @pytest.mark.asyncio
    async def test_expectations_are_shared_with_the_client(self, pool: Pool):
        pool.client.expect("select 1")
        pool.expect("select 2")

        await pool.query("select 1")
        await pool.client.query("select 2")
        pool.done()

        with pytest.raises(UnexpectedQueryError):
            await pool.query("select 3")


# ─── expectations / reset / end ─────────────────────────────


@pytest.mark.asyncio
async def test_expectations_count(pool: Pool):
    expectation = pool.expect(ORDERS_SQL, [1, 2, 3], [{"name": "foo"}])
    assert len(pool.expectations) == 1
    assert pool.expectations[0] is expectation

    await pool.query(ORDERS_SQL, [1, 2, 3])
    assert len(pool.expectations) == 0
    pool.done()


def test_reset_clears_expectations(pool: Pool):
    pool.expect(ORDERS_SQL, [1, 2, 3])
    assert len(pool.expectations) == 1

    pool.reset()
    assert len(pool.expectations) == 0
    pool.done()


@pytest.mark.asyncio
async def test_end_invokes_supplied_callback(pool: Pool):
    calls = []
    deferred = pool.end(lambda: calls.append("ended"))
    assert calls == ["ended"]
    await deferred
    # No state change
    await pool.connect()
    assert pool.client.is_connected


@pytest.mark.asyncio
async def test_end_without_callback(pool: Pool):
    assert await pool.end() is None


# ─── acquire / release ──────────────────────────────────────


@pytest.mark.asyncio
async def test_acquire_as_context_manager(pool: Pool):
    pool.expect("SELECT 1", [], [{"?column?": 1}])

    async with pool.acquire() as conn:
        assert conn is pool.client
        assert await conn.fetchval("SELECT 1") == 1

    pool.done()


@pytest.mark.asyncio
async def test_acquire_awaited(pool: Pool):
    conn = await pool.acquire()
    assert conn is pool.client
    await pool.release(conn)


@pytest.mark.asyncio
async def test_acquire_raises_connect_error(pool: Pool):
    pool.client.error_on_connect(ConnectionError("refused"))
    with pytest.raises(ConnectionError):
        async with pool.acquire():
            pytest.fail("should not enter")
