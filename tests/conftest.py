"""
Shared fixtures for nogres tests.

Nothing here needs a database: the doubles settle every call synchronously.
"""

from __future__ import annotations

import pytest

from nogres import Client, Pool


ORDERS_SQL = "select * from orders where id = $1"


@pytest.fixture
def client() -> Client:
    """A fresh, disconnected client."""
    return Client()


@pytest.fixture
def connected_client() -> Client:
    """A fresh client that has already connected."""
    c = Client()
    c.connect()
    return c


@pytest.fixture
def pool() -> Pool:
    return Pool()
