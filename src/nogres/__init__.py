"""
nogres — a scripted, in-process double for an async Postgres client.

Queue the queries your code should run, run it, then call ``done()``:

    from nogres import Client

    client = Client()
    client.expect("SELECT 1", [], [{"?column?": 1}])
    await client.connect()
    await client.query("SELECT 1", [])
    client.done()

``Client`` stands in for a connection, ``Pool`` for a pool of them.
Nothing here opens a socket or parses SQL.
"""

from types import SimpleNamespace

from nogres.client import Client
from nogres.contracts import Expectation, Notification, QueryConfig, QueryResult
from nogres.deferred import Deferred
from nogres.errors import (
    ConfigurationError,
    NogresError,
    NotConnectedError,
    RejectedValue,
    UnexpectedParamsError,
    UnexpectedQueryError,
    UnresolvedExpectationsError,
)
from nogres.expectations import ExpectationStore
from nogres.pool import Pool

# Drop-in for code that reaches for the driver's native bindings
native = SimpleNamespace(Client=Client)

__all__ = [
    # Doubles
    "Client",
    "Pool",
    "native",
    "ExpectationStore",
    # Contracts
    "Deferred",
    "Expectation",
    "Notification",
    "QueryConfig",
    "QueryResult",
    # Errors
    "NogresError",
    "ConfigurationError",
    "NotConnectedError",
    "UnexpectedQueryError",
    "UnexpectedParamsError",
    "UnresolvedExpectationsError",
    "RejectedValue",
]
