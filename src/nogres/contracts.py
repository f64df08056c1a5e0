"""
Contracts — the records that flow between callers, the store and the client.

- Expectation: one pre-registered query, its parameter constraint and outcome
- QueryResult: what a matched query resolves with
- QueryConfig: the ``{text, values}`` calling convention for ``query()``
- Notification: payload of the ``"notification"`` event channel
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from nogres.errors import render_pattern, to_jsonable

Pattern = Union[str, re.Pattern]
Row = dict[str, Any]


@dataclass
class Expectation:
    """
    A pending query expectation.

    Returned by ``expect()`` so tests can reuse the normalised fields:

        sql, params, returns = client.expect("SELECT 1", [1], [{"n": 1}]).unpack()

    Exactly one of ``returns`` / ``throws`` is set: a configured error
    leaves ``returns`` as None.
    """

    sql: Pattern
    params: list | tuple | None = None  # None accepts any parameters
    returns: list[Row] | None = field(default_factory=list)
    throws: BaseException | None = None

    def matches_statement(self, text: Any) -> bool:
        if isinstance(self.sql, re.Pattern):
            return isinstance(text, str) and self.sql.search(text) is not None
        return text == self.sql

    def unpack(self) -> tuple[Pattern, list | tuple | None, list[Row] | None]:
        return self.sql, self.params, self.returns

    def describe(self) -> dict[str, Any]:
        """JSON-friendly summary used in the unresolved-expectations report."""
        entry: dict[str, Any] = {
            "sql": render_pattern(self.sql),
            "params": to_jsonable(self.params),
        }
        if self.throws is not None:
            entry["throws"] = repr(self.throws)
        else:
            entry["returns"] = self.returns
        return entry


@dataclass
class QueryResult:
    """Resolved value of a successful query."""

    rows: list[Row]
    row_count: int = 0

    @classmethod
    def from_rows(cls, rows: list[Row]) -> QueryResult:
        return cls(rows=rows, row_count=len(rows))

    @property
    def rowCount(self) -> int:  # noqa: N802
        return self.row_count


@dataclass(frozen=True)
class QueryConfig:
    """The single-argument form of ``query()``: statement text plus values."""

    text: Any
    values: list | tuple | None = None

    @classmethod
    def coerce(cls, statement: Any, params: Any = None) -> QueryConfig:
        """Normalise both calling conventions into one record.

        ``statement`` may be plain text, a QueryConfig, a mapping with
        ``text``/``values`` keys or any object exposing those attributes.
        Values carried by the record win over the positional ``params``.
        """
        if isinstance(statement, QueryConfig):
            text, values = statement.text, statement.values
        elif isinstance(statement, Mapping) and "text" in statement:
            text, values = statement["text"], statement.get("values")
        elif not isinstance(statement, str) and hasattr(statement, "text"):
            text, values = statement.text, getattr(statement, "values", None)
        else:
            return cls(text=statement, values=params)
        return cls(text=text, values=values if values is not None else params)


@dataclass(frozen=True)
class Notification:
    """A simulated LISTEN/NOTIFY message."""

    channel: str
    payload: str = ""
    pid: int = 0
