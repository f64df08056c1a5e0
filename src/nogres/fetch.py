"""
asyncpg-shaped read helpers layered on ``query()``.

Code written against asyncpg calls ``fetch``/``fetchrow``/``fetchval``/
``execute`` with positional arguments rather than a parameter list.
These helpers fold the arguments into a list, run the same expectation
matching as ``query()``, and reshape the result.
"""

from __future__ import annotations

from typing import Any

from nogres.contracts import QueryResult
from nogres.deferred import Deferred


def command_tag(sql: Any, row_count: int) -> str:
    """Build a Postgres-style status string, e.g. ``"UPDATE 3"``."""
    words = sql.split() if isinstance(sql, str) else []
    verb = words[0].upper() if words else "SELECT"
    if verb == "INSERT":
        return f"INSERT 0 {row_count}"
    return f"{verb} {row_count}"


class FetchMixin:
    """Requires the host class to implement ``query(sql, params, callback)``."""

    # ``timeout`` is accepted for signature compatibility; nothing ever waits.

    def fetch(self, sql: str, *args: Any, timeout: float | None = None) -> Deferred:
        """Resolve with the list of rows."""
        return self.query(sql, list(args)).then(lambda result: result.rows)

    def fetchrow(self, sql: str, *args: Any, timeout: float | None = None) -> Deferred:
        """Resolve with the first row, or None."""
        return self.query(sql, list(args)).then(_first_row)

    def fetchval(
        self,
        sql: str,
        *args: Any,
        column: int | str = 0,
        timeout: float | None = None,
    ) -> Deferred:
        """Resolve with one column of the first row, or None."""
        return self.query(sql, list(args)).then(
            lambda result: _column_value(_first_row(result), column)
        )

    def execute(self, sql: str, *args: Any, timeout: float | None = None) -> Deferred:
        """Resolve with the status string for the statement."""
        return self.query(sql, list(args)).then(
            lambda result: command_tag(sql, result.row_count)
        )


def _first_row(result: QueryResult) -> dict[str, Any] | None:
    return result.rows[0] if result.rows else None


def _column_value(row: dict[str, Any] | None, column: int | str) -> Any:
    if row is None:
        return None
    if isinstance(column, int):
        return list(row.values())[column]
    return row[column]
