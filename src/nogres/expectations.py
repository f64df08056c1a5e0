"""
ExpectationStore — the FIFO queue of pending query expectations.

Expectations are consumed strictly in insertion order. Dequeuing is
final: the head is removed whether or not the query that examined it
matched, so a failed match never leaves the queue in a half-consumed
state.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Mapping
from typing import Any, Iterator

from nogres.contracts import Expectation, Pattern
from nogres.errors import (
    ConfigurationError,
    UnresolvedExpectationsError,
    render_params,
)
from nogres.matching import is_param_sequence

logger = logging.getLogger(__name__)


def _copy_rows(rows: Any) -> list[dict[str, Any]]:
    if not is_param_sequence(rows):
        raise ConfigurationError(
            f"Unexpected returns: {render_params(rows)}.  "
            "Should be a list of rows or an exception."
        )
    copies = []
    for row in rows:
        if not isinstance(row, Mapping):
            raise ConfigurationError(
                f"Unexpected row: {render_params(row)}.  Should be a mapping."
            )
        copies.append(dict(row))
    return copies


class ExpectationStore:
    """Ordered queue of `Expectation` records."""

    def __init__(self) -> None:
        self._queue: deque[Expectation] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self) -> Iterator[Expectation]:
        return iter(list(self._queue))

    def enqueue(
        self,
        sql: Pattern,
        params: list | tuple | None = None,
        returns: Any = None,
    ) -> Expectation:
        """
        Validate and append an expectation; return the stored record.

        ``returns`` is either a list of row mappings (copied row by row so
        later mutation by the caller cannot leak in) or an exception
        instance to fail the matching query with. None means no rows.

        Raises:
            ConfigurationError: malformed pattern, params or returns.
        """
        if not isinstance(sql, (str, re.Pattern)):
            raise ConfigurationError(
                f"Unexpected sql: {sql!r}.  Should be a string or a compiled regex."
            )
        if params is not None and not is_param_sequence(params):
            raise ConfigurationError(
                f"Unexpected params: {render_params(params)}.  Should be an array."
            )

        if isinstance(returns, BaseException):
            expectation = Expectation(sql=sql, params=params, returns=None, throws=returns)
        else:
            rows = _copy_rows(returns if returns is not None else [])
            expectation = Expectation(sql=sql, params=params, returns=rows)

        self._queue.append(expectation)
        logger.debug(
            "Expectation queued: %s",
            expectation.describe()["sql"],
            extra={"pending": len(self._queue)},
        )
        return expectation

    def dequeue_next(self) -> Expectation | None:
        """Remove and return the head expectation, or None when empty."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def count(self) -> int:
        return len(self._queue)

    def clear(self) -> int:
        """Discard every pending expectation. Returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        return dropped

    def assert_drained(self) -> None:
        """
        Raise if any expectation is still pending.

        Raises:
            UnresolvedExpectationsError: lists every remaining expectation.
        """
        if self._queue:
            raise UnresolvedExpectationsError(list(self._queue))
