"""
Error taxonomy for the test double.

Setup mistakes (`ConfigurationError`) and unmet expectations
(`UnresolvedExpectationsError`) are raised synchronously. Everything that
goes wrong during a query is delivered through the callback or the
returned `Deferred`, never raised from the call itself.
"""

from __future__ import annotations

import json
import re
from typing import Any

_REGEX_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


def render_pattern(pattern: Any) -> str:
    """Render a statement pattern the way it reads in an error message."""
    if isinstance(pattern, re.Pattern):
        flags = "".join(letter for flag, letter in _REGEX_FLAGS if pattern.flags & flag)
        return f"/{pattern.pattern}/{flags}"
    return str(pattern)


def render_params(params: Any) -> str:
    """Compact JSON for a parameter list; a missing list renders as ``undefined``."""
    if params is None:
        return "undefined"
    return json.dumps(to_jsonable(params), separators=(",", ":"), default=repr)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, re.Pattern):
        return render_pattern(value)
    if isinstance(value, BaseException):
        return {"error": repr(value)}
    return value


class NogresError(Exception):
    """Base class for every error the double raises on its own account."""


class ConfigurationError(NogresError):
    """A malformed setup call, e.g. a parameter constraint that is not a list."""


class NotConnectedError(NogresError):
    """A query was issued before a successful connect."""

    def __init__(self) -> None:
        super().__init__("Attempted to query when client not connected")


class UnexpectedQueryError(NogresError):
    """No expectation was pending, or the statement did not match it."""

    def __init__(self, sql: Any, expected: Any = None) -> None:
        self.sql = sql
        self.expected = expected
        message = f'Unexpected query "{sql}".'
        if isinstance(expected, re.Pattern):
            message += (
                f"\nExpected a regular expression matching {render_pattern(expected)}"
            )
        elif expected is not None:
            message += f'\nExpected "{expected}"'
        super().__init__(message)


class UnexpectedParamsError(NogresError):
    """The submitted parameters did not deep-equal the expectation's constraint."""

    def __init__(self, sql: Any, expected: Any, params: Any) -> None:
        self.sql = sql
        self.expected = expected
        self.params = params
        super().__init__(
            f'Unexpected params for query "{sql}".\n'
            f"Expected {render_params(expected)}, got {render_params(params)}."
        )


class UnresolvedExpectationsError(NogresError):
    """`done()` found expectations that no query consumed."""

    def __init__(self, remaining: list) -> None:
        self.remaining = remaining
        listing = [expectation.describe() for expectation in remaining]
        super().__init__(
            "Unresolved expectations: "
            + json.dumps(listing, indent=2, default=repr)
        )


class RejectedValue(NogresError):
    """Carries a non-exception rejection value out of an awaited `Deferred`.

    A connect error armed as a plain value (``error_on_connect("boom")``)
    must surface verbatim; Python can only raise exceptions, so the value
    rides on ``.value`` untouched.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(value)
