"""
Parameter matching — strict deep equality over nested parameter lists.

Parameters form a closed variant: a value is either a *sequence*
(list or tuple, compared element-wise and recursively) or a *scalar*
(compared by exact type and ``==``). No other coercion happens, so
``1`` never equals ``1.0`` or ``True`` and ``"1"`` never equals ``1``.
"""

from __future__ import annotations

from typing import Any

SEQUENCE_TYPES = (list, tuple)


def is_param_sequence(value: Any) -> bool:
    """True for the ordered sequence types accepted as a parameter list."""
    return isinstance(value, SEQUENCE_TYPES)


def params_equal(submitted: Any, expected: Any) -> bool:
    """
    Compare a submitted parameter list against an expectation's constraint.

    Both sides must be sequences: a missing parameter list (None) never
    equals an empty constraint.
    """
    if not is_param_sequence(submitted) or not is_param_sequence(expected):
        return False
    return _sequences_equal(submitted, expected)


def _sequences_equal(left: list | tuple, right: list | tuple) -> bool:
    if len(left) != len(right):
        return False
    return all(_values_equal(a, b) for a, b in zip(left, right))


def _values_equal(left: Any, right: Any) -> bool:
    left_is_seq = is_param_sequence(left)
    if left_is_seq or is_param_sequence(right):
        return left_is_seq and is_param_sequence(right) and _sequences_equal(left, right)
    if type(left) is not type(right):
        return False
    return left == right
