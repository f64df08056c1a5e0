"""Tests for ExpectationStore — the FIFO queue of expectations."""

import json
import re

import pytest

from nogres.errors import ConfigurationError, UnresolvedExpectationsError
from nogres.expectations import ExpectationStore


# ─── enqueue ──────────────────────────────────────────────────


def test_enqueue_returns_normalised_record():
    store = ExpectationStore()
    expectation = store.enqueue("foo", ["bar"], [{"name": "fooRow"}, {"name": "barRow"}])

    assert expectation.sql == "foo"
    assert expectation.params == ["bar"]
    assert expectation.returns == [{"name": "fooRow"}, {"name": "barRow"}]
    assert expectation.throws is None


def test_enqueue_defaults_to_no_rows():
    store = ExpectationStore()
    expectation = store.enqueue("foo", [1, 2, 3])

    assert expectation.returns == []
    assert expectation.throws is None


def test_enqueue_with_error_outcome():
    store = ExpectationStore()
    error = RuntimeError("some db error i cooked up")
    expectation = store.enqueue("foo", ["bar"], error)

    assert expectation.returns is None
    assert expectation.throws is error


def test_enqueue_copies_rows():
    store = ExpectationStore()
    rows = [{"name": "foo"}]
    expectation = store.enqueue("foo", None, rows)

    rows[0]["name"] = "mutated"
    rows.append({"name": "extra"})

    assert expectation.returns == [{"name": "foo"}]
    assert expectation.returns is not rows
    assert expectation.returns[0] is not rows[0]


def test_enqueue_rejects_non_sequence_params():
    store = ExpectationStore()
    with pytest.raises(ConfigurationError) as exc_info:
        store.enqueue("foo", "bar")
    assert str(exc_info.value) == 'Unexpected params: "bar".  Should be an array.'
    assert store.count() == 0


def test_enqueue_rejects_mapping_params():
    store = ExpectationStore()
    with pytest.raises(ConfigurationError):
        store.enqueue("foo", {"id": 1})


def test_enqueue_rejects_bad_pattern():
    store = ExpectationStore()
    with pytest.raises(ConfigurationError):
        store.enqueue(42, [])


def test_enqueue_rejects_rows_that_are_not_mappings():
    store = ExpectationStore()
    with pytest.raises(ConfigurationError):
        store.enqueue("foo", None, ["not a row"])
    with pytest.raises(ConfigurationError):
        store.enqueue("foo", None, "not rows")


def test_enqueue_accepts_tuple_params():
    store = ExpectationStore()
    expectation = store.enqueue("foo", (1, 2))
    assert expectation.params == (1, 2)


# ─── dequeue / count / clear ─────────────────────────────────


def test_dequeue_is_fifo():
    store = ExpectationStore()
    first = store.enqueue("first")
    second = store.enqueue("second")

    assert store.count() == 2
    assert store.dequeue_next() is first
    assert store.dequeue_next() is second
    assert store.count() == 0


def test_dequeue_empty_returns_none():
    store = ExpectationStore()
    assert store.dequeue_next() is None


def test_clear_discards_everything():
    store = ExpectationStore()
    store.enqueue("a")
    store.enqueue("b")

    assert store.clear() == 2
    assert store.count() == 0
    assert store.clear() == 0


def test_iteration_is_a_snapshot():
    store = ExpectationStore()
    store.enqueue("a")
    store.enqueue("b")

    seen = [e.sql for e in store]
    store.clear()

    assert seen == ["a", "b"]
    assert len(store) == 0


# ─── assert_drained ──────────────────────────────────────────


def test_assert_drained_when_empty():
    store = ExpectationStore()
    store.assert_drained()


def test_assert_drained_lists_remaining():
    store = ExpectationStore()
    store.enqueue("select 1", [1], [{"n": 1}])
    store.enqueue(re.compile(r"^delete", re.I), None, ValueError("nope"))

    with pytest.raises(UnresolvedExpectationsError) as exc_info:
        store.assert_drained()

    error = exc_info.value
    assert len(error.remaining) == 2
    message = str(error)
    assert message.startswith("Unresolved expectations: ")
    listing = json.loads(message[len("Unresolved expectations: "):])
    assert listing[0] == {"sql": "select 1", "params": [1], "returns": [{"n": 1}]}
    assert listing[1]["sql"] == "/^delete/i"
    assert listing[1]["params"] is None
    assert "nope" in listing[1]["throws"]


def test_assert_drained_does_not_mutate():
    store = ExpectationStore()
    store.enqueue("a")

    with pytest.raises(UnresolvedExpectationsError):
        store.assert_drained()
    assert store.count() == 1
