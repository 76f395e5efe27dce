# webauto/assertions.py
"""
@file assertions.py
@brief Generic assertions and list helpers usable from any step context.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Callable, Iterable, List, Optional

from .exceptions import ExpectationError


def assert_true(condition: Any, message: str = "") -> None:
    """Raise ExpectationError if condition is falsy."""
    if not condition:
        raise ExpectationError(message)


def assert_equal(expected: Any, actual: Any, msg: Optional[str] = None) -> None:
    assert_true(
        expected == actual,
        msg if msg is not None else f"Expected {expected} to equal {actual}",
    )


def assert_exactly_equal(expected: Any, actual: Any, msg: Optional[str] = None) -> None:
    """Like assert_equal, but the two values must also share a type."""
    assert_true(
        type(expected) is type(actual) and expected == actual,
        msg if msg is not None else f"Expected {expected!r} to exactly equal {actual!r}",
    )


def assert_less_than(expected: Any, actual: Any, msg: Optional[str] = None) -> None:
    assert_true(
        expected < actual,
        msg if msg is not None else f"Expected {expected} to be less than {actual}",
    )


def assert_greater_than(expected: Any, actual: Any, msg: Optional[str] = None) -> None:
    assert_true(
        expected > actual,
        msg if msg is not None else f"Expected {expected} to be greater than {actual}",
    )


def assert_value_in_range(expected: float, actual: float, range_: float = 5) -> None:
    """
    Assert that actual lies within expected +/- range_ (inclusive).

    The lower bound never drops below zero.
    """
    lower_bound = max(expected - range_, 0)
    upper_bound = expected + range_
    assert_true(
        lower_bound <= actual <= upper_bound,
        f"Value not in expected range: {lower_bound} <= {actual} <= {upper_bound}",
    )


def map_items(items: Iterable[Any], function: Callable[[Any], Any]) -> List[Any]:
    """Apply function to every item, returning the results in order."""
    return [function(item) for item in items]


def reduce_items(
    items: Iterable[Any],
    function: Callable[[Any, Any], Any],
    initial: Any = None,
) -> Any:
    """Fold items with function(carry, item), starting from initial. An empty list gives initial."""
    return reduce(function, items, initial)
