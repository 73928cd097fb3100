from __future__ import annotations

import math
from typing import Any, Optional

from .errors import recursion_limit, type_mismatch
from .values import (
    Range,
    StarlarkDict,
    StarlarkList,
    StarlarkSet,
    is_number,
    type_name,
)

_RECURSION_MESSAGE = "maximum recursion comparing self-referential values"


class _ActivePairs:
    """(left identity, right identity) pairs currently being compared."""

    __slots__ = ("pairs",)

    def __init__(self):
        self.pairs: set[tuple[int, int]] = set()

    def enter(self, left: Any, right: Any) -> tuple[int, int]:
        pair = (id(left), id(right))
        if pair in self.pairs:
            raise recursion_limit(_RECURSION_MESSAGE)
        self.pairs.add(pair)
        return pair

    def leave(self, pair: tuple[int, int]) -> None:
        self.pairs.discard(pair)


# ----------------------------
# Exact numeric comparison
# ----------------------------


def compare_int_float(int_value: int, float_value: float) -> Optional[int]:
    """Three-way compare of an int against a float without rounding the int.

    The float is decomposed into an exact ratio of integers (its mantissa over a
    power of two) and the int is scaled to the same denominator, so ints that
    are not representable as doubles never compare equal to a nearby float.
    Returns None when the float is NaN.
    """
    if math.isnan(float_value):
        return None
    if math.isinf(float_value):
        return -1 if float_value > 0 else 1
    numerator, denominator = float_value.as_integer_ratio()
    scaled = int_value * denominator
    if scaled < numerator:
        return -1
    if scaled > numerator:
        return 1
    return 0


def compare_numbers(left: Any, right: Any) -> Optional[int]:
    left_is_int = type(left) is int
    right_is_int = type(right) is int
    if left_is_int and right_is_int:
        return (left > right) - (left < right)
    if left_is_int:
        return compare_int_float(left, right)
    if right_is_int:
        result = compare_int_float(right, left)
        return None if result is None else -result
    if math.isnan(left) or math.isnan(right):
        return None
    return (left > right) - (left < right)


# ----------------------------
# Equality
# ----------------------------


def are_equal(left: Any, right: Any) -> bool:
    """Structural equality with exact cross-type numeric comparison."""
    return _equal(left, right, _ActivePairs())


def _equal(left: Any, right: Any, active: _ActivePairs) -> bool:
    if is_number(left) and is_number(right):
        return compare_numbers(left, right) == 0

    left_type = type(left)
    if left_type is not type(right):
        return False

    if left is None or left_type in (bool, str, bytes):
        return left == right

    if left_type is tuple:
        return _sequence_equal(left, right, left, right, active)

    if left_type is StarlarkList:
        return _sequence_equal(left.items, right.items, left, right, active)

    if left_type is StarlarkDict:
        return _dict_equal(left, right, active)

    if left_type is StarlarkSet:
        if len(left) != len(right):
            return False
        return all(right.contains(item) for item in left)

    if left_type is Range:
        return _range_equal(left, right)

    return left is right


def _sequence_equal(
    left: Any, right: Any, left_owner: Any, right_owner: Any, active: _ActivePairs
) -> bool:
    if len(left) != len(right):
        return False
    pair = active.enter(left_owner, right_owner)
    try:
        for left_item, right_item in zip(left, right):
            if not _equal(left_item, right_item, active):
                return False
    finally:
        active.leave(pair)
    return True


def _dict_equal(left: StarlarkDict, right: StarlarkDict, active: _ActivePairs) -> bool:
    if len(left) != len(right):
        return False
    pair = active.enter(left, right)
    try:
        for key, value in left.items():
            if not right.contains(key):
                return False
            if not _equal(value, right.get(key), active):
                return False
    finally:
        active.leave(pair)
    return True


def _range_equal(left: Range, right: Range) -> bool:
    size = left.size
    if size != right.size:
        return False
    if size == 0:
        return True
    if left.start != right.start:
        return False
    return size == 1 or left.step == right.step


# ----------------------------
# Ordering
# ----------------------------


def compare(left: Any, right: Any, op: str = "<") -> Optional[int]:
    """Three-way ordering; None means unordered (a NaN was involved)."""
    return _compare(left, right, op, _ActivePairs())


def _compare(left: Any, right: Any, op: str, active: _ActivePairs) -> Optional[int]:
    if is_number(left) and is_number(right):
        return compare_numbers(left, right)

    left_type = type(left)
    if left_type is type(right):
        if left_type in (bool, str, bytes):
            return (left > right) - (left < right)
        if left_type is tuple:
            return _compare_sequences(left, right, left, right, op, active)
        if left_type is StarlarkList:
            return _compare_sequences(left.items, right.items, left, right, op, active)

    raise type_mismatch(
        f"unsupported comparison: {type_name(left)} {op} {type_name(right)}"
    )


def _compare_sequences(
    left: Any, right: Any, left_owner: Any, right_owner: Any, op: str, active: _ActivePairs
) -> Optional[int]:
    pair = active.enter(left_owner, right_owner)
    try:
        for left_item, right_item in zip(left, right):
            if _equal(left_item, right_item, active):
                continue
            return _compare(left_item, right_item, op, active)
    finally:
        active.leave(pair)
    return (len(left) > len(right)) - (len(left) < len(right))


def compare_for_sort(left: Any, right: Any) -> int:
    """Total ordering used by sorted/min/max: NaN is an error, not 'false'."""
    result = compare(left, right, "<")
    if result is None:
        raise type_mismatch("cannot order NaN values")
    return result
