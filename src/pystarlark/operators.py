"""
Operator dispatch.

Binary handlers are registered in a table keyed by (operator, left type,
right type). `object` in either type slot acts as a wildcard, which is how
`"fmt" % anything` reaches the percent formatter.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple

from .equality import are_equal, compare
from .errors import index_out_of_range, integer_overflow, type_mismatch, zero_division
from .formatting import percent_format
from .values import (
    Range,
    StarlarkDict,
    StarlarkList,
    StarlarkSet,
    check_int,
    is_int,
    is_number,
    is_truthy,
    type_name,
)

BinaryHandler = Callable[[Any, Any], Any]

_BINARY: Dict[Tuple[str, type, type], BinaryHandler] = {}

_NUMERIC_PAIRS = ((int, int), (int, float), (float, int), (float, float))

# longest sequence a repetition may build
_MAX_REPEAT_LENGTH = (1 << 31) - 1


def _register(op: str, *pairs: Tuple[type, type]):
    def decorator(fn: BinaryHandler) -> BinaryHandler:
        for left, right in pairs:
            _BINARY[(op, left, right)] = fn
        return fn

    return decorator


def _fail(op: str, left: Any, right: Any):
    raise type_mismatch(f"unknown binary op: {type_name(left)} {op} {type_name(right)}")


def _int_result(value: Any) -> Any:
    return check_int(value) if type(value) is int else value


# ----------------------------
# Arithmetic
# ----------------------------


@_register("+", *_NUMERIC_PAIRS)
def _add_numbers(left, right):
    return _int_result(left + right)


@_register("+", (str, str), (bytes, bytes), (tuple, tuple))
def _concat(left, right):
    return left + right


@_register("+", (StarlarkList, StarlarkList))
def _concat_lists(left, right):
    return StarlarkList(left.items + right.items)


@_register("-", *_NUMERIC_PAIRS)
def _sub_numbers(left, right):
    return _int_result(left - right)


@_register("*", *_NUMERIC_PAIRS)
def _mul_numbers(left, right):
    return _int_result(left * right)


def _repeat(sequence: Any, count: int) -> Any:
    if count <= 0:
        return sequence[:0]
    if count > _MAX_REPEAT_LENGTH or len(sequence) * count > _MAX_REPEAT_LENGTH:
        raise integer_overflow("repeat count is too large")
    return sequence * count


@_register("*", (str, int), (bytes, int), (tuple, int))
def _repeat_left(left, right):
    return _repeat(left, right)


@_register("*", (int, str), (int, bytes), (int, tuple))
def _repeat_right(left, right):
    return _repeat(right, left)


@_register("*", (StarlarkList, int))
def _repeat_list_left(left, right):
    return StarlarkList(_repeat(left.items, right))


@_register("*", (int, StarlarkList))
def _repeat_list_right(left, right):
    return StarlarkList(_repeat(right.items, left))


@_register("/", *_NUMERIC_PAIRS)
def _true_divide(left, right):
    if right == 0:
        raise zero_division()
    return float(left / right)


@_register("//", *_NUMERIC_PAIRS)
def _floor_divide(left, right):
    if right == 0:
        raise zero_division("integer division by zero" if is_int(right) else "division by zero")
    return _int_result(left // right)


@_register("%", *_NUMERIC_PAIRS)
def _modulo(left, right):
    if right == 0:
        raise zero_division("integer modulo by zero" if is_int(right) else "modulo by zero")
    return left % right


@_register("%", (str, object))
def _percent(left, right):
    return percent_format(left, right)


# ----------------------------
# Bitwise and collection algebra
# ----------------------------


@_register("|", (int, int))
def _bit_or(left, right):
    return left | right


@_register("^", (int, int))
def _bit_xor(left, right):
    return left ^ right


@_register("&", (int, int))
def _bit_and(left, right):
    return left & right


@_register("|", (StarlarkDict, StarlarkDict))
def _dict_union(left, right):
    merged = StarlarkDict(left.items())
    for key, value in right.items():
        merged.set(key, value)
    return merged


@_register("|", (StarlarkSet, StarlarkSet))
def _set_union(left, right):
    return left.union(right)


@_register("&", (StarlarkSet, StarlarkSet))
def _set_intersection(left, right):
    return left.intersection(right)


@_register("-", (StarlarkSet, StarlarkSet))
def _set_difference(left, right):
    return left.difference(right)


@_register("^", (StarlarkSet, StarlarkSet))
def _set_symmetric_difference(left, right):
    return left.symmetric_difference(right)


@_register("<<", (int, int))
def _shift_left(left, right):
    if right < 0:
        raise index_out_of_range("shift count must be non-negative")
    if left == 0:
        return 0
    if right >= 64:
        raise integer_overflow("integer overflow: shift result does not fit in 64 bits")
    return check_int(left << right)


@_register(">>", (int, int))
def _shift_right(left, right):
    if right < 0:
        raise index_out_of_range("shift count must be non-negative")
    return left >> min(right, 64)


# ----------------------------
# Entry points
# ----------------------------

_COMPARISONS = {
    "<": lambda order: order == -1,
    "<=": lambda order: order in (-1, 0),
    ">": lambda order: order == 1,
    ">=": lambda order: order in (0, 1),
}


def binary(op: str, left: Any, right: Any) -> Any:
    """Apply a non-short-circuit binary operator to two evaluated operands."""
    if op == "==":
        return are_equal(left, right)
    if op == "!=":
        return not are_equal(left, right)
    test = _COMPARISONS.get(op)
    if test is not None:
        order = compare(left, right, op)
        # NaN on either side: every relational operator is false
        return order is not None and test(order)
    if op == "in":
        return contains(right, left)
    if op == "not in":
        return not contains(right, left)

    left_type, right_type = type(left), type(right)
    handler = (
        _BINARY.get((op, left_type, right_type))
        or _BINARY.get((op, left_type, object))
        or _BINARY.get((op, object, right_type))
    )
    if handler is None:
        _fail(op, left, right)
    return handler(left, right)


def unary(op: str, operand: Any) -> Any:
    if op == "not":
        return not is_truthy(operand)
    if op == "+":
        if is_number(operand):
            return operand
    elif op == "-":
        if is_int(operand):
            return check_int(-operand)
        if type(operand) is float:
            return -operand
    elif op == "~":
        if is_int(operand):
            return ~operand
    raise type_mismatch(f"unknown unary op: {op}{type_name(operand)}")


def contains(container: Any, item: Any) -> bool:
    """Membership test backing `item in container`."""
    kind = type(container)
    if kind is tuple:
        return any(are_equal(element, item) for element in container)
    if kind is StarlarkList:
        return any(are_equal(element, item) for element in container.items)
    if kind is StarlarkDict:
        return container.contains(item)
    if kind is StarlarkSet:
        return container.contains(item)
    if kind is str:
        if type(item) is not str:
            raise type_mismatch(f"'in <string>' requires string as left operand, not {type_name(item)}")
        return item in container
    if kind is bytes:
        if type(item) is bytes:
            return item in container
        if is_int(item):
            return 0 <= item <= 255 and item in container
        raise type_mismatch(f"'in <bytes>' requires bytes or int as left operand, not {type_name(item)}")
    if kind is Range:
        return is_int(item) and container.contains(item)
    raise type_mismatch(f"unknown binary op: {type_name(item)} in {type_name(container)}")
