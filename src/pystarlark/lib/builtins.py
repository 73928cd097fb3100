from __future__ import annotations

import functools
import math
import re
from typing import Any, Callable, Dict

from pystarlark.equality import compare_for_sort
from pystarlark.errors import fail, index_out_of_range, invalid_literal, type_mismatch
from pystarlark.formatting import to_repr, to_str
from pystarlark.functions import NativeFunction, call
from pystarlark.values import (
    BytesElems,
    Range,
    StarlarkDict,
    StarlarkList,
    StarlarkSet,
    StringElems,
    check_int,
    is_int,
    is_truthy,
    iterate,
    type_name,
)

from .arguments import expect_keywords, expect_range, require_int, require_str, unpack
from .methods import lookup_method, pairs_of

_SIZED = (str, bytes, tuple, StarlarkList, StarlarkDict, StarlarkSet, Range, StringElems, BytesElems)

_FLOAT_LITERAL = re.compile(
    r"[+-]?(([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|inf|infinity|nan)", re.IGNORECASE
)


def _len(args, kwargs):
    (value,) = unpack("len", args, kwargs, 1)
    if not isinstance(value, _SIZED):
        raise type_mismatch(f"len: value of type {type_name(value)} has no len")
    if type(value) is Range:
        return check_int(value.size)
    return len(value)


def _range(args, kwargs):
    expect_keywords("range", kwargs, ())
    expect_range("range", args, 1, 3)
    bounds = [require_int("range", arg) for arg in args]
    if len(bounds) == 1:
        return Range(0, bounds[0])
    step = bounds[2] if len(bounds) == 3 else 1
    if step == 0:
        raise index_out_of_range("range step cannot be zero")
    return Range(bounds[0], bounds[1], step)


def _str(args, kwargs):
    (value,) = unpack("str", args, kwargs, 1)
    return to_str(value)


def _repr(args, kwargs):
    (value,) = unpack("repr", args, kwargs, 1)
    return to_repr(value)


def _bool(args, kwargs):
    (value,) = unpack("bool", args, kwargs, 0, (False,))
    return is_truthy(value)


def _int(args, kwargs):
    expect_keywords("int", kwargs, ("base",))
    expect_range("int", args, 0, 2)
    if not args:
        return 0
    value = args[0]
    base = args[1] if len(args) > 1 else kwargs.get("base")
    if type(value) is str:
        return _parse_int(value, 10 if base is None else require_int("int", base))
    if base is not None:
        raise type_mismatch("int: can't convert non-string with explicit base")
    if type(value) is bool:
        return int(value)
    if is_int(value):
        return value
    if type(value) is float:
        if math.isnan(value) or math.isinf(value):
            raise invalid_literal(f"int: cannot convert {to_repr(value)} to int")
        return check_int(int(value))
    raise type_mismatch(f"int: can't convert {type_name(value)} to int")


def _parse_int(text: str, base: int) -> int:
    if base != 0 and not 2 <= base <= 36:
        raise invalid_literal(f"int: base must be 0 or in [2, 36], got {base}")
    # host int() also accepts underscores and surrounding whitespace
    if "_" in text or text != text.strip():
        raise _bad_int(text, base)
    try:
        value = int(text, base)
    except ValueError:
        raise _bad_int(text, base) from None
    return check_int(value)


def _bad_int(text: str, base: int):
    return invalid_literal(f"invalid literal for int() with base {base}: {to_repr(text)}")


def _float(args, kwargs):
    (value,) = unpack("float", args, kwargs, 0, (0.0,))
    if type(value) is float:
        return value
    if type(value) is bool:
        return 1.0 if value else 0.0
    if is_int(value):
        return float(value)
    if type(value) is str:
        if _FLOAT_LITERAL.fullmatch(value) is None:
            raise invalid_literal(f"invalid float literal: {to_repr(value)}")
        return float(value)
    raise type_mismatch(f"float: can't convert {type_name(value)} to float")


def _list(args, kwargs):
    (value,) = unpack("list", args, kwargs, 0, ((),))
    return StarlarkList(iterate(value))


def _tuple(args, kwargs):
    (value,) = unpack("tuple", args, kwargs, 0, ((),))
    return tuple(iterate(value))


def _dict(args, kwargs):
    expect_range("dict", args, 0, 1)
    out = StarlarkDict()
    if args:
        for key, value in pairs_of(args[0], "dict"):
            out.set(key, value)
    for key, value in kwargs.items():
        out.set(key, value)
    return out


def _set(args, kwargs):
    (value,) = unpack("set", args, kwargs, 0, ((),))
    return StarlarkSet(iterate(value))


def _type(args, kwargs):
    (value,) = unpack("type", args, kwargs, 1)
    return type_name(value)


def _sorted(args, kwargs):
    expect_keywords("sorted", kwargs, ("key", "reverse"))
    (iterable,) = unpack("sorted", args, {}, 1)
    items = list(iterate(iterable))
    key_fn = kwargs.get("key")
    reverse = is_truthy(kwargs.get("reverse", False))
    if key_fn is None:
        keyed = [(item, item) for item in items]
    else:
        keyed = [(call(key_fn, [item], {}), item) for item in items]
    order = functools.cmp_to_key(lambda left, right: compare_for_sort(left[0], right[0]))
    keyed.sort(key=order, reverse=reverse)
    return StarlarkList(item for _, item in keyed)


def _extreme(name: str, pick: int) -> Callable[[list, Dict[str, Any]], Any]:
    def impl(args, kwargs):
        expect_keywords(name, kwargs, ("key",))
        if not args:
            raise index_out_of_range(f"{name}: expected at least one argument")
        candidates = list(iterate(args[0])) if len(args) == 1 else list(args)
        if not candidates:
            raise index_out_of_range(f"{name}: argument is an empty sequence")
        key_fn = kwargs.get("key")
        best = candidates[0]
        best_key = best if key_fn is None else call(key_fn, [best], {})
        for item in candidates[1:]:
            item_key = item if key_fn is None else call(key_fn, [item], {})
            if compare_for_sort(item_key, best_key) == pick:
                best, best_key = item, item_key
        return best

    return impl


def _any(args, kwargs):
    (iterable,) = unpack("any", args, kwargs, 1)
    return any(is_truthy(item) for item in iterate(iterable))


def _all(args, kwargs):
    (iterable,) = unpack("all", args, kwargs, 1)
    return all(is_truthy(item) for item in iterate(iterable))


def _enumerate(args, kwargs):
    iterable, start = unpack("enumerate", args, kwargs, 1, (0,))
    start = require_int("enumerate", start)
    return StarlarkList((start + index, item) for index, item in enumerate(iterate(iterable)))


def _zip(args, kwargs):
    expect_keywords("zip", kwargs, ())
    columns = [list(iterate(arg)) for arg in args]
    return StarlarkList(zip(*columns)) if columns else StarlarkList()


def _reversed(args, kwargs):
    (iterable,) = unpack("reversed", args, kwargs, 1)
    return StarlarkList(reversed(list(iterate(iterable))))


def _abs(args, kwargs):
    (value,) = unpack("abs", args, kwargs, 1)
    if is_int(value):
        return check_int(abs(value))
    if type(value) is float:
        return abs(value)
    raise type_mismatch(f"abs: expected int or float, got {type_name(value)}")


def _hasattr(args, kwargs):
    value, name = unpack("hasattr", args, kwargs, 2)
    return lookup_method(value, require_str("hasattr", name)) is not None


def _make_print(print_fn: Callable[[str], None]):
    def _print(args, kwargs):
        expect_keywords("print", kwargs, ("sep",))
        sep = require_str("print", kwargs.get("sep", " "))
        print_fn(sep.join(to_str(arg) for arg in args))
        return None

    return _print


def _fail(args, kwargs):
    expect_keywords("fail", kwargs, ("msg",))
    parts = [to_str(arg) for arg in args]
    if "msg" in kwargs:
        parts.insert(0, to_str(kwargs["msg"]))
    raise fail(" ".join(parts) if parts else "failed")


def make_builtins(print_fn: Callable[[str], None]) -> Dict[str, Any]:
    """A fresh builtins table; each environment gets its own copy."""
    table = {
        "len": _len,
        "range": _range,
        "str": _str,
        "repr": _repr,
        "bool": _bool,
        "int": _int,
        "float": _float,
        "list": _list,
        "tuple": _tuple,
        "dict": _dict,
        "set": _set,
        "type": _type,
        "sorted": _sorted,
        "min": _extreme("min", -1),
        "max": _extreme("max", 1),
        "any": _any,
        "all": _all,
        "enumerate": _enumerate,
        "zip": _zip,
        "reversed": _reversed,
        "abs": _abs,
        "hasattr": _hasattr,
        "print": _make_print(print_fn),
        "fail": _fail,
    }
    return {name: NativeFunction(name, impl) for name, impl in table.items()}
