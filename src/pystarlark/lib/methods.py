"""
Methods reachable through attribute access (`"a,b".split(",")`, `xs.append(1)`).

Each implementation takes `(receiver, args, kwargs)`; `lookup_method` binds it
to its receiver as a `BoundMethod`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pystarlark.common import MISSING
from pystarlark.equality import are_equal
from pystarlark.errors import index_out_of_range, invalid_literal, type_mismatch
from pystarlark.formatting import brace_format
from pystarlark.functions import BoundMethod
from pystarlark.values import (
    BytesElems,
    StarlarkDict,
    StarlarkList,
    StringElems,
    iterate,
    type_name,
)

from .arguments import expect_range, optional_int, require_int, require_str, unpack

MethodImpl = Callable[[Any, list, Dict[str, Any]], Any]

_METHODS: Dict[type, Dict[str, MethodImpl]] = {
    str: {},
    bytes: {},
    StarlarkList: {},
    StarlarkDict: {},
}


def _method(receiver_type: type, name: str):
    def decorator(fn: MethodImpl) -> MethodImpl:
        _METHODS[receiver_type][name] = fn
        return fn

    return decorator


def lookup_method(receiver: Any, name: str) -> Optional[BoundMethod]:
    impl = _METHODS.get(type(receiver), {}).get(name)
    if impl is None:
        return None
    return BoundMethod(name, receiver, impl)


# ----------------------------
# string
# ----------------------------


@_method(str, "elems")
def _str_elems(text, args, kwargs):
    unpack("elems", args, kwargs, 0)
    return StringElems(text)


@_method(str, "format")
def _str_format(text, args, kwargs):
    return brace_format(text, list(args), kwargs)


@_method(str, "join")
def _str_join(text, args, kwargs):
    (iterable,) = unpack("join", args, kwargs, 1)
    parts = []
    for item in iterate(iterable):
        if type(item) is not str:
            raise type_mismatch(f"join: expected string element, got {type_name(item)}")
        parts.append(item)
    return text.join(parts)


def _separator(name: str, sep: Any) -> Optional[str]:
    if sep is None:
        return None
    require_str(name, sep)
    if sep == "":
        raise invalid_literal(f"{name}: empty separator")
    return sep


@_method(str, "split")
def _str_split(text, args, kwargs):
    sep, maxsplit = unpack("split", args, kwargs, 0, (None, -1))
    sep = _separator("split", sep)
    return StarlarkList(text.split(sep, require_int("split", maxsplit)))


@_method(str, "rsplit")
def _str_rsplit(text, args, kwargs):
    sep, maxsplit = unpack("rsplit", args, kwargs, 0, (None, -1))
    sep = _separator("rsplit", sep)
    return StarlarkList(text.rsplit(sep, require_int("rsplit", maxsplit)))


@_method(str, "splitlines")
def _str_splitlines(text, args, kwargs):
    (keepends,) = unpack("splitlines", args, kwargs, 0, (False,))
    return StarlarkList(text.splitlines(bool(keepends)))


def _strip_chars(name: str, chars: Any) -> Optional[str]:
    return None if chars is None else require_str(name, chars)


@_method(str, "strip")
def _str_strip(text, args, kwargs):
    (chars,) = unpack("strip", args, kwargs, 0, (None,))
    return text.strip(_strip_chars("strip", chars))


@_method(str, "lstrip")
def _str_lstrip(text, args, kwargs):
    (chars,) = unpack("lstrip", args, kwargs, 0, (None,))
    return text.lstrip(_strip_chars("lstrip", chars))


@_method(str, "rstrip")
def _str_rstrip(text, args, kwargs):
    (chars,) = unpack("rstrip", args, kwargs, 0, (None,))
    return text.rstrip(_strip_chars("rstrip", chars))


def _affixes(name: str, value: Any) -> Any:
    if type(value) is tuple:
        for item in value:
            require_str(name, item)
        return value
    return require_str(name, value)


@_method(str, "startswith")
def _str_startswith(text, args, kwargs):
    (prefix,) = unpack("startswith", args, kwargs, 1)
    return text.startswith(_affixes("startswith", prefix))


@_method(str, "endswith")
def _str_endswith(text, args, kwargs):
    (suffix,) = unpack("endswith", args, kwargs, 1)
    return text.endswith(_affixes("endswith", suffix))


@_method(str, "replace")
def _str_replace(text, args, kwargs):
    old, new, count = unpack("replace", args, kwargs, 2, (-1,))
    return text.replace(
        require_str("replace", old), require_str("replace", new), require_int("replace", count)
    )


def _search_args(name: str, args, kwargs):
    sub, start, end = unpack(name, args, kwargs, 1, (None, None))
    return require_str(name, sub), optional_int(name, start), optional_int(name, end)


@_method(str, "find")
def _str_find(text, args, kwargs):
    return text.find(*_search_args("find", args, kwargs))


@_method(str, "rfind")
def _str_rfind(text, args, kwargs):
    return text.rfind(*_search_args("rfind", args, kwargs))


@_method(str, "index")
def _str_index(text, args, kwargs):
    position = text.find(*_search_args("index", args, kwargs))
    if position < 0:
        raise index_out_of_range("index: substring not found")
    return position


@_method(str, "rindex")
def _str_rindex(text, args, kwargs):
    position = text.rfind(*_search_args("rindex", args, kwargs))
    if position < 0:
        raise index_out_of_range("rindex: substring not found")
    return position


@_method(str, "count")
def _str_count(text, args, kwargs):
    return text.count(*_search_args("count", args, kwargs))


@_method(str, "partition")
def _str_partition(text, args, kwargs):
    (sep,) = unpack("partition", args, kwargs, 1)
    return text.partition(_separator("partition", require_str("partition", sep)))


@_method(str, "rpartition")
def _str_rpartition(text, args, kwargs):
    (sep,) = unpack("rpartition", args, kwargs, 1)
    return text.rpartition(_separator("rpartition", require_str("rpartition", sep)))


@_method(str, "removeprefix")
def _str_removeprefix(text, args, kwargs):
    (prefix,) = unpack("removeprefix", args, kwargs, 1)
    return text.removeprefix(require_str("removeprefix", prefix))


@_method(str, "removesuffix")
def _str_removesuffix(text, args, kwargs):
    (suffix,) = unpack("removesuffix", args, kwargs, 1)
    return text.removesuffix(require_str("removesuffix", suffix))


def _register_unary_string_methods() -> None:
    for name in (
        "lower",
        "upper",
        "title",
        "capitalize",
        "isalnum",
        "isalpha",
        "isdigit",
        "islower",
        "isupper",
        "istitle",
        "isspace",
    ):

        def impl(text, args, kwargs, _name=name):
            unpack(_name, args, kwargs, 0)
            return getattr(text, _name)()

        _METHODS[str][name] = impl


_register_unary_string_methods()


# ----------------------------
# bytes
# ----------------------------


@_method(bytes, "elems")
def _bytes_elems(data, args, kwargs):
    unpack("elems", args, kwargs, 0)
    return BytesElems(data)


# ----------------------------
# list
# ----------------------------


@_method(StarlarkList, "append")
def _list_append(items, args, kwargs):
    (value,) = unpack("append", args, kwargs, 1)
    items.append(value)
    return None


@_method(StarlarkList, "extend")
def _list_extend(items, args, kwargs):
    (values,) = unpack("extend", args, kwargs, 1)
    items.extend(iterate(values))
    return None


@_method(StarlarkList, "insert")
def _list_insert(items, args, kwargs):
    index, value = unpack("insert", args, kwargs, 2)
    index = require_int("insert", index)
    size = len(items)
    if index < 0:
        index += size
    items.insert(min(max(index, 0), size), value)
    return None


@_method(StarlarkList, "remove")
def _list_remove(items, args, kwargs):
    (value,) = unpack("remove", args, kwargs, 1)
    for position, item in enumerate(items.items):
        if are_equal(item, value):
            items.pop(position)
            return None
    raise index_out_of_range("remove: element not found")


@_method(StarlarkList, "pop")
def _list_pop(items, args, kwargs):
    (index,) = unpack("pop", args, kwargs, 0, (-1,))
    return items.pop(require_int("pop", index))


@_method(StarlarkList, "index")
def _list_index(items, args, kwargs):
    value, start, end = unpack("index", args, kwargs, 1, (None, None))
    positions = range(len(items))[slice(optional_int("index", start), optional_int("index", end))]
    for position in positions:
        if are_equal(items.items[position], value):
            return position
    raise index_out_of_range("index: element not found")


@_method(StarlarkList, "clear")
def _list_clear(items, args, kwargs):
    unpack("clear", args, kwargs, 0)
    items.clear()
    return None


# ----------------------------
# dict
# ----------------------------


@_method(StarlarkDict, "get")
def _dict_get(mapping, args, kwargs):
    key, default = unpack("get", args, kwargs, 1, (None,))
    return mapping.get(key, default)


@_method(StarlarkDict, "keys")
def _dict_keys(mapping, args, kwargs):
    unpack("keys", args, kwargs, 0)
    return StarlarkList(mapping.keys())


@_method(StarlarkDict, "values")
def _dict_values(mapping, args, kwargs):
    unpack("values", args, kwargs, 0)
    return StarlarkList(mapping.values())


@_method(StarlarkDict, "items")
def _dict_items(mapping, args, kwargs):
    unpack("items", args, kwargs, 0)
    return StarlarkList(mapping.items())


@_method(StarlarkDict, "pop")
def _dict_pop(mapping, args, kwargs):
    key, default = unpack("pop", args, kwargs, 1, (MISSING,))
    return mapping.pop(key, default)


@_method(StarlarkDict, "popitem")
def _dict_popitem(mapping, args, kwargs):
    unpack("popitem", args, kwargs, 0)
    return mapping.popitem()


@_method(StarlarkDict, "setdefault")
def _dict_setdefault(mapping, args, kwargs):
    key, default = unpack("setdefault", args, kwargs, 1, (None,))
    if mapping.contains(key):
        return mapping.get(key)
    mapping.set(key, default)
    return default


@_method(StarlarkDict, "update")
def _dict_update(mapping, args, kwargs):
    expect_range("update", args, 0, 1)
    if args:
        for key, value in pairs_of(args[0], "update"):
            mapping.set(key, value)
    for key, value in kwargs.items():
        mapping.set(key, value)
    return None


@_method(StarlarkDict, "clear")
def _dict_clear(mapping, args, kwargs):
    unpack("clear", args, kwargs, 0)
    mapping.clear()
    return None


def pairs_of(source: Any, name: str) -> list[tuple[Any, Any]]:
    """Key/value pairs from a dict, or from an iterable of 2-element sequences."""
    if isinstance(source, StarlarkDict):
        return source.items()
    pairs = []
    for position, item in enumerate(iterate(source)):
        entry = list(iterate(item))
        if len(entry) != 2:
            raise type_mismatch(
                f"{name}: element #{position} has length {len(entry)}, want 2"
            )
        pairs.append((entry[0], entry[1]))
    return pairs
