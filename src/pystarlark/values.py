from __future__ import annotations

from typing import Any, Iterable, Iterator

from .common import MISSING
from .errors import (
    index_out_of_range,
    integer_overflow,
    mutation_during_iteration,
    recursion_limit,
    type_mismatch,
    unhashable_type,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_NATIVE_TYPE_NAMES = {
    type(None): "NoneType",
    bool: "bool",
    int: "int",
    float: "float",
    str: "string",
    bytes: "bytes",
    tuple: "tuple",
}


def type_name(value: Any) -> str:
    name = _NATIVE_TYPE_NAMES.get(type(value))
    if name is not None:
        return name
    name = getattr(type(value), "type_name", None)
    if isinstance(name, str):
        return name
    return type(value).__name__


def is_int(value: Any) -> bool:
    return type(value) is int


def is_float(value: Any) -> bool:
    return type(value) is float


def is_number(value: Any) -> bool:
    return type(value) is int or type(value) is float


def check_int(value: int) -> int:
    if value < INT64_MIN or value > INT64_MAX:
        raise integer_overflow("integer overflow: result does not fit in 64 bits")
    return value


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, int, float, str, bytes, tuple)):
        return bool(value)
    if isinstance(value, Range):
        return value.size != 0
    size = getattr(value, "__len__", None)
    if size is not None:
        return len(value) != 0
    return True


def normalize_index(index: Any, length: int, type_label: str) -> int:
    if not is_int(index):
        raise type_mismatch(f"{type_label} index must be int, not {type_name(index)}")
    resolved = index + length if index < 0 else index
    if resolved < 0 or resolved >= length:
        raise index_out_of_range(
            f"{type_label} index {index} out of range (length {length})"
        )
    return resolved


# ----------------------------
# Hashing
# ----------------------------


def ensure_hashable(value: Any) -> None:
    if isinstance(value, (StarlarkList, StarlarkDict)):
        raise unhashable_type(type_name(value))
    if type(value) is tuple:
        for item in value:
            ensure_hashable(item)


def hash_key(value: Any) -> Any:
    """Key under which `value` is stored in a dict or set.

    Values that compare equal under language equality map to equal keys, so
    `1` and `1.0` collide while `1` and `True` do not.
    """
    kind = type(value)
    if value is None:
        return ("none",)
    if kind is bool:
        return ("bool", value)
    if kind is int:
        return ("num", value)
    if kind is float:
        if value.is_integer():
            return ("num", int(value))
        return ("num", value)
    if kind is str:
        return ("str", value)
    if kind is bytes:
        return ("bytes", value)
    if kind is tuple:
        return ("tuple", tuple(hash_key(item) for item in value))
    if isinstance(value, (StarlarkList, StarlarkDict)):
        ensure_hashable(value)
    if isinstance(value, StarlarkSet):
        return ("set", frozenset(value._entries))
    if isinstance(value, Range):
        size = value.size
        # equal ranges (same elements) must share a key
        return ("range", size, value.start if size else 0, value.step if size > 1 else 0)
    return ("id", id(value))


# ----------------------------
# Mutable containers
# ----------------------------


class StarlarkList:
    """Mutable, alias-shared list."""

    type_name = "list"
    __slots__ = ("items", "_version")

    def __init__(self, items: Iterable[Any] = ()):
        self.items: list[Any] = list(items)
        self._version = 0

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        version = self._version
        index = 0
        while True:
            if self._version != version:
                raise mutation_during_iteration("list")
            if index >= len(self.items):
                return
            yield self.items[index]
            index += 1

    def __repr__(self) -> str:
        return f"<list len={len(self.items)}>"

    def mark_mutated(self) -> None:
        self._version += 1

    def get(self, index: Any) -> Any:
        return self.items[normalize_index(index, len(self.items), "list")]

    def set(self, index: Any, value: Any) -> None:
        self.items[normalize_index(index, len(self.items), "list")] = value

    def append(self, value: Any) -> None:
        self.items.append(value)
        self.mark_mutated()

    def extend(self, values: Iterable[Any]) -> None:
        # materialize first so `x.extend(x)` sees a consistent source
        values = list(values)
        self.items.extend(values)
        self.mark_mutated()

    def insert(self, index: int, value: Any) -> None:
        self.items.insert(index, value)
        self.mark_mutated()

    def pop(self, index: int = -1) -> Any:
        resolved = normalize_index(index, len(self.items), "list")
        value = self.items.pop(resolved)
        self.mark_mutated()
        return value

    def clear(self) -> None:
        self.items.clear()
        self.mark_mutated()


class StarlarkDict:
    """Insertion-ordered mapping with keys compared by language equality."""

    type_name = "dict"
    __slots__ = ("_entries", "_version")

    def __init__(self, pairs: Iterable[tuple[Any, Any]] = ()):
        self._entries: dict[Any, tuple[Any, Any]] = {}
        self._version = 0
        for key, value in pairs:
            self.set(key, value)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        version = self._version
        keys = [key for key, _ in self._entries.values()]
        index = 0
        while True:
            if self._version != version:
                raise mutation_during_iteration("dict")
            if index >= len(keys):
                return
            yield keys[index]
            index += 1

    def __repr__(self) -> str:
        return f"<dict len={len(self._entries)}>"

    def mark_mutated(self) -> None:
        self._version += 1

    def contains(self, key: Any) -> bool:
        return hash_key(key) in self._entries

    def get(self, key: Any, default: Any = MISSING) -> Any:
        entry = self._entries.get(hash_key(key))
        if entry is not None:
            return entry[1]
        if default is MISSING:
            from .formatting import to_repr

            raise index_out_of_range(f"key {to_repr(key)} not in dict")
        return default

    def set(self, key: Any, value: Any) -> None:
        hk = hash_key(key)
        existing = self._entries.get(hk)
        if existing is not None:
            # same position, original key object
            self._entries[hk] = (existing[0], value)
            return
        self._entries[hk] = (key, value)
        self.mark_mutated()

    def pop(self, key: Any, default: Any = MISSING) -> Any:
        hk = hash_key(key)
        if hk not in self._entries:
            if default is MISSING:
                from .formatting import to_repr

                raise index_out_of_range(f"key {to_repr(key)} not in dict")
            return default
        _, value = self._entries.pop(hk)
        self.mark_mutated()
        return value

    def popitem(self) -> tuple[Any, Any]:
        if not self._entries:
            raise index_out_of_range("popitem: dictionary is empty")
        first = next(iter(self._entries))
        pair = self._entries.pop(first)
        self.mark_mutated()
        return pair

    def clear(self) -> None:
        self._entries.clear()
        self.mark_mutated()

    def keys(self) -> list[Any]:
        return [key for key, _ in self._entries.values()]

    def values(self) -> list[Any]:
        return [value for _, value in self._entries.values()]

    def items(self) -> list[tuple[Any, Any]]:
        return list(self._entries.values())


class StarlarkSet:
    """Immutable set of hashable values, kept in first-insertion order."""

    type_name = "set"
    __slots__ = ("_entries",)

    def __init__(self, items: Iterable[Any] = ()):
        self._entries: dict[Any, Any] = {}
        for item in items:
            self._entries.setdefault(hash_key(item), item)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entries.values()))

    def __repr__(self) -> str:
        return f"<set len={len(self._entries)}>"

    def contains(self, value: Any) -> bool:
        return hash_key(value) in self._entries

    def union(self, other: "StarlarkSet") -> "StarlarkSet":
        return StarlarkSet([*self, *other])

    def intersection(self, other: "StarlarkSet") -> "StarlarkSet":
        return StarlarkSet(item for item in self if other.contains(item))

    def difference(self, other: "StarlarkSet") -> "StarlarkSet":
        return StarlarkSet(item for item in self if not other.contains(item))

    def symmetric_difference(self, other: "StarlarkSet") -> "StarlarkSet":
        left = [item for item in self if not other.contains(item)]
        right = [item for item in other if not self.contains(item)]
        return StarlarkSet(left + right)


# ----------------------------
# Computed sequences and views
# ----------------------------


class Range:
    type_name = "range"
    __slots__ = ("start", "stop", "step")

    def __init__(self, start: int, stop: int, step: int = 1):
        self.start = start
        self.stop = stop
        self.step = step

    @property
    def size(self) -> int:
        # unbounded by sys.maxsize
        if self.step > 0:
            span = self.stop - self.start
            return max(0, (span + self.step - 1) // self.step)
        span = self.start - self.stop
        return max(0, (span - self.step - 1) // -self.step)

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.stop, self.step))

    def __repr__(self) -> str:
        return f"<range {self.start}:{self.stop}:{self.step}>"

    def contains(self, value: int) -> bool:
        if self.step > 0:
            if value < self.start or value >= self.stop:
                return False
        elif value > self.start or value <= self.stop:
            return False
        return (value - self.start) % self.step == 0

    def get(self, index: Any) -> int:
        return self.start + normalize_index(index, self.size, "range") * self.step


class StringElems:
    """Lazy per-character view over a string, obtained from `s.elems()`."""

    type_name = "string.elems"
    __slots__ = ("value",)

    def __init__(self, value: str):
        self.value = value

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[str]:
        for ch in self.value:
            yield ch


class BytesElems:
    """Lazy per-byte view over a bytes value, yielding ints."""

    type_name = "bytes.elems"
    __slots__ = ("value",)

    def __init__(self, value: bytes):
        self.value = value

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[int]:
        for byte in self.value:
            yield byte


ITERABLE_TYPES = (StarlarkList, StarlarkDict, StarlarkSet, Range, StringElems, BytesElems)


def iterate(value: Any) -> Iterator[Any]:
    """Iterate a language value; raw strings and bytes are rejected."""
    if type(value) is tuple:
        return iter(value)
    if isinstance(value, ITERABLE_TYPES):
        return iter(value)
    if type(value) is str:
        raise type_mismatch("string value is not iterable; use .elems()")
    if type(value) is bytes:
        raise type_mismatch("bytes value is not iterable; use .elems()")
    raise type_mismatch(f"{type_name(value)} value is not iterable")


def to_python(value: Any, _active: set[int] | None = None) -> Any:
    """Convert a runtime value into plain Python containers."""
    if isinstance(value, (StarlarkList, StarlarkDict, StarlarkSet)) or type(value) is tuple:
        active = set() if _active is None else _active
        marker = id(value)
        if marker in active:
            raise recursion_limit("maximum recursion converting a self-referential value")
        active.add(marker)
        try:
            if isinstance(value, StarlarkList):
                return [to_python(item, active) for item in value.items]
            if isinstance(value, StarlarkDict):
                return {
                    to_python(key, active): to_python(item, active)
                    for key, item in value.items()
                }
            if isinstance(value, StarlarkSet):
                return {to_python(item, active) for item in value}
            return tuple(to_python(item, active) for item in value)
        finally:
            active.discard(marker)
    if isinstance(value, Range):
        return range(value.start, value.stop, value.step)
    return value
