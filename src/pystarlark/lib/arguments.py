from __future__ import annotations

from typing import Any, Dict, Sequence

from pystarlark.errors import invalid_argument_count, type_mismatch
from pystarlark.values import is_int, type_name


def expect_no_keywords(name: str, kwargs: Dict[str, Any]) -> None:
    if kwargs:
        unexpected = ", ".join(sorted(kwargs))
        raise type_mismatch(f"{name} got unexpected keyword arguments: {unexpected}")


def expect_range(name: str, args: Sequence[Any], minimum: int, maximum: int) -> None:
    if len(args) < minimum or len(args) > maximum:
        raise invalid_argument_count(
            f"{name} expects {minimum} to {maximum} arguments, got {len(args)}"
        )


def expect_keywords(name: str, kwargs: Dict[str, Any], allowed: Sequence[str]) -> None:
    for key in kwargs:
        if key not in allowed:
            raise type_mismatch(f"{name} got an unexpected keyword argument '{key}'")


def require_int(name: str, value: Any) -> int:
    if not is_int(value):
        raise type_mismatch(f"{name}: expected int, got {type_name(value)}")
    return value


def require_str(name: str, value: Any) -> str:
    if type(value) is not str:
        raise type_mismatch(f"{name}: expected string, got {type_name(value)}")
    return value


def optional_int(name: str, value: Any) -> Any:
    if value is None:
        return None
    return require_int(name, value)


def unpack(
    name: str,
    args: Sequence[Any],
    kwargs: Dict[str, Any],
    required: int,
    defaults: Sequence[Any] = (),
) -> list:
    """Positional-only binding: `required` arguments followed by optional ones."""
    expect_no_keywords(name, kwargs)
    expect_range(name, args, required, required + len(defaults))
    return list(args) + list(defaults[len(args) - required :])
