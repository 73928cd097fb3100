from __future__ import annotations

import math
import re
from typing import Any, Mapping, Sequence

from .errors import (
    index_out_of_range,
    invalid_argument_count,
    invalid_literal,
    recursion_limit,
    type_mismatch,
    undefined_name,
)
from .functions import BoundMethod, NativeFunction, UserFunction
from .values import (
    BytesElems,
    Range,
    StarlarkDict,
    StarlarkList,
    StarlarkSet,
    StringElems,
    is_float,
    is_int,
    is_number,
    type_name,
)

_RECURSION_MESSAGE = "maximum recursion formatting a self-referential value"


def to_str(value: Any) -> str:
    """Unquoted text, as produced by `str()` and `print`."""
    if type(value) is str:
        return value
    return _format(value, set())


def to_repr(value: Any) -> str:
    """Quoted, escaped text, as produced by `repr()`."""
    return _format(value, set())


def format_float(value: float) -> str:
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "+inf" if value > 0 else "-inf"
    return repr(value)


def quote_string(value: str) -> str:
    out = ['"']
    for ch in value:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ch < " ":
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def quote_bytes(value: bytes) -> str:
    out = ['b"']
    for byte in value:
        if byte == 0x5C:
            out.append("\\\\")
        elif byte == 0x22:
            out.append('\\"')
        elif byte == 0x0A:
            out.append("\\n")
        elif byte == 0x0D:
            out.append("\\r")
        elif byte == 0x09:
            out.append("\\t")
        elif byte < 0x20 or byte >= 0x7F:
            out.append(f"\\x{byte:02x}")
        else:
            out.append(chr(byte))
    out.append('"')
    return "".join(out)


def _format(value: Any, active: set[int]) -> str:
    if value is None:
        return "None"
    kind = type(value)
    if kind is bool:
        return "True" if value else "False"
    if kind is int:
        return str(value)
    if kind is float:
        return format_float(value)
    if kind is str:
        return quote_string(value)
    if kind is bytes:
        return quote_bytes(value)
    if kind is tuple:
        inner = _format_items(value, value, active)
        return f"({inner},)" if len(value) == 1 else f"({inner})"
    if kind is StarlarkList:
        return f"[{_format_items(value.items, value, active)}]"
    if kind is StarlarkDict:
        return _format_dict(value, active)
    if kind is StarlarkSet:
        return f"set([{_format_items(list(value), value, active)}])"
    if kind is Range:
        if value.step == 1:
            return f"range({value.start}, {value.stop})"
        return f"range({value.start}, {value.stop}, {value.step})"
    if kind is StringElems:
        return f"{quote_string(value.value)}.elems()"
    if kind is BytesElems:
        return f"{quote_bytes(value.value)}.elems()"
    if kind is UserFunction:
        return f"<function {value.name}>"
    if kind is NativeFunction:
        return f"<built-in function {value.name}>"
    if kind is BoundMethod:
        return f"<built-in method {value.name} of {type_name(value.receiver)} value>"
    return f"<{type_name(value)}>"


def _format_items(items: Sequence[Any], owner: Any, active: set[int]) -> str:
    marker = id(owner)
    if marker in active:
        raise recursion_limit(_RECURSION_MESSAGE)
    active.add(marker)
    try:
        return ", ".join(_format(item, active) for item in items)
    finally:
        active.discard(marker)


def _format_dict(value: StarlarkDict, active: set[int]) -> str:
    marker = id(value)
    if marker in active:
        raise recursion_limit(_RECURSION_MESSAGE)
    active.add(marker)
    try:
        parts = [
            f"{_format(key, active)}: {_format(item, active)}" for key, item in value.items()
        ]
    finally:
        active.discard(marker)
    return "{" + ", ".join(parts) + "}"


# ----------------------------
# Percent-style formatting: "fmt" % args
# ----------------------------

_PERCENT_SPEC = re.compile(
    r"%(?:\((?P<key>[^)]*)\))?"
    r"(?P<flags>[-+ 0#]*)"
    r"(?P<width>\d+)?"
    r"(?:\.(?P<precision>\d+))?"
    r"(?P<conversion>[a-zA-Z%])?"
)

_PERCENT_CONVERSIONS = frozenset("srdioxXfgc")


class _PercentField:
    __slots__ = ("key", "flags", "width", "precision", "conversion")

    def __init__(self, key, flags, width, precision, conversion):
        self.key = key
        self.flags = flags
        self.width = width
        self.precision = precision
        self.conversion = conversion

    def python_spec(self, conversion: str) -> str:
        spec = "%" + self.flags + (self.width or "")
        if self.precision is not None:
            spec += "." + self.precision
        return spec + conversion


def _parse_percent(template: str) -> list[Any]:
    parts: list[Any] = []
    literal: list[str] = []
    index = 0
    while index < len(template):
        ch = template[index]
        if ch != "%":
            literal.append(ch)
            index += 1
            continue
        if template.startswith("%%", index):
            literal.append("%")
            index += 2
            continue
        match = _PERCENT_SPEC.match(template, index)
        conversion = match.group("conversion")
        if conversion is None:
            raise invalid_literal("incomplete format specifier")
        if conversion not in _PERCENT_CONVERSIONS:
            raise invalid_literal(f"unsupported format character '{conversion}'")
        if literal:
            parts.append("".join(literal))
            literal = []
        parts.append(
            _PercentField(
                match.group("key"),
                match.group("flags"),
                match.group("width"),
                match.group("precision"),
                conversion,
            )
        )
        index = match.end()
    if literal:
        parts.append("".join(literal))
    return parts


def percent_format(template: str, args: Any) -> str:
    """Implements `template % args` for a string left operand."""
    parts = _parse_percent(template)
    fields = [part for part in parts if isinstance(part, _PercentField)]
    mapping_mode = any(field.key is not None for field in fields)

    if mapping_mode:
        if not isinstance(args, StarlarkDict):
            raise type_mismatch(f"format requires a mapping, not {type_name(args)}")
        out = []
        for part in parts:
            if isinstance(part, str):
                out.append(part)
                continue
            if part.key is None:
                raise type_mismatch("format mixes mapping and positional specifiers")
            out.append(_convert_percent(part, args.get(part.key)))
        return "".join(out)

    if type(args) is tuple:
        values = list(args)
    elif type(args) is StarlarkList:
        values = list(args.items)
    else:
        values = [args]

    out = []
    position = 0
    for part in parts:
        if isinstance(part, str):
            out.append(part)
            continue
        if position >= len(values):
            raise invalid_argument_count("not enough arguments for format string")
        out.append(_convert_percent(part, values[position]))
        position += 1
    if position != len(values):
        raise invalid_argument_count("not all arguments converted during string formatting")
    return "".join(out)


def _convert_percent(field: _PercentField, value: Any) -> str:
    conversion = field.conversion
    if conversion == "s":
        return field.python_spec("s") % to_str(value)
    if conversion == "r":
        return field.python_spec("s") % to_repr(value)
    if conversion in "di":
        if is_int(value):
            return field.python_spec("d") % value
        if is_float(value):
            if math.isnan(value) or math.isinf(value):
                raise invalid_literal(f"cannot format {format_float(value)} with %{conversion}")
            return field.python_spec("d") % int(value)
        raise type_mismatch(f"%{conversion} format requires integer: {type_name(value)}")
    if conversion in "oxX":
        if not is_int(value):
            raise type_mismatch(f"%{conversion} format requires integer: {type_name(value)}")
        return field.python_spec(conversion) % value
    if conversion in "fg":
        if not is_number(value):
            raise type_mismatch(f"%{conversion} format requires float: {type_name(value)}")
        return field.python_spec(conversion) % float(value)
    # %c
    if is_int(value):
        if value < 0 or value > 0x10FFFF:
            raise invalid_literal(f"%c argument {value} is not a valid Unicode code point")
        return field.python_spec("s") % chr(value)
    if type(value) is str and len(value) == 1:
        return field.python_spec("s") % value
    raise type_mismatch(f"%c format requires a single-character string or int: {type_name(value)}")


# ----------------------------
# Brace-style formatting: "fmt".format(*args, **kwargs)
# ----------------------------


def brace_format(template: str, args: Sequence[Any], kwargs: Mapping[str, Any]) -> str:
    out: list[str] = []
    next_auto = 0
    used_auto = False
    used_manual = False
    index = 0
    size = len(template)
    while index < size:
        ch = template[index]
        if ch == "{":
            if template.startswith("{{", index):
                out.append("{")
                index += 2
                continue
            end = template.find("}", index + 1)
            if end < 0:
                raise invalid_literal("unmatched '{' in format string")
            field = template[index + 1 : end]
            if "!" in field or ":" in field:
                raise invalid_literal("format conversions and specs are not supported")
            if field == "":
                if used_manual:
                    raise invalid_literal("cannot switch from manual to automatic field numbering")
                used_auto = True
                if next_auto >= len(args):
                    raise index_out_of_range("not enough arguments for format string")
                value = args[next_auto]
                next_auto += 1
            elif field.isascii() and field.isdigit():
                if used_auto:
                    raise invalid_literal("cannot switch from automatic to manual field numbering")
                used_manual = True
                position = int(field)
                if position >= len(args):
                    raise index_out_of_range(f"format index {position} out of range")
                value = args[position]
            elif field.isidentifier():
                if field not in kwargs:
                    raise undefined_name(f"keyword '{field}' not found in format arguments")
                value = kwargs[field]
            else:
                raise invalid_literal(f"invalid format field '{field}'")
            out.append(to_str(value))
            index = end + 1
        elif ch == "}":
            if template.startswith("}}", index):
                out.append("}")
                index += 2
                continue
            raise invalid_literal("single '}' encountered in format string")
        else:
            out.append(ch)
            index += 1
    return "".join(out)
