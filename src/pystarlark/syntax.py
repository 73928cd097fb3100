"""
The closed abstract syntax tree consumed by the runtime.

Nodes carry only semantic fields. Any front end that produces these nodes can
drive the interpreter; `pystarlark.code` lowers Python-compatible source into them.
Nodes compare by identity, which is what the recursion guard relies on.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union


class Node:
    __slots__ = ()


# ----------------------------
# Expressions
# ----------------------------


@dataclass(eq=False)
class Literal(Node):
    value: Any


@dataclass(eq=False)
class Identifier(Node):
    name: str


@dataclass(eq=False)
class Unary(Node):
    op: str  # "+", "-", "~", "not"
    operand: Node


@dataclass(eq=False)
class Binary(Node):
    op: str  # arithmetic, comparison, "in", "not in", "and", "or"
    left: Node
    right: Node


class ArgumentKind(enum.Enum):
    POSITIONAL = 0
    KEYWORD = 1
    STAR = 2
    STAR_STAR = 3


@dataclass(eq=False)
class Argument(Node):
    kind: ArgumentKind
    value: Node
    name: Optional[str] = None


@dataclass(eq=False)
class Call(Node):
    callee: Node
    arguments: list[Argument] = field(default_factory=list)


@dataclass(eq=False)
class ListExpr(Node):
    items: list[Node] = field(default_factory=list)


@dataclass(eq=False)
class TupleExpr(Node):
    items: list[Node] = field(default_factory=list)


@dataclass(eq=False)
class DictEntry(Node):
    key: Node
    value: Node


@dataclass(eq=False)
class DictExpr(Node):
    entries: list[DictEntry] = field(default_factory=list)


@dataclass(eq=False)
class ForClause(Node):
    target: Node
    iterable: Node


@dataclass(eq=False)
class IfClause(Node):
    condition: Node


Clause = Union[ForClause, IfClause]


@dataclass(eq=False)
class ListComp(Node):
    body: Node
    clauses: list[Clause]


@dataclass(eq=False)
class DictComp(Node):
    key: Node
    value: Node
    clauses: list[Clause]


@dataclass(eq=False)
class Slice(Node):
    start: Optional[Node] = None
    stop: Optional[Node] = None
    step: Optional[Node] = None


@dataclass(eq=False)
class Index(Node):
    target: Node
    index: Node  # an expression, or a Slice


@dataclass(eq=False)
class Attribute(Node):
    target: Node
    name: str


@dataclass(eq=False)
class Conditional(Node):
    condition: Node
    then_expr: Node
    else_expr: Node


class ParameterKind(enum.Enum):
    NORMAL = 0
    VARARGS = 1
    KWARGS = 2


@dataclass(eq=False)
class Parameter(Node):
    name: str
    kind: ParameterKind = ParameterKind.NORMAL
    default: Optional[Node] = None


@dataclass(eq=False)
class Lambda(Node):
    params: list[Parameter]
    body: Node


# ----------------------------
# Statements
# ----------------------------


@dataclass(eq=False)
class ExprStmt(Node):
    expr: Node


@dataclass(eq=False)
class Assign(Node):
    target: Node
    value: Node


@dataclass(eq=False)
class AugAssign(Node):
    target: Node
    op: str  # the binary operator, e.g. "+"
    value: Node


@dataclass(eq=False)
class If(Node):
    # (condition, body) for the `if` and each `elif`, in order
    branches: list[tuple[Node, list[Node]]]
    else_body: list[Node] = field(default_factory=list)


@dataclass(eq=False)
class For(Node):
    target: Node
    iterable: Node
    body: list[Node]


@dataclass(eq=False)
class Def(Node):
    name: str
    params: list[Parameter]
    body: list[Node]


@dataclass(eq=False)
class Return(Node):
    value: Optional[Node] = None


@dataclass(eq=False)
class Break(Node):
    pass


@dataclass(eq=False)
class Continue(Node):
    pass


@dataclass(eq=False)
class Pass(Node):
    pass


@dataclass(eq=False)
class Load(Node):
    module: str
    # (local name, exported name)
    symbols: list[tuple[str, str]]


@dataclass(eq=False)
class Module(Node):
    statements: list[Node]
