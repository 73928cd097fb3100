from __future__ import annotations

import ast
from typing import Any, Optional

from . import syntax as S
from .errors import invalid_literal
from .values import INT64_MAX, INT64_MIN

_BINARY_OPS = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
    ast.BitOr: "|",
    ast.BitXor: "^",
    ast.BitAnd: "&",
    ast.LShift: "<<",
    ast.RShift: ">>",
}

_COMPARE_OPS = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.In: "in",
    ast.NotIn: "not in",
}

_UNARY_OPS = {
    ast.UAdd: "+",
    ast.USub: "-",
    ast.Invert: "~",
    ast.Not: "not",
}


class ModuleCode:
    """
    Holds:
      - the source text and filename
      - the host `ast` parse of the source
      - the lowered module (or expression) in the runtime's own syntax tree
    """

    def __init__(self, source: str, filename: str = "<pystarlark>", mode: str = "exec"):
        self.source = source
        self.filename = filename
        self.tree = ast.parse(source, filename=filename, mode=mode)
        lowering = _Lowering(source, filename)
        if mode == "eval":
            self.module: Optional[S.Module] = None
            self.expression: Optional[S.Node] = lowering.expr(self.tree.body)
        else:
            self.module = S.Module(lowering.block(self.tree.body, top_level=True))
            self.expression = None


def parse_module(source: str, filename: str = "<pystarlark>") -> S.Module:
    return ModuleCode(source, filename).module


def parse_expression(source: str, filename: str = "<expr>") -> S.Node:
    return ModuleCode(source, filename, mode="eval").expression


class _Lowering:
    """Translates host `ast` nodes into `pystarlark.syntax` nodes, rejecting the rest."""

    def __init__(self, source: str, filename: str):
        self.lines = source.splitlines()
        self.filename = filename

    def unsupported(self, node: ast.AST, what: str) -> SyntaxError:
        lineno = getattr(node, "lineno", 1)
        offset = getattr(node, "col_offset", 0) + 1
        text = self.lines[lineno - 1] if 0 < lineno <= len(self.lines) else None
        return SyntaxError(f"{what} is not supported", (self.filename, lineno, offset, text))

    # ----- statements -----

    def block(self, stmts: list[ast.stmt], *, top_level: bool = False) -> list[S.Node]:
        return [self.stmt(stmt, top_level=top_level) for stmt in stmts]

    def stmt(self, node: ast.stmt, *, top_level: bool = False) -> S.Node:
        if isinstance(node, ast.Expr) and _is_load_call(node.value):
            if not top_level:
                raise self.unsupported(node, "load() outside the top level")
            return self.load(node.value)
        m = getattr(self, f"stmt_{node.__class__.__name__}", None)
        if m is None:
            raise self.unsupported(node, f"statement {node.__class__.__name__!r}")
        return m(node)

    def stmt_Expr(self, node: ast.Expr) -> S.Node:
        return S.ExprStmt(self.expr(node.value))

    def stmt_Assign(self, node: ast.Assign) -> S.Node:
        if len(node.targets) != 1:
            raise self.unsupported(node, "chained assignment")
        return S.Assign(self.target(node.targets[0]), self.expr(node.value))

    def stmt_AugAssign(self, node: ast.AugAssign) -> S.Node:
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise self.unsupported(node, f"operator {node.op.__class__.__name__!r}")
        if not isinstance(node.target, (ast.Name, ast.Subscript)):
            raise self.unsupported(node, "augmented assignment to this target")
        return S.AugAssign(self.target(node.target), op, self.expr(node.value))

    def stmt_If(self, node: ast.If) -> S.Node:
        branches = [(self.expr(node.test), self.block(node.body))]
        orelse = node.orelse
        while len(orelse) == 1 and isinstance(orelse[0], ast.If):
            elif_node = orelse[0]
            branches.append((self.expr(elif_node.test), self.block(elif_node.body)))
            orelse = elif_node.orelse
        return S.If(branches, self.block(orelse))

    def stmt_For(self, node: ast.For) -> S.Node:
        if node.orelse:
            raise self.unsupported(node, "for/else")
        return S.For(self.target(node.target), self.expr(node.iter), self.block(node.body))

    def stmt_FunctionDef(self, node: ast.FunctionDef) -> S.Node:
        if node.decorator_list:
            raise self.unsupported(node, "decorators")
        if node.returns is not None:
            raise self.unsupported(node, "annotations")
        if getattr(node, "type_params", None):
            raise self.unsupported(node, "type parameters")
        return S.Def(node.name, self.params(node.args, node), self.block(node.body))

    def stmt_Return(self, node: ast.Return) -> S.Node:
        return S.Return(None if node.value is None else self.expr(node.value))

    def stmt_Break(self, node: ast.Break) -> S.Node:
        return S.Break()

    def stmt_Continue(self, node: ast.Continue) -> S.Node:
        return S.Continue()

    def stmt_Pass(self, node: ast.Pass) -> S.Node:
        return S.Pass()

    def load(self, call: ast.Call) -> S.Node:
        if not call.args or not _is_str_constant(call.args[0]):
            raise self.unsupported(call, "load() without a module string")
        module = call.args[0].value
        symbols: list[tuple[str, str]] = []
        for arg in call.args[1:]:
            if not _is_str_constant(arg):
                raise self.unsupported(arg, "load() symbol that is not a string literal")
            symbols.append((arg.value, arg.value))
        for kw in call.keywords:
            if kw.arg is None or not _is_str_constant(kw.value):
                raise self.unsupported(kw, "load() alias that is not a string literal")
            symbols.append((kw.arg, kw.value.value))
        if not symbols:
            raise self.unsupported(call, "load() without symbols")
        return S.Load(module, symbols)

    def params(self, args: ast.arguments, owner: ast.AST) -> list[S.Parameter]:
        if args.posonlyargs:
            raise self.unsupported(owner, "positional-only parameters")
        if args.kwonlyargs:
            raise self.unsupported(owner, "keyword-only parameters")
        out: list[S.Parameter] = []
        first_default = len(args.args) - len(args.defaults)
        for index, arg in enumerate(args.args):
            if arg.annotation is not None:
                raise self.unsupported(arg, "annotations")
            default = None
            if index >= first_default:
                default = self.expr(args.defaults[index - first_default])
            out.append(S.Parameter(arg.arg, S.ParameterKind.NORMAL, default))
        if args.vararg is not None:
            out.append(S.Parameter(args.vararg.arg, S.ParameterKind.VARARGS))
        if args.kwarg is not None:
            out.append(S.Parameter(args.kwarg.arg, S.ParameterKind.KWARGS))
        return out

    # ----- assignment targets -----

    def target(self, node: ast.expr) -> S.Node:
        if isinstance(node, ast.Name):
            return S.Identifier(node.id)
        if isinstance(node, (ast.Tuple, ast.List)):
            items = []
            for elt in node.elts:
                if isinstance(elt, ast.Starred):
                    raise self.unsupported(elt, "starred assignment")
                items.append(self.target(elt))
            return S.TupleExpr(items) if isinstance(node, ast.Tuple) else S.ListExpr(items)
        if isinstance(node, ast.Subscript):
            if isinstance(node.slice, ast.Slice):
                raise self.unsupported(node, "slice assignment")
            return S.Index(self.expr(node.value), self.expr(node.slice))
        raise self.unsupported(node, f"assignment to {node.__class__.__name__}")

    # ----- expressions -----

    def expr(self, node: ast.expr) -> S.Node:
        m = getattr(self, f"expr_{node.__class__.__name__}", None)
        if m is None:
            raise self.unsupported(node, f"expression {node.__class__.__name__!r}")
        return m(node)

    def expr_Constant(self, node: ast.Constant) -> S.Node:
        value = node.value
        if value is None or isinstance(value, (bool, float, str, bytes)):
            return S.Literal(value)
        if type(value) is int:
            return S.Literal(_check_int_literal(value))
        raise self.unsupported(node, f"literal of type {type(value).__name__}")

    def expr_Name(self, node: ast.Name) -> S.Node:
        return S.Identifier(node.id)

    def expr_UnaryOp(self, node: ast.UnaryOp) -> S.Node:
        op = _UNARY_OPS[type(node.op)]
        operand = node.operand
        if op == "-" and isinstance(operand, ast.Constant) and type(operand.value) is int:
            # fold so that the most negative 64-bit literal is expressible
            return S.Literal(_check_int_literal(-operand.value))
        return S.Unary(op, self.expr(operand))

    def expr_BinOp(self, node: ast.BinOp) -> S.Node:
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise self.unsupported(node, f"operator {node.op.__class__.__name__!r}")
        return S.Binary(op, self.expr(node.left), self.expr(node.right))

    def expr_BoolOp(self, node: ast.BoolOp) -> S.Node:
        op = "and" if isinstance(node.op, ast.And) else "or"
        result = self.expr(node.values[0])
        for value in node.values[1:]:
            result = S.Binary(op, result, self.expr(value))
        return result

    def expr_Compare(self, node: ast.Compare) -> S.Node:
        if len(node.ops) != 1:
            raise self.unsupported(node, "chained comparison")
        op = _COMPARE_OPS.get(type(node.ops[0]))
        if op is None:
            raise self.unsupported(node, f"operator {node.ops[0].__class__.__name__!r}")
        return S.Binary(op, self.expr(node.left), self.expr(node.comparators[0]))

    def expr_IfExp(self, node: ast.IfExp) -> S.Node:
        return S.Conditional(self.expr(node.test), self.expr(node.body), self.expr(node.orelse))

    def expr_Call(self, node: ast.Call) -> S.Node:
        if _is_load_call(node):
            raise self.unsupported(node, "load() as an expression")
        positioned: list[tuple[tuple[int, int], S.Argument]] = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                argument = S.Argument(S.ArgumentKind.STAR, self.expr(arg.value))
            else:
                argument = S.Argument(S.ArgumentKind.POSITIONAL, self.expr(arg))
            positioned.append((_position(arg), argument))
        for kw in node.keywords:
            if kw.arg is None:
                argument = S.Argument(S.ArgumentKind.STAR_STAR, self.expr(kw.value))
            else:
                argument = S.Argument(S.ArgumentKind.KEYWORD, self.expr(kw.value), kw.arg)
            positioned.append((_position(kw), argument))
        # host ast splits positional and keyword arguments; restore source order
        positioned.sort(key=lambda item: item[0])
        return S.Call(self.expr(node.func), [argument for _, argument in positioned])

    def expr_List(self, node: ast.List) -> S.Node:
        return S.ListExpr(self._items(node.elts))

    def expr_Tuple(self, node: ast.Tuple) -> S.Node:
        return S.TupleExpr(self._items(node.elts))

    def _items(self, elts: list[ast.expr]) -> list[S.Node]:
        items = []
        for elt in elts:
            if isinstance(elt, ast.Starred):
                raise self.unsupported(elt, "starred expression")
            items.append(self.expr(elt))
        return items

    def expr_Dict(self, node: ast.Dict) -> S.Node:
        entries = []
        for key, value in zip(node.keys, node.values):
            if key is None:
                raise self.unsupported(value, "dict unpacking")
            entries.append(S.DictEntry(self.expr(key), self.expr(value)))
        return S.DictExpr(entries)

    def expr_ListComp(self, node: ast.ListComp) -> S.Node:
        return S.ListComp(self.expr(node.elt), self._clauses(node.generators))

    def expr_DictComp(self, node: ast.DictComp) -> S.Node:
        return S.DictComp(
            self.expr(node.key), self.expr(node.value), self._clauses(node.generators)
        )

    def _clauses(self, generators: list[ast.comprehension]) -> list[S.Clause]:
        clauses: list[S.Clause] = []
        for gen in generators:
            if gen.is_async:
                raise self.unsupported(gen.iter, "async comprehension")
            clauses.append(S.ForClause(self.target(gen.target), self.expr(gen.iter)))
            clauses.extend(S.IfClause(self.expr(cond)) for cond in gen.ifs)
        return clauses

    def expr_Subscript(self, node: ast.Subscript) -> S.Node:
        if isinstance(node.slice, ast.Slice):
            index: S.Node = S.Slice(
                self._optional(node.slice.lower),
                self._optional(node.slice.upper),
                self._optional(node.slice.step),
            )
        else:
            index = self.expr(node.slice)
        return S.Index(self.expr(node.value), index)

    def _optional(self, node: Optional[ast.expr]) -> Optional[S.Node]:
        return None if node is None else self.expr(node)

    def expr_Attribute(self, node: ast.Attribute) -> S.Node:
        return S.Attribute(self.expr(node.value), node.attr)

    def expr_Lambda(self, node: ast.Lambda) -> S.Node:
        return S.Lambda(self.params(node.args, node), self.expr(node.body))


def _position(node: Any) -> tuple[int, int]:
    return (getattr(node, "lineno", 0), getattr(node, "col_offset", 0))


def _is_load_call(node: ast.AST) -> bool:
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id == "load"
    )


def _is_str_constant(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and type(node.value) is str


def _check_int_literal(value: int) -> int:
    if value < INT64_MIN or value > INT64_MAX:
        raise invalid_literal(f"integer literal {value} does not fit in 64 bits")
    return value
