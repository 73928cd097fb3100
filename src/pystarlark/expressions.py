from __future__ import annotations

from typing import Any, Callable, Dict

from pystarlark.lib import lookup_method

from . import syntax as S
from .errors import invalid_argument_count, type_mismatch, undefined_name
from .functions import call
from .helpers import get_index, slice_value
from .operators import binary, unary
from .scopes import Environment
from .values import StarlarkDict, StarlarkList, is_truthy, iterate, type_name

_ARGUMENT_ORDER_ERRORS = {
    S.ArgumentKind.POSITIONAL: "positional argument may not follow keyword, *args or **kwargs",
    S.ArgumentKind.KEYWORD: "keyword argument may not follow *args or **kwargs",
    S.ArgumentKind.STAR: "*args may not follow **kwargs or another *args",
    S.ArgumentKind.STAR_STAR: "multiple **kwargs arguments",
}


class ExpressionMixin:
    def eval_Literal(self, node: S.Literal, env: Environment) -> Any:
        return node.value

    def eval_Identifier(self, node: S.Identifier, env: Environment) -> Any:
        return env.load(node.name)

    def eval_Unary(self, node: S.Unary, env: Environment) -> Any:
        return unary(node.op, self.eval_expr(node.operand, env))

    def eval_Binary(self, node: S.Binary, env: Environment) -> Any:
        left = self.eval_expr(node.left, env)
        if node.op == "and":
            return self.eval_expr(node.right, env) if is_truthy(left) else left
        if node.op == "or":
            return left if is_truthy(left) else self.eval_expr(node.right, env)
        right = self.eval_expr(node.right, env)
        return binary(node.op, left, right)

    def eval_Conditional(self, node: S.Conditional, env: Environment) -> Any:
        if is_truthy(self.eval_expr(node.condition, env)):
            return self.eval_expr(node.then_expr, env)
        return self.eval_expr(node.else_expr, env)

    # ----- calls -----

    def eval_Call(self, node: S.Call, env: Environment) -> Any:
        fn = self.eval_expr(node.callee, env)
        args: list = []
        kwargs: Dict[str, Any] = {}
        stage = S.ArgumentKind.POSITIONAL.value
        seen_starred = set()
        for argument in node.arguments:
            if argument.kind.value < stage or argument.kind in seen_starred:
                raise invalid_argument_count(_ARGUMENT_ORDER_ERRORS[argument.kind])
            stage = argument.kind.value
            if argument.kind in (S.ArgumentKind.STAR, S.ArgumentKind.STAR_STAR):
                seen_starred.add(argument.kind)

            value = self.eval_expr(argument.value, env)
            if argument.kind is S.ArgumentKind.POSITIONAL:
                args.append(value)
            elif argument.kind is S.ArgumentKind.KEYWORD:
                _add_keyword(kwargs, argument.name, value)
            elif argument.kind is S.ArgumentKind.STAR:
                args.extend(iterate(value))
            else:
                if not isinstance(value, StarlarkDict):
                    raise type_mismatch(f"argument after ** must be a dict, not {type_name(value)}")
                for key, item in value.items():
                    if type(key) is not str:
                        raise type_mismatch(f"keywords must be strings, not {type_name(key)}")
                    _add_keyword(kwargs, key, item)
        return call(fn, args, kwargs)

    # ----- literals -----

    def eval_ListExpr(self, node: S.ListExpr, env: Environment) -> Any:
        return StarlarkList([self.eval_expr(item, env) for item in node.items])

    def eval_TupleExpr(self, node: S.TupleExpr, env: Environment) -> Any:
        return tuple(self.eval_expr(item, env) for item in node.items)

    def eval_DictExpr(self, node: S.DictExpr, env: Environment) -> Any:
        out = StarlarkDict()
        for entry in node.entries:
            key = self.eval_expr(entry.key, env)
            out.set(key, self.eval_expr(entry.value, env))
        return out

    # ----- comprehensions -----

    def eval_ListComp(self, node: S.ListComp, env: Environment) -> Any:
        out = StarlarkList()
        scope = env.create_child()
        self._run_clauses(
            node.clauses, 0, scope, lambda: out.items.append(self.eval_expr(node.body, scope))
        )
        return out

    def eval_DictComp(self, node: S.DictComp, env: Environment) -> Any:
        out = StarlarkDict()
        scope = env.create_child()

        def emit() -> None:
            key = self.eval_expr(node.key, scope)
            out.set(key, self.eval_expr(node.value, scope))

        self._run_clauses(node.clauses, 0, scope, emit)
        return out

    def _run_clauses(
        self, clauses: list[S.Clause], index: int, scope: Environment, emit: Callable[[], None]
    ) -> None:
        if index == len(clauses):
            emit()
            return
        clause = clauses[index]
        if isinstance(clause, S.ForClause):
            for item in iterate(self.eval_expr(clause.iterable, scope)):
                scope.check_guard()
                self.assign_target(clause.target, item, scope)
                self._run_clauses(clauses, index + 1, scope, emit)
        elif is_truthy(self.eval_expr(clause.condition, scope)):
            self._run_clauses(clauses, index + 1, scope, emit)

    # ----- access -----

    def eval_Index(self, node: S.Index, env: Environment) -> Any:
        target = self.eval_expr(node.target, env)
        if isinstance(node.index, S.Slice):
            bounds = [
                None if part is None else self.eval_expr(part, env)
                for part in (node.index.start, node.index.stop, node.index.step)
            ]
            return slice_value(target, *bounds)
        return get_index(target, self.eval_expr(node.index, env))

    def eval_Attribute(self, node: S.Attribute, env: Environment) -> Any:
        receiver = self.eval_expr(node.target, env)
        method = lookup_method(receiver, node.name)
        if method is None:
            raise undefined_name(f"{type_name(receiver)} has no .{node.name} field or method")
        return method

    def eval_Lambda(self, node: S.Lambda, env: Environment) -> Any:
        return self.make_function("lambda", node.params, node.body, env, is_lambda=True)


def _add_keyword(kwargs: Dict[str, Any], name: str, value: Any) -> None:
    if name in kwargs:
        raise type_mismatch(f"got multiple values for keyword argument '{name}'")
    kwargs[name] = value
