from __future__ import annotations

import logging
from typing import Any

from . import syntax as S
from .common import BREAK, CONTINUE, NORMAL, Flow, Outcome, normal, returning
from .helpers import get_index, set_index
from .operators import binary
from .scopes import Environment
from .values import StarlarkList, is_truthy, iterate

logger = logging.getLogger(__name__)


class StatementMixin:
    def exec_ExprStmt(self, node: S.ExprStmt, env: Environment) -> Outcome:
        return normal(self.eval_expr(node.expr, env))

    def exec_Pass(self, node: S.Pass, env: Environment) -> Outcome:
        return NORMAL

    # ----- assignment -----

    def exec_Assign(self, node: S.Assign, env: Environment) -> Outcome:
        value = self.eval_expr(node.value, env)
        self.assign_target(node.target, value, env)
        return NORMAL

    def exec_AugAssign(self, node: S.AugAssign, env: Environment) -> Outcome:
        target = node.target
        if isinstance(target, S.Index):
            # container and key are evaluated exactly once
            container = self.eval_expr(target.target, env)
            key = self.eval_expr(target.index, env)
            current = get_index(container, key)
            set_index(container, key, self._augmented(node.op, current, node.value, env))
            return NORMAL
        current = self.eval_expr(target, env)
        env.store(target.name, self._augmented(node.op, current, node.value, env))
        return NORMAL

    def _augmented(self, op: str, current: Any, value_node: S.Node, env: Environment) -> Any:
        value = self.eval_expr(value_node, env)
        if op == "+" and type(current) is StarlarkList:
            # in place, visible through every alias
            current.extend(iterate(value))
            return current
        return binary(op, current, value)

    # ----- control flow -----

    def exec_If(self, node: S.If, env: Environment) -> Outcome:
        for condition, body in node.branches:
            if is_truthy(self.eval_expr(condition, env)):
                return self.exec_block(body, env)
        return self.exec_block(node.else_body, env)

    def exec_For(self, node: S.For, env: Environment) -> Outcome:
        iterable = self.eval_expr(node.iterable, env)
        for item in iterate(iterable):
            self.assign_target(node.target, item, env)
            outcome = self.exec_block(node.body, env)
            if outcome.flow is Flow.BREAK:
                break
            if outcome.flow is Flow.RETURN:
                return outcome
        return NORMAL

    def exec_Return(self, node: S.Return, env: Environment) -> Outcome:
        if node.value is None:
            return returning(None)
        return returning(self.eval_expr(node.value, env))

    def exec_Break(self, node: S.Break, env: Environment) -> Outcome:
        return BREAK

    def exec_Continue(self, node: S.Continue, env: Environment) -> Outcome:
        return CONTINUE

    # ----- definitions -----

    def exec_Def(self, node: S.Def, env: Environment) -> Outcome:
        env.store(node.name, self.make_function(node.name, node.params, node.body, env))
        return NORMAL

    def exec_Load(self, node: S.Load, env: Environment) -> Outcome:
        for local, exported in node.symbols:
            value = env.resolve_symbol(node.module, exported)
            logger.debug("load %r: %s as %s", node.module, exported, local)
            env.store(local, value)
        return NORMAL
