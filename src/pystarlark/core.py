from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Dict, Mapping, Optional

from pystarlark.lib import ExecutionGuard, ExecutionOptions, make_builtins

from . import syntax as S
from .code import ModuleCode
from .common import NORMAL, Flow, Outcome
from .errors import StarlarkError, control_flow_misuse, recursion_limit
from .functions import CALLABLE_TYPES, NativeFunction
from .scopes import Environment
from .values import StarlarkDict, StarlarkList, StarlarkSet

logger = logging.getLogger(__name__)

_MISUSE_AT_TOP_LEVEL = {
    Flow.RETURN: "return statement outside function",
    Flow.BREAK: "break statement outside loop",
    Flow.CONTINUE: "continue statement outside loop",
}


class ExecutionResult:
    """Outcome of `Interpreter.run`: the module globals plus the first error, if any."""

    __slots__ = ("globals", "value", "exception")

    def __init__(
        self,
        globals_dict: Dict[str, Any],
        value: Any = None,
        exception: Optional[StarlarkError] = None,
    ):
        self.globals = globals_dict
        self.value = value
        self.exception = exception

    def __repr__(self) -> str:
        state = "ok" if self.exception is None else f"error={self.exception!r}"
        return f"<ExecutionResult {state}>"

    @property
    def ok(self) -> bool:
        return self.exception is None

    def raise_for_exception(self) -> None:
        if self.exception is not None:
            raise self.exception


class InterpreterCore:
    # ----- environments -----

    def make_default_env(
        self,
        *,
        predeclared: Optional[Mapping[str, Any]] = None,
        modules: Optional[Mapping[str, Mapping[str, Any]]] = None,
        print_fn: Optional[Callable[[str], None]] = None,
    ) -> Environment:
        """
        predeclared:
          - extra names visible to every script (host functions are wrapped as builtins)
        modules:
          - {"module name": {"exported name": value}} consumed by `load`
        print_fn:
          - receives the text of each `print(...)` call (default: standard output)
        """
        builtins_dict = make_builtins(print_fn or _default_print)
        for name, value in (predeclared or {}).items():
            builtins_dict[name] = _adapt_host_value(name, value)
        env = Environment(builtins_dict=builtins_dict)
        for module_name, table in (modules or {}).items():
            env.add_module(
                module_name,
                {symbol: _adapt_host_value(symbol, value) for symbol, value in table.items()},
            )
        return env

    # ----- run -----

    def run(
        self,
        source: str,
        env: Environment,
        *,
        filename: str = "<pystarlark>",
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """
        Parse and execute `source` as a module against `env`.

        Errors raised by the script are captured on the result rather than
        propagated; malformed source still raises `SyntaxError`.
        """
        if not isinstance(env, Environment):
            raise TypeError("env must be an Environment")
        logger.debug("run start: %s", filename)
        try:
            code = ModuleCode(source, filename)
            value = self.exec_module(code.module, env, ExecutionGuard(options))
        except StarlarkError as exc:
            logger.debug("run failed: %s: %s", filename, exc)
            return ExecutionResult(env.globals, None, exc)
        except RecursionError:
            exc = recursion_limit("maximum recursion depth exceeded")
            logger.debug("run failed: %s: %s", filename, exc)
            return ExecutionResult(env.globals, None, exc)
        logger.debug("run finished: %s", filename)
        return ExecutionResult(env.globals, value)

    def eval_expression(
        self,
        source: str,
        env: Environment,
        *,
        options: Optional[ExecutionOptions] = None,
    ) -> Any:
        if not isinstance(env, Environment):
            raise TypeError("env must be an Environment")
        expression = ModuleCode(source, "<expr>", mode="eval").expression
        with env.guarded_by(ExecutionGuard(options)):
            try:
                return self.eval_expr(expression, env)
            except RecursionError:
                raise recursion_limit("maximum recursion depth exceeded") from None

    # ----- dispatch -----

    def exec_module(self, module: S.Module, env: Environment, guard: ExecutionGuard) -> Any:
        """Execute an already-built module; returns the last bare expression's value."""
        value = None
        with env.guarded_by(guard):
            for stmt in module.statements:
                outcome = self.exec_stmt(stmt, env)
                if not outcome.is_normal:
                    raise control_flow_misuse(_MISUSE_AT_TOP_LEVEL[outcome.flow])
                value = outcome.value if isinstance(stmt, S.ExprStmt) else None
        return value

    def exec_block(self, stmts: list[S.Node], env: Environment) -> Outcome:
        for stmt in stmts:
            outcome = self.exec_stmt(stmt, env)
            if not outcome.is_normal:
                return outcome
        return NORMAL

    def exec_stmt(self, node: S.Node, env: Environment) -> Outcome:
        env.check_guard()
        m = getattr(self, f"exec_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Statement not supported: {node.__class__.__name__}")
        return m(node, env)

    def eval_expr(self, node: S.Node, env: Environment) -> Any:
        m = getattr(self, f"eval_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Expression not supported: {node.__class__.__name__}")
        return m(node, env)


def _default_print(text: str) -> None:
    sys.stdout.write(text + "\n")


def _adapt_host_value(name: str, value: Any) -> Any:
    """Wrap host callables and convert plain Python containers to runtime values."""
    kind = type(value)
    if kind is list:
        return StarlarkList([_adapt_host_value(name, item) for item in value])
    if kind is tuple:
        return tuple(_adapt_host_value(name, item) for item in value)
    if kind is dict:
        return StarlarkDict(
            (_adapt_host_value(name, key), _adapt_host_value(name, item))
            for key, item in value.items()
        )
    if kind in (set, frozenset):
        return StarlarkSet(_adapt_host_value(name, item) for item in value)
    if callable(value) and not isinstance(value, CALLABLE_TYPES):
        return NativeFunction(name, value)
    return value
