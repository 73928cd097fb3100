from __future__ import annotations

from typing import Any, Dict, Optional

from . import syntax as S
from .common import MISSING, Flow
from .errors import (
    control_flow_misuse,
    index_out_of_range,
    invalid_argument_count,
    type_mismatch,
)
from .functions import UserFunction
from .scopes import Environment
from .values import (
    Range,
    StarlarkDict,
    StarlarkList,
    is_int,
    iterate,
    normalize_index,
    type_name,
)


class HelperMixin:
    # ----- functions -----

    def make_function(
        self,
        name: str,
        params: list[S.Parameter],
        body: Any,
        env: Environment,
        *,
        is_lambda: bool = False,
    ) -> UserFunction:
        # defaults are evaluated here, once, in the defining environment
        names: list[str] = []
        defaults: list[Any] = []
        varargs: Optional[str] = None
        kwargs: Optional[str] = None
        for param in params:
            if param.kind is S.ParameterKind.VARARGS:
                varargs = param.name
            elif param.kind is S.ParameterKind.KWARGS:
                kwargs = param.name
            else:
                names.append(param.name)
                defaults.append(
                    MISSING if param.default is None else self.eval_expr(param.default, env)
                )
        return UserFunction(
            self, name, names, defaults, varargs, kwargs, body, env, is_lambda=is_lambda
        )

    def call_user_function(self, fn: UserFunction, args: list, kwargs: Dict[str, Any]) -> Any:
        call_env = fn.env.create_child()
        self._bind_arguments(fn, args, kwargs, call_env.bindings)
        with call_env.enter_call(fn.body, fn.name):
            if fn.is_lambda:
                return self.eval_expr(fn.body, call_env)
            outcome = self.exec_block(fn.body, call_env)
        if outcome.flow is Flow.RETURN:
            return outcome.value
        if outcome.flow is Flow.NORMAL:
            return None
        raise control_flow_misuse(f"{outcome.flow.value} statement outside loop")

    def _bind_arguments(
        self, fn: UserFunction, args: list, kwargs: Dict[str, Any], bindings: Dict[str, Any]
    ) -> None:
        params = fn.params
        if len(args) > len(params) and fn.varargs is None:
            raise invalid_argument_count(
                f"function {fn.name} accepts {len(params)} positional arguments "
                f"({len(args)} given)"
            )
        for name, value in zip(params, args):
            bindings[name] = value
        if fn.varargs is not None:
            bindings[fn.varargs] = tuple(args[len(params) :])

        extra = StarlarkDict() if fn.kwargs is not None else None
        for name, value in kwargs.items():
            if name in params:
                if name in bindings:
                    raise type_mismatch(
                        f"function {fn.name} got multiple values for parameter '{name}'"
                    )
                bindings[name] = value
            elif extra is not None:
                extra.set(name, value)
            else:
                raise type_mismatch(
                    f"function {fn.name} got an unexpected keyword argument '{name}'"
                )

        missing = []
        for name, default in zip(params, fn.defaults):
            if name in bindings:
                continue
            if default is MISSING:
                missing.append(name)
            else:
                bindings[name] = default
        if missing:
            raise invalid_argument_count(
                f"function {fn.name} missing {len(missing)} argument(s): {', '.join(missing)}"
            )
        if extra is not None:
            bindings[fn.kwargs] = extra

    # ----- assignment -----

    def assign_target(self, target: S.Node, value: Any, env: Environment) -> None:
        if isinstance(target, S.Identifier):
            env.store(target.name, value)
            return
        if isinstance(target, S.Index):
            container = self.eval_expr(target.target, env)
            key = self.eval_expr(target.index, env)
            set_index(container, key, value)
            return
        if isinstance(target, (S.TupleExpr, S.ListExpr)):
            items = list(iterate(value))
            want = len(target.items)
            if len(items) > want:
                raise invalid_argument_count(
                    f"too many values to unpack (got {len(items)}, want {want})"
                )
            if len(items) < want:
                raise invalid_argument_count(
                    f"not enough values to unpack (got {len(items)}, want {want})"
                )
            for sub_target, item in zip(target.items, items):
                self.assign_target(sub_target, item, env)
            return
        raise type_mismatch(f"cannot assign to {target.__class__.__name__}")


# ----------------------------
# Indexing and slicing
# ----------------------------


def get_index(container: Any, key: Any) -> Any:
    kind = type(container)
    if kind is StarlarkDict:
        return container.get(key)
    if kind is StarlarkList:
        return container.get(key)
    if kind is tuple:
        return container[normalize_index(key, len(container), "tuple")]
    if kind is str:
        return container[normalize_index(key, len(container), "string")]
    if kind is bytes:
        return container[normalize_index(key, len(container), "bytes")]
    if kind is Range:
        return container.get(key)
    raise type_mismatch(f"unhandled index operation {type_name(container)}[{type_name(key)}]")


def set_index(container: Any, key: Any, value: Any) -> None:
    if type(container) is StarlarkDict:
        container.set(key, value)
    elif type(container) is StarlarkList:
        container.set(key, value)
    else:
        raise type_mismatch(f"{type_name(container)} value does not support item assignment")


def _slice_bound(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if not is_int(value):
        raise type_mismatch(f"slice {what} must be int or None, not {type_name(value)}")
    return value


def slice_indices(length: int, start: Any, stop: Any, step: Any) -> range:
    """Resolve slice operands against a sequence length into the indices to take."""
    step = _slice_bound(step, "step")
    step = 1 if step is None else step
    if step == 0:
        raise index_out_of_range("slice step cannot be zero")
    start = _slice_bound(start, "start")
    stop = _slice_bound(stop, "stop")
    if step > 0:
        start = _clamp(start, 0, length, 0, length)
        stop = _clamp(stop, length, length, 0, length)
    else:
        # -1 stands for "before index 0"
        start = _clamp(start, length - 1, length, -1, length - 1)
        stop = _clamp(stop, -1, length, -1, length - 1)
    return range(start, stop, step)


def _clamp(value: Optional[int], default: int, length: int, low: int, high: int) -> int:
    if value is None:
        return default
    if value < 0:
        value += length
    return min(max(value, low), high)


def slice_value(container: Any, start: Any, stop: Any, step: Any) -> Any:
    kind = type(container)
    if kind is StarlarkList:
        items = container.items
    elif kind in (tuple, str, bytes):
        items = container
    else:
        raise type_mismatch(f"invalid slice operand {type_name(container)}")
    indices = slice_indices(len(items), start, stop, step)
    if kind is str:
        return "".join(items[i] for i in indices)
    if kind is bytes:
        return bytes(items[i] for i in indices)
    picked = [items[i] for i in indices]
    return StarlarkList(picked) if kind is StarlarkList else tuple(picked)
