from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from .errors import type_mismatch
from .values import type_name

if TYPE_CHECKING:
    from .main import Interpreter
    from .scopes import Environment
    from .syntax import Node

NativeImpl = Callable[[list, Dict[str, Any]], Any]
MethodImpl = Callable[[Any, list, Dict[str, Any]], Any]


class NativeFunction:
    """A host-registered builtin: `impl(args, kwargs) -> value`."""

    type_name = "builtin_function_or_method"
    __slots__ = ("name", "impl")

    def __init__(self, name: str, impl: NativeImpl):
        self.name = name
        self.impl = impl

    def __repr__(self) -> str:
        return f"<NativeFunction {self.name}>"

    def call(self, args: list, kwargs: Dict[str, Any]) -> Any:
        return self.impl(args, kwargs)


class BoundMethod:
    """A method implementation bound to its receiver by attribute access."""

    type_name = "builtin_function_or_method"
    __slots__ = ("name", "receiver", "impl")

    def __init__(self, name: str, receiver: Any, impl: MethodImpl):
        self.name = name
        self.receiver = receiver
        self.impl = impl

    def __repr__(self) -> str:
        return f"<BoundMethod {self.name}>"

    def call(self, args: list, kwargs: Dict[str, Any]) -> Any:
        return self.impl(self.receiver, args, kwargs)


class UserFunction:
    """
    A function defined by `def` or `lambda` in interpreted code.

    Defaults are values computed once when the definition executed; `env` is the
    defining environment the body closes over. `body` is the statement list
    (or, for a lambda, the single expression) and its identity is what the
    recursion guard tracks.
    """

    type_name = "function"
    __slots__ = (
        "interpreter",
        "name",
        "params",
        "defaults",
        "varargs",
        "kwargs",
        "body",
        "env",
        "is_lambda",
    )

    def __init__(
        self,
        interpreter: "Interpreter",
        name: str,
        params: list[str],
        defaults: list[Any],
        varargs: Optional[str],
        kwargs: Optional[str],
        body: "Node | list[Node]",
        env: "Environment",
        is_lambda: bool = False,
    ):
        self.interpreter = interpreter
        self.name = name
        self.params = list(params)
        self.defaults = list(defaults)
        self.varargs = varargs
        self.kwargs = kwargs
        self.body = body
        self.env = env
        self.is_lambda = is_lambda

    def __repr__(self) -> str:
        return f"<UserFunction {self.name}>"

    def call(self, args: list, kwargs: Dict[str, Any]) -> Any:
        return self.interpreter.call_user_function(self, args, kwargs)


CALLABLE_TYPES = (NativeFunction, BoundMethod, UserFunction)


def call(fn: Any, args: list, kwargs: Dict[str, Any]) -> Any:
    if not isinstance(fn, CALLABLE_TYPES):
        raise type_mismatch(f"invalid call of non-function ({type_name(fn)})")
    return fn.call(args, kwargs)
