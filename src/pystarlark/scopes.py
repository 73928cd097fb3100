from __future__ import annotations

import contextlib
from typing import Any, Dict, Iterator, Mapping, Optional

from .common import MISSING
from .errors import recursion_limit, undefined_module_or_symbol, undefined_name


class _RootState:
    """State owned by a root environment and shared by all of its children."""

    __slots__ = ("builtins", "modules", "call_stack", "guard")

    def __init__(self, builtins_dict: Dict[str, Any]):
        self.builtins = builtins_dict
        self.modules: Dict[str, Dict[str, Any]] = {}
        self.call_stack: list[int] = []
        self.guard: Any = None


class Environment:
    """
    A lexical scope.

    The root environment's bindings are the module globals. Children (one per
    function call or comprehension) own private bindings and reach the root's
    builtins, module table and call stack through the shared root state.
    """

    def __init__(
        self,
        parent: Optional["Environment"] = None,
        *,
        builtins_dict: Optional[Dict[str, Any]] = None,
    ):
        self.parent = parent
        self.bindings: Dict[str, Any] = {}
        if parent is None:
            self._root = _RootState({} if builtins_dict is None else builtins_dict)
        else:
            self._root = parent._root

    def __repr__(self) -> str:
        kind = "root" if self.parent is None else "child"
        return f"<Environment {kind} names={sorted(self.bindings)!r}>"

    # ----- shared root state -----

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def globals(self) -> Dict[str, Any]:
        env = self
        while env.parent is not None:
            env = env.parent
        return env.bindings

    @property
    def builtins(self) -> Dict[str, Any]:
        return self._root.builtins

    @property
    def modules(self) -> Dict[str, Dict[str, Any]]:
        return self._root.modules

    @property
    def guard(self) -> Any:
        return self._root.guard

    @contextlib.contextmanager
    def guarded_by(self, guard: Any) -> Iterator[None]:
        previous = self._root.guard
        self._root.guard = guard
        try:
            yield
        finally:
            self._root.guard = previous

    def check_guard(self) -> None:
        guard = self._root.guard
        if guard is not None:
            guard.check()

    # ----- name resolution -----

    def try_get(self, name: str) -> tuple[Any, bool]:
        env: Optional[Environment] = self
        while env is not None:
            value = env.bindings.get(name, MISSING)
            if value is not MISSING:
                return value, True
            env = env.parent
        value = self._root.builtins.get(name, MISSING)
        if value is not MISSING:
            return value, True
        return None, False

    def load(self, name: str) -> Any:
        value, found = self.try_get(name)
        if not found:
            raise undefined_name(f"undefined: {name}")
        return value

    def store(self, name: str, value: Any) -> Any:
        self.bindings[name] = value
        return value

    def create_child(self) -> "Environment":
        return Environment(self)

    # ----- modules -----

    def add_module(self, name: str, table: Mapping[str, Any]) -> None:
        self._root.modules[name] = dict(table)

    def resolve_symbol(self, module: str, symbol: str) -> Any:
        table = self._root.modules.get(module)
        if table is None:
            raise undefined_module_or_symbol(f"cannot load {module!r}: module not found")
        if symbol not in table:
            raise undefined_module_or_symbol(
                f"cannot load {module!r}: symbol {symbol!r} not found"
            )
        return table[symbol]

    # ----- recursion guard -----

    @contextlib.contextmanager
    def enter_call(self, body: Any, name: str) -> Iterator[None]:
        marker = id(body)
        stack = self._root.call_stack
        if marker in stack:
            raise recursion_limit(f"function {name} called recursively")
        stack.append(marker)
        try:
            yield
        finally:
            stack.pop()
