from .core import ExecutionResult
from .errors import ErrorKind, StarlarkError
from .functions import BoundMethod, NativeFunction, UserFunction
from .lib import ExecutionGuard, ExecutionOptions
from .main import Interpreter
from .scopes import Environment
from .values import (
    BytesElems,
    Range,
    StarlarkDict,
    StarlarkList,
    StarlarkSet,
    StringElems,
    is_truthy,
    to_python,
    type_name,
)

__all__ = [
    "BoundMethod",
    "BytesElems",
    "Environment",
    "ErrorKind",
    "ExecutionGuard",
    "ExecutionOptions",
    "ExecutionResult",
    "Interpreter",
    "NativeFunction",
    "Range",
    "StarlarkDict",
    "StarlarkError",
    "StarlarkList",
    "StarlarkSet",
    "StringElems",
    "UserFunction",
    "is_truthy",
    "to_python",
    "type_name",
]
