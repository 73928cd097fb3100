from .builtins import make_builtins
from .guards import ExecutionGuard, ExecutionOptions
from .methods import lookup_method

__all__ = [
    "ExecutionGuard",
    "ExecutionOptions",
    "lookup_method",
    "make_builtins",
]
