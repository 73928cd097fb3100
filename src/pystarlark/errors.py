from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    TYPE_MISMATCH = "TypeMismatch"
    UNDEFINED_NAME = "UndefinedName"
    UNDEFINED_MODULE_OR_SYMBOL = "UndefinedModuleOrSymbol"
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"
    UNHASHABLE_TYPE = "UnhashableType"
    ZERO_DIVISION = "ZeroDivision"
    INVALID_ARGUMENT_COUNT = "InvalidArgumentCount"
    INVALID_LITERAL = "InvalidLiteral"
    RECURSION_LIMIT = "RecursionLimit"
    CONTROL_FLOW_MISUSE = "ControlFlowMisuse"
    CANCELLED_OR_BUDGET_EXCEEDED = "CancelledOrBudgetExceeded"
    INTEGER_OVERFLOW = "IntegerOverflow"
    MUTATION_DURING_ITERATION = "MutationDuringIteration"
    FAIL = "Fail"


class StarlarkError(Exception):
    """The single error type surfaced to the host: a kind plus a readable message."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def __repr__(self) -> str:
        return f"StarlarkError({self.kind.value}, {self.message!r})"


def type_mismatch(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.TYPE_MISMATCH, message)


def undefined_name(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.UNDEFINED_NAME, message)


def undefined_module_or_symbol(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.UNDEFINED_MODULE_OR_SYMBOL, message)


def index_out_of_range(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.INDEX_OUT_OF_RANGE, message)


def unhashable_type(type_name: str) -> StarlarkError:
    return StarlarkError(ErrorKind.UNHASHABLE_TYPE, f"unhashable type: '{type_name}'")


def zero_division(message: str = "division by zero") -> StarlarkError:
    return StarlarkError(ErrorKind.ZERO_DIVISION, message)


def invalid_argument_count(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.INVALID_ARGUMENT_COUNT, message)


def invalid_literal(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.INVALID_LITERAL, message)


def recursion_limit(message: str = "maximum recursion") -> StarlarkError:
    return StarlarkError(ErrorKind.RECURSION_LIMIT, message)


def control_flow_misuse(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.CONTROL_FLOW_MISUSE, message)


def cancelled_or_budget_exceeded(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED, message)


def integer_overflow(message: str = "integer overflow") -> StarlarkError:
    return StarlarkError(ErrorKind.INTEGER_OVERFLOW, message)


def mutation_during_iteration(type_name: str) -> StarlarkError:
    return StarlarkError(
        ErrorKind.MUTATION_DURING_ITERATION,
        f"{type_name} was modified during iteration",
    )


def fail(message: str) -> StarlarkError:
    return StarlarkError(ErrorKind.FAIL, message)
