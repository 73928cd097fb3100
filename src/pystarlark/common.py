from __future__ import annotations

import enum
from typing import Any

MISSING = object()


class Flow(enum.Enum):
    NORMAL = "normal"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"


class Outcome:
    """Result of executing a statement: normal completion or a control-flow signal."""

    __slots__ = ("flow", "value")

    def __init__(self, flow: Flow, value: Any = None):
        self.flow = flow
        self.value = value

    @property
    def is_normal(self) -> bool:
        return self.flow is Flow.NORMAL

    def __repr__(self) -> str:
        if self.flow in (Flow.NORMAL, Flow.RETURN):
            return f"<Outcome {self.flow.value} {self.value!r}>"
        return f"<Outcome {self.flow.value}>"


NORMAL = Outcome(Flow.NORMAL)
BREAK = Outcome(Flow.BREAK)
CONTINUE = Outcome(Flow.CONTINUE)


def normal(value: Any) -> Outcome:
    return Outcome(Flow.NORMAL, value)


def returning(value: Any) -> Outcome:
    return Outcome(Flow.RETURN, value)
