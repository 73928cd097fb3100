from __future__ import annotations

import logging
from typing import Any, Optional

from pystarlark.errors import cancelled_or_budget_exceeded

logger = logging.getLogger(__name__)


class ExecutionOptions:
    """
    Per-run limits:
      - step_budget=None -> unlimited
      - step_budget=N    -> at most N guard checks (statements + comprehension iterations)
      - cancel_event     -> anything with `is_set()`, e.g. a `threading.Event`
    """

    __slots__ = ("step_budget", "cancel_event")

    def __init__(self, step_budget: Optional[int] = None, cancel_event: Any = None):
        if step_budget is not None:
            if type(step_budget) is not int or step_budget < 0:
                raise ValueError("step_budget must be a non-negative int or None")
        self.step_budget = step_budget
        self.cancel_event = cancel_event

    def __repr__(self) -> str:
        return f"ExecutionOptions(step_budget={self.step_budget!r}, cancel_event={self.cancel_event!r})"


class ExecutionGuard:
    """Cooperative cancellation and step accounting for a single run."""

    __slots__ = ("remaining", "cancel_event", "steps")

    def __init__(self, options: Optional[ExecutionOptions] = None):
        options = options or ExecutionOptions()
        self.remaining = options.step_budget
        self.cancel_event = options.cancel_event
        self.steps = 0

    def check(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.debug("execution cancelled after %d steps", self.steps)
            raise cancelled_or_budget_exceeded("Execution cancelled.")
        if self.remaining is not None:
            if self.remaining <= 0:
                logger.debug("step budget exhausted after %d steps", self.steps)
                raise cancelled_or_budget_exceeded("Execution step budget exceeded.")
            self.remaining -= 1
        self.steps += 1
