from __future__ import annotations

import time
from collections.abc import Callable

"""Wall-clock budget for a run.

The budget is a hard ceiling: once exceeded, the next check raises and the
run fails before its single write. Nothing is retried.
"""

__all__ = [
    "DeadlineExceeded",
    "RunDeadline",
]


class DeadlineExceeded(Exception):
    """Raised when a run outlives its time budget."""


class RunDeadline:
    def __init__(self, budget_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.budget_seconds = budget_seconds
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    def check(self) -> None:
        """Raise DeadlineExceeded if the budget is spent."""
        if self.elapsed > self.budget_seconds:
            raise DeadlineExceeded(
                f"time budget of {self.budget_seconds:g}s exceeded after {self.elapsed:.1f}s"
            )
