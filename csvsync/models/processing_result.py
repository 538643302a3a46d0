from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .run_phase import RunPhase

"""Result models for one sync run.

ReconciliationResult is what the engine computes; ReconciliationFailure is the
typed failure it returns instead of raising. RunOutcome wraps either one with
the timing data the CLI logs.
"""

__all__ = [
    "Row",
    "ReconciliationResult",
    "ReconciliationFailure",
    "RunOutcome",
]

Row = list[Any]

# OSError -> OS_ERROR, RecordParseError -> RECORD_PARSE_ERROR
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@dataclass(frozen=True)
class ReconciliationResult:
    """Post-run row set and tallies. Derived, never persisted.

    ``new_rows`` may contain marker rows (identifier only) for files that had
    no data rows after the skip; ``imported_row_count`` excludes them.
    """
    surviving_rows: list[Row]
    new_rows: list[Row]
    deleted_file_count: int
    deleted_row_count: int
    imported_file_count: int
    imported_row_count: int = 0

    @property
    def rows(self) -> list[Row]:
        """Merged set: survivors first, then new rows in processing order."""
        return [*self.surviving_rows, *self.new_rows]

    @property
    def changed(self) -> bool:
        """False when the batch writer must not be invoked."""
        return self.deleted_row_count > 0 or len(self.new_rows) > 0


@dataclass(frozen=True)
class ReconciliationFailure:
    """A run aborted in ``phase`` (while processing ``file`` if known)."""
    phase: RunPhase
    cause: BaseException
    file: str | None = None

    @property
    def message(self) -> str:
        where = self.phase.value
        if self.file:
            where += f" (file: {self.file})"
        return f"Import failed during {where}: {self.cause}"

    @property
    def error_type(self) -> str:
        """UPPER_SNAKE classification of the cause, for the error log."""
        return _CAMEL_BOUNDARY.sub("_", type(self.cause).__name__).upper()


@dataclass(frozen=True)
class RunOutcome:
    """Terminal outcome of a run, as reported to the status record."""
    phase: RunPhase  # DONE or FAILED
    message: str
    start_time: datetime
    end_time: datetime
    result: ReconciliationResult | None = None
    failure: ReconciliationFailure | None = None
    written: bool = False  # True when the batch writer ran

    @property
    def succeeded(self) -> bool:
        return self.phase is RunPhase.DONE

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
