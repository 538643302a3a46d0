from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

One record is written per failed run. ``file`` is ``"<RUN_LEVEL>"`` when the
failure was not tied to a specific source file (config, scan, write).
"""

__all__ = [
    "ErrorRecord",
    "RUN_LEVEL",
]

RUN_LEVEL = "<RUN_LEVEL>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        phase: Run phase that failed (RunPhase value)
        file: Source file identifier, or RUN_LEVEL
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable error description
    """
    timestamp: str  # ISO8601 UTC
    phase: str
    file: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(phase: str, file: str | None, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            phase=phase,
            file=file or RUN_LEVEL,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
