from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""ImportStatus model: the record an out-of-process poller reads."""

__all__ = [
    "ImportStatus",
]


@dataclass(frozen=True)
class ImportStatus:
    message: str
    done: bool = False

    def to_json(self) -> str:
        """Serialize as a single JSON value (written under one key)."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @staticmethod
    def from_json(raw: str) -> ImportStatus:
        """Parse a stored value.

        Raises:
            ValueError: If ``raw`` is not a JSON object with a string ``message``
        """
        data = json.loads(raw)
        if not isinstance(data, dict) or not isinstance(data.get("message"), str):
            raise ValueError(f"not an ImportStatus record: {raw!r}")
        return ImportStatus(message=data["message"], done=bool(data.get("done", False)))
