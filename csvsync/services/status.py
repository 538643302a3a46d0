from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from ..models.import_status import ImportStatus
from ..models.run_phase import RunPhase

"""Status reporting for out-of-process pollers.

The status record is the only state shared across invocations. It lives under
a single key of a key-value store and is always overwritten as one value,
never patched field by field.
"""

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "ProgressSink",
    "StatusReporter",
    "phase_message",
]

logger = logging.getLogger(__name__)

PHASE_MESSAGES = {
    RunPhase.INIT: "Starting import...",
    RunPhase.SCANNING: "Scanning folder {root}...",
    RunPhase.DELETION_CHECK: "Checking for removed files...",
    RunPhase.READING: "Reading file {index}/{total}: {file}",
    RunPhase.WRITING: "Writing {rows} row(s) to sheet...",
}


def phase_message(phase: RunPhase, **fields: object) -> str:
    """Progress message for a non-terminal phase."""
    return PHASE_MESSAGES[phase].format(**fields)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class ProgressSink(Protocol):
    """The one capability the engine needs: report progress."""

    def report(self, message: str, done: bool = False) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.history: list[tuple[str, str | None]] = []  # (key, value or None on delete)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.history.append((key, value))

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
        self.history.append((key, None))


class JsonFileKeyValueStore:
    """Key-value store persisted as one JSON object in a file.

    Every mutation rewrites the file through a temporary file and
    ``os.replace``, so a reader never observes a partial write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("status store %s unreadable, starting empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class StatusReporter:
    """Writes and reads the ImportStatus record under ``key``."""

    def __init__(self, store: KeyValueStore, key: str = "csvsync_status") -> None:
        self.store = store
        self.key = key

    def report(self, message: str, done: bool = False) -> None:
        logger.debug("status done=%s message=%s", done, message)
        self.store.set(self.key, ImportStatus(message=message, done=done).to_json())

    def read(self) -> ImportStatus | None:
        """Latest status, or None when absent, cleared or unreadable."""
        raw = self.store.get(self.key)
        if raw is None:
            return None
        try:
            return ImportStatus.from_json(raw)
        except ValueError:
            logger.warning("ignoring malformed status record under %s", self.key)
            return None

    def clear(self) -> None:
        self.store.delete(self.key)
