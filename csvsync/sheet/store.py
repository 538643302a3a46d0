from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

"""Sheet stores: the destination of the sync.

The managed region is addressed by 1-based row numbers. ``WorkbookSheetStore``
edits one worksheet of an ``.xlsx`` workbook through openpyxl: region reads
and writes act on the loaded workbook, and ``save()`` persists it atomically
(temporary file + ``os.replace``), so the clear and the write land together or
not at all. ``InMemorySheetStore`` keeps a plain grid.
"""

__all__ = [
    "InMemorySheetStore",
    "SheetStore",
    "SheetStoreError",
    "WorkbookSheetStore",
]

logger = logging.getLogger(__name__)


class SheetStoreError(Exception):
    """Raised when the target workbook/sheet is missing or cannot be saved."""


class SheetStore(Protocol):
    """Region edits apply to the store's working copy; ``save()`` persists them.

    ``save()`` is all-or-nothing: when it raises, nothing was persisted.
    """

    def last_row(self) -> int: ...

    def last_col(self) -> int: ...

    def get_region(self, start_row: int, col_count: int) -> list[list[Any]]: ...

    def clear_region(self, start_row: int, row_count: int, col_count: int) -> None: ...

    def write_region(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None: ...

    def save(self) -> None: ...


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class WorkbookSheetStore:
    """One worksheet of an ``.xlsx`` workbook.

    Args:
        path: Workbook file (must exist)
        sheet_title: Worksheet title (must exist)
    """

    def __init__(self, path: str | Path, sheet_title: str) -> None:
        from openpyxl import load_workbook

        self.path = Path(path)
        self.sheet_title = sheet_title
        if not self.path.exists():
            raise SheetStoreError(f"Workbook not found: {self.path}")
        try:
            self._wb = load_workbook(self.path)
        except Exception as e:
            raise SheetStoreError(f"Cannot open workbook {self.path}: {e}") from e
        if sheet_title not in self._wb.sheetnames:
            raise SheetStoreError(f"Sheet '{sheet_title}' not found in {self.path.name}")
        self._ws = self._wb[sheet_title]

    def last_row(self) -> int:
        last = 0
        for index, values in enumerate(self._ws.iter_rows(values_only=True), start=1):
            if any(not _is_empty(v) for v in values):
                last = index
        return last

    def last_col(self) -> int:
        last = 0
        for values in self._ws.iter_rows(values_only=True):
            for col in range(len(values), last, -1):
                if not _is_empty(values[col - 1]):
                    last = col
                    break
        return last

    def get_region(self, start_row: int, col_count: int) -> list[list[Any]]:
        end_row = self.last_row()
        if end_row < start_row or col_count < 1:
            return []
        rows: list[list[Any]] = []
        for values in self._ws.iter_rows(
            min_row=start_row, max_row=end_row, min_col=1, max_col=col_count, values_only=True
        ):
            rows.append(["" if v is None else v for v in values])
        return rows

    def clear_region(self, start_row: int, row_count: int, col_count: int) -> None:
        for row in range(start_row, start_row + row_count):
            for col in range(1, col_count + 1):
                self._ws.cell(row=row, column=col).value = None

    def write_region(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        for offset, row in enumerate(rows):
            for col, value in enumerate(row, start=1):
                self._ws.cell(row=start_row + offset, column=col).value = None if value == "" else value

    def save(self) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}-", suffix=self.path.suffix, dir=self.path.parent
        )
        os.close(fd)
        try:
            self._wb.save(tmp_name)
            os.replace(tmp_name, self.path)
        except Exception as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("could not remove temp workbook %s", tmp_name)
            raise SheetStoreError(f"Cannot save workbook {self.path}: {e}") from e


class InMemorySheetStore:
    """Grid-backed sheet store. ``grid[0]`` is row 1."""

    def __init__(self, rows: Sequence[Sequence[Any]] | None = None) -> None:
        self.grid: list[list[Any]] = [list(r) for r in rows or []]
        self.region_reads = 0
        self.operations: list[str] = []  # "clear" / "write" / "save" in call order

    def last_row(self) -> int:
        for index in range(len(self.grid), 0, -1):
            if any(not _is_empty(v) for v in self.grid[index - 1]):
                return index
        return 0

    def last_col(self) -> int:
        last = 0
        for row in self.grid:
            for col in range(len(row), 0, -1):
                if not _is_empty(row[col - 1]):
                    last = max(last, col)
                    break
        return last

    def get_region(self, start_row: int, col_count: int) -> list[list[Any]]:
        self.region_reads += 1
        end_row = self.last_row()
        rows = []
        for index in range(start_row, end_row + 1):
            source = self.grid[index - 1]
            rows.append([source[c] if c < len(source) else "" for c in range(col_count)])
        return rows

    def clear_region(self, start_row: int, row_count: int, col_count: int) -> None:
        self.operations.append("clear")
        for index in range(start_row, min(start_row + row_count, len(self.grid) + 1)):
            row = self.grid[index - 1]
            for c in range(min(col_count, len(row))):
                row[c] = ""

    def write_region(self, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        self.operations.append("write")
        for offset, values in enumerate(rows):
            index = start_row + offset
            while len(self.grid) < index:
                self.grid.append([])
            row = self.grid[index - 1]
            if len(row) < len(values):
                row.extend([""] * (len(values) - len(row)))
            for c, value in enumerate(values):
                row[c] = value

    def save(self) -> None:
        self.operations.append("save")
