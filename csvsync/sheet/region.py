from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .store import SheetStore

"""Managed region snapshot.

The region starts at the configured row and ends at the sheet's last
populated row. Nothing above ``start_row`` is ever read or written.
"""

__all__ = [
    "ManagedRegion",
    "read_region",
]


@dataclass(frozen=True)
class ManagedRegion:
    start_row: int  # First managed row (1-based)
    row_count: int  # Rows present at snapshot time (blank ones included)
    col_count: int  # Width read at snapshot time (sheet's last column)
    # Raw region content, blank rows included; what a failed write restores
    rows: list[list[Any]] = field(default_factory=list, repr=False, compare=False)

    @property
    def end_row(self) -> int:
        return self.start_row + self.row_count - 1


def _is_blank(row: list[Any]) -> bool:
    return all(v is None or v == "" for v in row)


def read_region(store: SheetStore, start_row: int) -> tuple[ManagedRegion, list[list[Any]]]:
    """Read the managed region once.

    Returns:
        The region (geometry plus the raw rows) and its non-blank rows, in
        sheet order. Fully blank rows are dropped from the second value only;
        the region still covers them so a later clear removes them too.
    """
    if start_row < 1:
        raise ValueError(f"start_row must be >= 1, got {start_row}")
    last_row = store.last_row()
    col_count = store.last_col()
    if last_row < start_row or col_count == 0:
        return ManagedRegion(start_row=start_row, row_count=0, col_count=col_count), []
    raw = store.get_region(start_row, col_count)
    region = ManagedRegion(
        start_row=start_row,
        row_count=len(raw),
        col_count=col_count,
        rows=[list(r) for r in raw],
    )
    return region, [list(r) for r in raw if not _is_blank(r)]
