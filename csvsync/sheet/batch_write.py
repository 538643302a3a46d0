from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .region import ManagedRegion
from .store import SheetStore

"""Batch writer: commits the reconciled rows with one clear-then-write.

The whole managed region is replaced rather than patched, so dependent
formulas recompute once. Clear and write are treated as one transaction:
if anything fails after the clear, the pre-run rows are put back before
BatchWriteError is raised.
"""

__all__ = [
    "BatchWriteError",
    "WriteMetrics",
    "WriteResult",
    "normalize_widths",
    "write_batch",
]

logger = logging.getLogger(__name__)


class BatchWriteError(Exception):
    pass


@dataclass(frozen=True)
class WriteMetrics:
    """Timing for the clear+write+save of one batch."""
    row_count: int
    col_count: int
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float


@dataclass(frozen=True)
class WriteResult:
    written_rows: int
    col_count: int
    cleared_rows: int


def normalize_widths(rows: Sequence[Sequence[Any]]) -> tuple[list[list[Any]], int]:
    """Pad every row on the right with "" to the widest row. Never truncates.

    Returns:
        (padded rows, max_cols)
    """
    max_cols = max((len(r) for r in rows), default=0)
    return [list(r) + [""] * (max_cols - len(r)) for r in rows], max_cols


def write_batch(
    store: SheetStore,
    region: ManagedRegion,
    rows: Sequence[Sequence[Any]],
    *,
    metrics_callback: Callable[[WriteMetrics], None] | None = None,
) -> WriteResult:
    """Replace the managed region with ``rows``.

    Args:
        store: Destination sheet store
        region: Region snapshot taken at the start of the run; its raw rows
            are put back if the write fails
        rows: Final merged row set (any widths)
        metrics_callback: Receives WriteMetrics once the batch completes or fails

    Raises:
        BatchWriteError: If clear, write or save fails
    """
    matrix, max_cols = normalize_widths(rows)
    clear_cols = max(region.col_count, max_cols)
    start = time.time()
    touched = False
    try:
        if region.row_count > 0 and clear_cols > 0:
            touched = True
            store.clear_region(region.start_row, region.row_count, clear_cols)
        if matrix:
            touched = True
            store.write_region(region.start_row, matrix)
        store.save()
    except Exception as e:
        rolled_back = touched and _restore(store, region, len(matrix), clear_cols)
        suffix = " (previous rows restored)" if rolled_back else ""
        raise BatchWriteError(f"{e}{suffix}") from e
    finally:
        end = time.time()
        if metrics_callback is not None:
            metrics_callback(
                WriteMetrics(
                    row_count=len(matrix),
                    col_count=max_cols,
                    elapsed_seconds=end - start,
                    start_time=start,
                    end_time=end,
                )
            )

    logger.debug(
        "batch write start_row=%d rows=%d cols=%d cleared_rows=%d",
        region.start_row,
        len(matrix),
        max_cols,
        region.row_count,
    )
    return WriteResult(written_rows=len(matrix), col_count=max_cols, cleared_rows=region.row_count)


def _restore(store: SheetStore, region: ManagedRegion, attempted_rows: int, clear_cols: int) -> bool:
    """Put the region snapshot back into the store's working copy.

    No second save: a failed save persisted nothing, and a failed clear or
    write happened before any save.
    """
    try:
        span = max(region.row_count, attempted_rows)
        if span > 0 and clear_cols > 0:
            store.clear_region(region.start_row, span, clear_cols)
        if region.rows:
            store.write_region(region.start_row, region.rows)
    except Exception:
        logger.exception("rollback of managed region failed; sheet may be left cleared")
        return False
    return True
