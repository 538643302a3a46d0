from __future__ import annotations

import pytest

from csvsync.sheet.batch_write import BatchWriteError, normalize_widths, write_batch
from csvsync.sheet.region import ManagedRegion, read_region
from csvsync.sheet.store import InMemorySheetStore


class FailingSaveStore(InMemorySheetStore):
    """Save fails ``failures`` times, then succeeds."""

    def __init__(self, rows, failures: int = 1) -> None:
        super().__init__(rows)
        self.failures = failures

    def save(self) -> None:
        super().save()
        if self.failures > 0:
            self.failures -= 1
            raise OSError("disk full")


def test_normalize_widths_pads_never_truncates():
    padded, width = normalize_widths([["a"], ["b", "1", "2"], []])
    assert width == 3
    assert padded == [["a", "", ""], ["b", "1", "2"], ["", "", ""]]


def test_normalize_widths_empty():
    assert normalize_widths([]) == ([], 0)


def test_write_batch_clears_then_writes_then_saves():
    store = InMemorySheetStore([["hdr"], ["a.csv", "1"], ["b.csv", "2"]])
    region, existing = read_region(store, 2)

    result = write_batch(store, region, [["a.csv", "1", "x"]])

    assert store.operations == ["clear", "write", "save"]
    assert store.grid == [["hdr"], ["a.csv", "1", "x"], ["", ""]]
    assert result.written_rows == 1
    assert result.col_count == 3
    assert result.cleared_rows == 2


def test_write_batch_pads_ragged_rows():
    store = InMemorySheetStore([["hdr"]])
    region, _ = read_region(store, 2)
    write_batch(store, region, [["w.csv", "1", "2", "3"], ["n.csv"]])
    assert store.grid[1:] == [["w.csv", "1", "2", "3"], ["n.csv", "", "", ""]]


def test_write_batch_empty_set_clears_only():
    store = InMemorySheetStore([["hdr"], ["gone.csv", "1"]])
    region, _ = read_region(store, 2)
    result = write_batch(store, region, [])
    assert store.operations == ["clear", "save"]
    assert store.last_row() == 1
    assert result.written_rows == 0


def test_write_batch_empty_region_skips_clear():
    store = InMemorySheetStore([["hdr"]])
    region = ManagedRegion(start_row=2, row_count=0, col_count=1)
    write_batch(store, region, [["a.csv", "1"]])
    assert store.operations == ["write", "save"]


def test_write_batch_restores_previous_rows_on_failure():
    original = [["hdr"], ["a.csv", "1"], ["b.csv", "2"]]
    store = FailingSaveStore(original, failures=1)
    region, _ = read_region(store, 2)

    with pytest.raises(BatchWriteError, match=r"disk full \(previous rows restored\)"):
        write_batch(store, region, [["c.csv", "3", "x"]])

    assert store.grid[1][:2] == ["a.csv", "1"]
    assert store.grid[2][:2] == ["b.csv", "2"]
    # the failed save persisted nothing, so the restore is not saved again
    assert store.operations == ["clear", "write", "save", "clear", "write"]


def test_write_batch_restore_keeps_interior_blank_rows():
    store = FailingSaveStore([["hdr"], ["a.csv", "1"], ["", ""], ["b.csv", "2"]])
    region, existing = read_region(store, 2)
    assert len(existing) == 2

    with pytest.raises(BatchWriteError, match="previous rows restored"):
        write_batch(store, region, [["c.csv", "3"], ["d.csv", "4"], ["e.csv", "5"]])

    assert store.grid[1:] == [["a.csv", "1"], ["", ""], ["b.csv", "2"]]


def test_write_batch_restore_clears_rows_written_past_region():
    store = FailingSaveStore([["hdr"], ["a.csv", "1"]])
    region, _ = read_region(store, 2)

    with pytest.raises(BatchWriteError, match="previous rows restored"):
        write_batch(store, region, [["c.csv", "3"], ["d.csv", "4"]])

    assert store.grid[1] == ["a.csv", "1"]
    assert store.last_row() == 2


def test_write_batch_empty_region_failure_clears_written_rows():
    store = FailingSaveStore([["hdr"]])
    region, _ = read_region(store, 2)

    with pytest.raises(BatchWriteError, match=r"disk full \(previous rows restored\)"):
        write_batch(store, region, [["a.csv", "1"]])

    assert store.last_row() == 1


class FailingWriteStore(InMemorySheetStore):
    def write_region(self, start_row, rows) -> None:
        super().write_region(start_row, rows)
        raise OSError("sheet locked")


def test_write_batch_failed_rollback_reports_plain_error():
    store = FailingWriteStore([["hdr"], ["a.csv", "1"]])
    region, _ = read_region(store, 2)
    with pytest.raises(BatchWriteError) as excinfo:
        write_batch(store, region, [["c.csv"]])
    assert str(excinfo.value) == "sheet locked"


def test_write_batch_save_failure_without_changes_is_plain():
    store = FailingSaveStore([["hdr"]])
    region, _ = read_region(store, 2)
    with pytest.raises(BatchWriteError) as excinfo:
        write_batch(store, region, [])
    assert str(excinfo.value) == "disk full"
    assert store.operations == ["save"]


def test_write_batch_metrics_callback_on_success_and_failure():
    seen = []
    store = InMemorySheetStore([["hdr"]])
    region, _ = read_region(store, 2)
    write_batch(store, region, [["a.csv", "1"]], metrics_callback=seen.append)
    assert seen[0].row_count == 1
    assert seen[0].col_count == 2
    assert seen[0].elapsed_seconds >= 0

    failing = FailingSaveStore([["hdr"]])
    region, _ = read_region(failing, 2)
    with pytest.raises(BatchWriteError):
        write_batch(failing, region, [["a.csv"]], metrics_callback=seen.append)
    assert len(seen) == 2
