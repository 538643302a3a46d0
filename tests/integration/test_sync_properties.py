from __future__ import annotations

from pathlib import Path

from csvsync.config.loader import load_config
from csvsync.services.orchestrator import run_sync
from csvsync.services.status import JsonFileKeyValueStore, StatusReporter

"""Cross-run guarantees: idempotence, dedup, widths, deletions, region boundary."""


def _filled(rows: list[list]) -> list[list]:
    return [r for r in rows if any(v != "" for v in r)]


def _write(temp_workdir: Path, name: str, text: str) -> None:
    (temp_workdir / "data" / name).write_text(text, encoding="utf-8")


def test_second_run_is_noop(write_config: Path, workbook: Path, temp_workdir: Path):
    _write(temp_workdir, "a.csv", "id,name\n1,A\n2,B\n")
    _write(temp_workdir, "b.csv", "id,name\n3,C\n")
    run_sync(load_config(write_config))
    mtime = workbook.stat().st_mtime_ns
    content = workbook.read_bytes()

    second = run_sync(load_config(write_config))

    assert second.message == "No changes."
    assert second.written is False
    assert workbook.stat().st_mtime_ns == mtime
    assert workbook.read_bytes() == content


def test_changed_content_under_same_name_is_not_reimported(write_config: Path, workbook: Path, temp_workdir: Path, read_sheet):
    _write(temp_workdir, "a.csv", "id,name\n1,A\n")
    run_sync(load_config(write_config))
    _write(temp_workdir, "a.csv", "id,name\n1,A\n2,NEW\n")

    run_sync(load_config(write_config))

    rows = read_sheet(workbook)[1:]
    assert [r[0] for r in rows] == ["a.csv"]


def test_rows_padded_to_widest(write_config: Path, workbook: Path, temp_workdir: Path, read_sheet):
    cfg = write_config.read_text(encoding="utf-8").replace("columns: [0, 1]", "columns: all")
    write_config.write_text(cfg, encoding="utf-8")
    _write(temp_workdir, "a.csv", "h\n1,2,3,4,5\n")
    _write(temp_workdir, "b.csv", "h\n1\n")

    run_sync(load_config(write_config))

    rows = read_sheet(workbook)[1:]
    assert rows == [["a.csv", "1", "2", "3", "4", "5"], ["b.csv", "1", "", "", "", ""]]


def test_deleted_file_rows_gone_others_preserved(write_config: Path, workbook: Path, temp_workdir: Path, read_sheet):
    _write(temp_workdir, "keep.csv", "id,name\n1,K\n")
    _write(temp_workdir, "drop.csv", "id,name\n2,D\n3,E\n")
    run_sync(load_config(write_config))
    before = {tuple(r) for r in read_sheet(workbook)[1:] if r[0] == "keep.csv"}

    (temp_workdir / "data" / "drop.csv").unlink()
    outcome = run_sync(load_config(write_config))

    rows = _filled(read_sheet(workbook))[1:]
    assert outcome.message == "Removed 1 file(s) [2 rows]."
    assert {tuple(r) for r in rows} == before
    assert all(r[0] != "drop.csv" for r in rows)


def test_rows_above_region_untouched(write_config: Path, workbook_factory, temp_workdir: Path, read_sheet):
    path = workbook_factory(temp_workdir / "sheet.xlsx", [["Title", "", "notes here"]])
    _write(temp_workdir, "a.csv", "id,name\n1,A\n")

    run_sync(load_config(write_config))
    (temp_workdir / "data" / "a.csv").unlink()
    run_sync(load_config(write_config))

    assert _filled(read_sheet(path)) == [["Title", "", "notes here"]]


def test_status_record_after_run(write_config: Path, workbook: Path, temp_workdir: Path):
    _write(temp_workdir, "a.csv", "id,name\n1,A\n")
    run_sync(load_config(write_config))
    status = StatusReporter(JsonFileKeyValueStore(temp_workdir / "logs" / "status.json")).read()
    assert status.done is True
    assert status.message == "Imported 1 file(s) [1 rows]."
