# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook, load_workbook

from csvsync.models.config_models import DecimalSeparators, ParserConfig, StatusConfig, SyncConfig


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
path_pattern: '\\.csv$'
delimiter: ","
skip_rows: 1
columns: [0, 1]
target_workbook: ./sheet.xlsx
target_sheet: Import
start_row: 2
sync_deletions: true
status:
  store_path: ./logs/status.json
  key: csvsync_status
time_budget_seconds: 60
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, rows: Sequence[Sequence[Any]], title: str = "Import") -> Path:
    """Create an .xlsx with one sheet holding ``rows`` from row 1."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for r, values in enumerate(rows, start=1):
        for c, value in enumerate(values, start=1):
            if value not in (None, ""):
                ws.cell(row=r, column=c, value=value)
    wb.save(path)
    return path


def read_workbook(path: Path, title: str = "Import") -> list[list[Any]]:
    """All rows of a sheet, empty cells as ""."""
    ws = load_workbook(path)[title]
    return [["" if v is None else v for v in row] for row in ws.iter_rows(values_only=True)]


@pytest.fixture()
def workbook(temp_workdir: Path) -> Path:
    """sheet.xlsx with a manual header row (row 1) and an empty managed region."""
    return make_workbook(temp_workdir / "sheet.xlsx", [["file", "name", "amount"]])


def make_config(**overrides: Any) -> SyncConfig:
    """SyncConfig for in-memory runs; parser/status fields can be overridden."""
    parser = ParserConfig(
        delimiter=overrides.pop("delimiter", ","),
        skip_rows=overrides.pop("skip_rows", 1),
        columns=overrides.pop("columns", (0, 1)),
    )
    seps = overrides.pop("decimal_separator", None)
    if isinstance(seps, tuple):
        seps = DecimalSeparators(*seps)
    base: dict[str, Any] = dict(
        source_directory="root",
        target_workbook="unused.xlsx",
        target_sheet="Import",
        start_row=2,
        status=StatusConfig(store_path="unused.json", key="csvsync_status"),
        parser=parser,
        decimal_separator=seps,
    )
    base.update(overrides)
    return SyncConfig(**base)


@pytest.fixture()
def config_factory():
    return make_config


@pytest.fixture()
def workbook_factory():
    return make_workbook


@pytest.fixture()
def read_sheet():
    return read_workbook
