from __future__ import annotations

from pathlib import Path

from csvsync.cli import main as cli_main
from csvsync.logging.init import reset_logging

"""Exit code contract: 0 on success or no-op, 1 on any fatal or failed run."""


def test_exit_code_missing_config(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main([])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_invalid_config(temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "config" / "sync.yml").write_text("source_directory: ./data\n", encoding="utf-8")
    assert cli_main([]) == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_exit_code_noop_success(write_config, workbook: Path, capsys):
    reset_logging()
    assert cli_main([]) == 0


def test_exit_code_failed_run(write_config, workbook: Path, temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "data" / "bad.csv").write_text('id,name\n1,"open\n', encoding="utf-8")
    assert cli_main([]) == 1
    out = capsys.readouterr().out
    assert "ERROR Import failed during reading (file: bad.csv):" in out
