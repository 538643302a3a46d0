from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..logging.init import log_summary, set_debug, setup_logging
from ..services.orchestrator import run_sync
from ..services.status import JsonFileKeyValueStore, StatusReporter
from ..services.summary import render_summary_line

if TYPE_CHECKING:
    from ..models.config_models import SyncConfig

"""CLI entrypoint.

Flow:
- Load .env (overrides the process environment), then the YAML config
- Run one sync of the configured folder into the configured sheet
- Print a SUMMARY line; the terminal status record holds the same outcome

``--status`` prints the current status record instead of running, which is
what an out-of-process poller reads. ``--inspect-data`` previews the matching
source files with pandas and exits.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Sync a folder of CSV files into a worksheet")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--status", action="store_true", help="Print the last status record and exit")
    p.add_argument("--inspect-data", action="store_true", help="Print sample rows of each matching file then exit")
    return p.parse_args(argv)


def _print_status(cfg: SyncConfig) -> int:
    reporter = StatusReporter(JsonFileKeyValueStore(cfg.status.store_path), cfg.status.key)
    status = reporter.read()
    if status is None:
        print("status: none")
    else:
        print(f"status: {'done' if status.done else 'running'} message={status.message}")
    return EXIT_SUCCESS


def _inspect_data(cfg: SyncConfig) -> int:
    import io

    import pandas as pd

    from ..folder.enumerate import enumerate_files
    from ..folder.store import FolderStoreError, LocalFolderStore

    store = LocalFolderStore()
    try:
        root = store.resolve_root(cfg.source_directory)
    except FolderStoreError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    files = enumerate_files(store, root, cfg.path_pattern, cfg.content_type)
    if not files:
        print("inspect: no matching files")
        return EXIT_SUCCESS
    for identifier, source in files.items():
        print(f"FILE: {identifier}")
        try:
            df = pd.read_csv(
                io.BytesIO(source.read_bytes()),
                sep=cfg.parser.delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skiprows=cfg.parser.skip_rows,
                nrows=3,
                encoding="utf-8-sig",
            )
        except Exception as e:  # pragma: no cover
            print(f"  read_error: {e}")
            continue
        if cfg.parser.columns is not None:
            df = df.reindex(columns=list(cfg.parser.columns), fill_value="")
        print(f"  cols={df.shape[1]}")
        print("    sample_rows=", df.values.tolist())
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only a None argv reads sys.argv; [] from tests must stay empty
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    if args.status:
        return _print_status(cfg)

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Syncing {cfg.source_directory} -> {cfg.target_workbook} [{cfg.target_sheet}]")
    try:
        outcome = run_sync(cfg)
    except Exception as e:
        # Only the status store itself failing gets here
        logger.error(f"status store: {e}", exc_info=args.debug)
        return EXIT_FATAL

    if outcome.succeeded:
        logger.info(outcome.message)
    else:
        logger.error(outcome.message)
    log_summary(render_summary_line(outcome))
    return EXIT_SUCCESS if outcome.succeeded else EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
