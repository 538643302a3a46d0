from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.config_models import SyncConfig
from ..models.processing_result import ReconciliationFailure, ReconciliationResult, Row
from ..models.run_phase import RunPhase
from ..models.source_file import SourceFile
from ..records.decimal_locale import coerce_row, normalize_row
from ..records.reader import parse_records
from .deadline import RunDeadline
from .progress import ProgressTracker
from .status import ProgressSink, phase_message

"""Reconciliation engine.

Given the managed region snapshot and the current file snapshot, computes the
post-run row set:

1. Survivor partition: an existing row survives when its field-0 identifier
   is a key of the file map (every row survives when deletion sync is off).
   Survivors are carried forward unchanged and never re-parsed.
2. Identifiers among survivors form the already-imported set.
3. Every other file is parsed, in enumerator order, and emits one row per
   record prefixed with its identifier. A file with no data rows still counts
   as imported and leaves one identifier-only marker row, so the next run
   does not read it again.
4. Merge: survivors (original order) then new rows.
5. No deletion and no new row means no change; the writer is skipped.

Identifier equality is the only dedup key. Width normalization is left to the
batch writer. The engine never raises for per-run failures: it returns a
ReconciliationFailure naming the phase and file, stopping at the first
failing file.
"""

__all__ = [
    "partition_survivors",
    "read_new_file",
    "reconcile",
    "row_identifier",
]

logger = logging.getLogger(__name__)


def row_identifier(row: Sequence[Any]) -> str:
    """Field 0 of a sheet row as an identifier string ("" when missing)."""
    if not row or row[0] is None:
        return ""
    return str(row[0])


def partition_survivors(
    existing_rows: Sequence[Row], file_ids: Mapping[str, Any]
) -> tuple[list[Row], int, int]:
    """Split existing rows into survivors and dropped rows.

    Returns:
        (surviving rows in original order, distinct dropped identifiers, dropped rows)
    """
    survivors: list[Row] = []
    dropped_ids: set[str] = set()
    dropped_rows = 0
    for row in existing_rows:
        identifier = row_identifier(row)
        if identifier in file_ids:
            survivors.append(row)
        else:
            dropped_ids.add(identifier)
            dropped_rows += 1
    return survivors, len(dropped_ids), dropped_rows


def read_new_file(source: SourceFile, config: SyncConfig) -> list[Row]:
    """Parse one new file into sheet rows (identifier + fields).

    Raises:
        RecordParseError: If the content cannot be parsed
        Exception: Whatever the folder store raises while reading
    """
    parser = config.parser
    records = parse_records(
        source.read_bytes(),
        parser.delimiter,
        skip_rows=parser.skip_rows,
        columns=parser.columns,
    )
    seps = config.decimal_separator
    if seps is not None and config.normalizes_locale:
        records = [normalize_row(r, seps.source, seps.destination) for r in records]
    if config.interpret_numbers:
        records = [coerce_row(r) for r in records]
    return [[source.identifier, *record] for record in records]


def reconcile(
    existing_rows: Sequence[Row],
    current_files: Mapping[str, SourceFile],
    config: SyncConfig,
    *,
    reporter: ProgressSink | None = None,
    progress: ProgressTracker | None = None,
    deadline: RunDeadline | None = None,
) -> ReconciliationResult | ReconciliationFailure:
    """Compute survivors and new rows for one run.

    Args:
        existing_rows: Managed region snapshot (non-blank rows, sheet order)
        current_files: Ordered file snapshot keyed by identifier
        config: Run configuration (deletion sync, parser, locale options)
        reporter: Status sink notified at deletion-check and per file read
        progress: Optional TTY progress bar for new files
        deadline: Wall-clock budget checked before each phase and file

    Returns:
        ReconciliationResult, or ReconciliationFailure on the first error
    """
    if reporter is not None:
        reporter.report(phase_message(RunPhase.DELETION_CHECK))
    try:
        if deadline is not None:
            deadline.check()
    except Exception as e:
        return ReconciliationFailure(phase=RunPhase.DELETION_CHECK, cause=e)

    if config.sync_deletions:
        survivors, deleted_files, deleted_rows = partition_survivors(existing_rows, current_files)
    else:
        survivors, deleted_files, deleted_rows = list(existing_rows), 0, 0
    logger.debug(
        "deletion check survivors=%d removed_files=%d removed_rows=%d sync_deletions=%s",
        len(survivors),
        deleted_files,
        deleted_rows,
        config.sync_deletions,
    )

    imported = {row_identifier(row) for row in survivors}
    pending = [f for identifier, f in current_files.items() if identifier not in imported]

    new_rows: list[Row] = []
    data_rows = 0
    for index, source in enumerate(pending, start=1):
        if reporter is not None:
            reporter.report(
                phase_message(RunPhase.READING, index=index, total=len(pending), file=source.identifier)
            )
        if progress is not None:
            progress.start_file(source.identifier)
        try:
            if deadline is not None:
                deadline.check()
            rows = read_new_file(source, config)
        except Exception as e:
            logger.debug("read failed file=%s", source.identifier, exc_info=True)
            return ReconciliationFailure(phase=RunPhase.READING, cause=e, file=source.identifier)

        if rows:
            new_rows.extend(rows)
            data_rows += len(rows)
        else:
            new_rows.append([source.identifier])
        if progress is not None:
            progress.finish_file(rows=len(rows))
            progress.set_postfix(rows=progress.rows_read)
        logger.debug("read file=%s rows=%d", source.identifier, len(rows))

    return ReconciliationResult(
        surviving_rows=survivors,
        new_rows=new_rows,
        deleted_file_count=deleted_files,
        deleted_row_count=deleted_rows,
        imported_file_count=len(pending),
        imported_row_count=data_rows,
    )
