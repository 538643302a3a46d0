from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..folder.enumerate import enumerate_files
from ..folder.store import FolderStore, LocalFolderStore
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import SyncConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import ReconciliationFailure, ReconciliationResult, RunOutcome
from ..models.run_phase import RunPhase
from ..sheet.batch_write import WriteMetrics, write_batch
from ..sheet.region import read_region
from ..sheet.store import SheetStore, WorkbookSheetStore
from .deadline import RunDeadline
from .progress import ProgressTracker
from .reconcile import reconcile, row_identifier
from .status import JsonFileKeyValueStore, KeyValueStore, StatusReporter, phase_message
from .summary import render_summary_message

"""Run orchestration: one sheet against one folder snapshot.

    init -> scanning -> deletion-check -> reading -> writing -> done
                                                      any -> failed

Every transition overwrites the status record. The managed region is read
once (scanning) and written at most once (writing), so a run that fails
anywhere leaves the sheet exactly as it was.
"""

__all__ = [
    "run_sync",
]

logger = logging.getLogger(__name__)


def run_sync(
    config: SyncConfig,
    *,
    folder_store: FolderStore | None = None,
    sheet_store: SheetStore | None = None,
    status_store: KeyValueStore | None = None,
    error_log: ErrorLogBuffer | None = None,
    deadline: RunDeadline | None = None,
) -> RunOutcome:
    """Synchronize the configured folder into the configured sheet.

    Stores default to the local filesystem, the configured workbook and the
    configured JSON status file. Failures do not raise; they come back as a
    FAILED RunOutcome whose message is also the terminal status.

    Args:
        config: Run configuration
        folder_store: Source folder store
        sheet_store: Destination sheet store (opened from config when None)
        status_store: Key-value store for the status record
        error_log: Buffer receiving an ErrorRecord on failure
        deadline: Time budget (defaults to config.time_budget_seconds)

    Returns:
        RunOutcome in phase DONE or FAILED
    """
    start_time = datetime.now(UTC)
    deadline = deadline or RunDeadline(config.time_budget_seconds)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    reporter = StatusReporter(
        status_store if status_store is not None else JsonFileKeyValueStore(config.status.store_path),
        config.status.key,
    )

    def fail(failure: ReconciliationFailure, result: ReconciliationResult | None = None) -> RunOutcome:
        logger.debug("run failed phase=%s file=%s", failure.phase.value, failure.file, exc_info=failure.cause)
        reporter.report(failure.message, done=True)
        error_log.append(
            ErrorRecord.create(
                phase=failure.phase.value,
                file=failure.file,
                error_type=failure.error_type,
                message=str(failure.cause),
            )
        )
        try:
            error_log.flush()
        except OSError as e:
            logger.warning("could not write error log: %s", e)
        return RunOutcome(
            phase=RunPhase.FAILED,
            message=failure.message,
            start_time=start_time,
            end_time=datetime.now(UTC),
            result=result,
            failure=failure,
        )

    # Init: previous run's terminal status is dropped before anything else
    reporter.clear()
    reporter.report(phase_message(RunPhase.INIT))
    try:
        folder_store = folder_store or LocalFolderStore()
        root = folder_store.resolve_root(config.source_directory)
        if sheet_store is None:
            sheet_store = WorkbookSheetStore(config.target_workbook, config.target_sheet)
    except Exception as e:
        return fail(ReconciliationFailure(phase=RunPhase.INIT, cause=e))

    # Scanning: one file snapshot and one region read for the whole run
    reporter.report(phase_message(RunPhase.SCANNING, root=config.source_directory))
    try:
        deadline.check()
        files = enumerate_files(folder_store, root, config.path_pattern, config.content_type)
        region, existing_rows = read_region(sheet_store, config.start_row)
    except Exception as e:
        return fail(ReconciliationFailure(phase=RunPhase.SCANNING, cause=e))
    logger.info(
        "found %d file(s), %d existing row(s) from row %d",
        len(files),
        len(existing_rows),
        config.start_row,
    )

    existing_ids = {row_identifier(r) for r in existing_rows}
    pending = sum(1 for identifier in files if identifier not in existing_ids)
    with ProgressTracker(pending, description="Reading files") as progress:
        outcome = reconcile(
            existing_rows,
            files,
            config,
            reporter=reporter,
            progress=progress,
            deadline=deadline,
        )
    if isinstance(outcome, ReconciliationFailure):
        return fail(outcome)
    result = outcome

    written = False
    if result.changed:
        rows = result.rows
        reporter.report(phase_message(RunPhase.WRITING, rows=len(rows)))

        def on_metrics(m: WriteMetrics) -> None:
            logger.debug("write rows=%d cols=%d elapsed=%.3fs", m.row_count, m.col_count, m.elapsed_seconds)

        try:
            deadline.check()
            write_result = write_batch(sheet_store, region, rows, metrics_callback=on_metrics)
        except Exception as e:
            return fail(ReconciliationFailure(phase=RunPhase.WRITING, cause=e), result)
        written = True
        logger.info(
            "wrote %d row(s) x %d column(s) from row %d (cleared %d)",
            write_result.written_rows,
            write_result.col_count,
            region.start_row,
            write_result.cleared_rows,
        )
    else:
        logger.info("no changes; sheet left untouched")

    message = render_summary_message(result)
    reporter.report(message, done=True)
    return RunOutcome(
        phase=RunPhase.DONE,
        message=message,
        start_time=start_time,
        end_time=datetime.now(UTC),
        result=result,
        written=written,
    )
