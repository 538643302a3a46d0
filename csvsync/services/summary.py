from __future__ import annotations

from ..models.processing_result import ReconciliationResult, RunOutcome

"""Summary rendering for the terminal status record and the SUMMARY log line."""


def render_summary_message(result: ReconciliationResult) -> str:
    """Human-readable tally of one run.

    Format:
        Imported N file(s) [R rows], removed M file(s) [D rows].
    Each clause appears only when its file count is non-zero; the first
    clause is capitalised. Both zero -> "No changes."

    Examples:
        >>> r = ReconciliationResult([], [["c.csv", "x"]], 1, 2, 1, 1)
        >>> render_summary_message(r)
        'Imported 1 file(s) [1 rows], removed 1 file(s) [2 rows].'
        >>> render_summary_message(ReconciliationResult([], [], 0, 0, 0))
        'No changes.'
    """
    clauses: list[str] = []
    if result.imported_file_count > 0:
        clauses.append(f"imported {result.imported_file_count} file(s) [{result.imported_row_count} rows]")
    if result.deleted_file_count > 0:
        clauses.append(f"removed {result.deleted_file_count} file(s) [{result.deleted_row_count} rows]")
    if not clauses:
        return "No changes."
    text = ", ".join(clauses)
    return text[0].upper() + text[1:] + "."


def render_summary_line(outcome: RunOutcome) -> str:
    """Render the SUMMARY log line (without the label).

    Format:
        status=<done|failed> imported_files=N imported_rows=R removed_files=M
        removed_rows=D written=<true|false> elapsed_sec=S
    """
    result = outcome.result
    elapsed = outcome.elapsed_seconds
    if elapsed == int(elapsed):
        elapsed_str = str(int(elapsed))
    else:
        elapsed_str = f"{elapsed:.3f}".rstrip("0").rstrip(".")
    return (
        f"status={outcome.phase.value} "
        f"imported_files={result.imported_file_count if result else 0} "
        f"imported_rows={result.imported_row_count if result else 0} "
        f"removed_files={result.deleted_file_count if result else 0} "
        f"removed_rows={result.deleted_row_count if result else 0} "
        f"written={'true' if outcome.written else 'false'} "
        f"elapsed_sec={elapsed_str}"
    )
