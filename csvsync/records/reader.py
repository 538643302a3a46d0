from __future__ import annotations

import csv
import io
from collections.abc import Sequence

"""Delimited record reader.

Raw file bytes -> list of records (lists of string fields).

- Content is decoded as UTF-8; a leading byte-order mark is dropped.
- Standard CSV quoting applies for the given delimiter, so quoted fields may
  hold delimiters, doubled quotes and line breaks.
- Records with index < skip_rows are discarded (commonly 1 header row).
- An optional column list projects each record to those positions, in the
  given order; positions beyond the record yield "".
"""

__all__ = [
    "RecordParseError",
    "parse_records",
    "project",
]


class RecordParseError(Exception):
    """Raised when file content cannot be decoded or tokenized."""


def project(record: Sequence[str], columns: Sequence[int] | None) -> list[str]:
    """Return ``record`` restricted to ``columns`` (all fields when None)."""
    if columns is None:
        return list(record)
    return [record[i] if 0 <= i < len(record) else "" for i in columns]


def parse_records(
    content: bytes,
    delimiter: str,
    *,
    skip_rows: int = 0,
    columns: Sequence[int] | None = None,
) -> list[list[str]]:
    """Parse delimited bytes into records.

    Args:
        content: Raw file bytes
        delimiter: Single field delimiter character (",", ";" or tab)
        skip_rows: Number of leading records to discard
        columns: 0-based positions to keep, or None for every field

    Returns:
        Records after skip/projection. Empty when nothing remains (not an error).

    Raises:
        RecordParseError: On undecodable bytes or malformed CSV
    """
    if len(delimiter) != 1:
        raise RecordParseError(f"delimiter must be a single character: {delimiter!r}")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise RecordParseError(f"not valid UTF-8: {e}") from e

    records: list[list[str]] = []
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    try:
        for index, record in enumerate(_non_blank(reader)):
            if index < skip_rows:
                continue
            records.append(project(record, columns))
    except csv.Error as e:
        raise RecordParseError(f"line {reader.line_num}: {e}") from e
    return records


def _non_blank(reader):
    # csv yields [] for empty lines; they are not records
    for record in reader:
        if record:
            yield record
