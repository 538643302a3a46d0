from __future__ import annotations

from dataclasses import dataclass

from ..records.decimal_locale import is_identity

"""Config dataclasses for the CSV folder -> worksheet sync tool.

These are the typed, validated shapes produced by ``csvsync.config.loader``.
The root object is passed by value into the reconciliation engine; nothing in
the run reads configuration from ambient global state.
"""


@dataclass(frozen=True)
class DecimalSeparators:
    """Source/destination decimal separator pair for numeric field rewriting."""
    source: str
    destination: str


@dataclass(frozen=True)
class StatusConfig:
    """Where the persisted ImportStatus record lives."""
    store_path: str  # JSON file backing the key-value store
    key: str = "csvsync_status"


@dataclass(frozen=True)
class ParserConfig:
    """Options passed through to the delimited record parser."""
    delimiter: str = ","
    skip_rows: int = 0
    columns: tuple[int, ...] | None = None  # None = keep every field


@dataclass(frozen=True)
class SyncConfig:
    """Root configuration object for one sync run."""
    source_directory: str  # Folder root identifier
    target_workbook: str  # Workbook holding the destination sheet
    target_sheet: str  # Worksheet title
    start_row: int  # First row of the managed region (1-based)
    status: StatusConfig
    parser: ParserConfig = ParserConfig()
    path_pattern: str = ".*"  # Case-insensitive regex on the relative path
    content_type: str = "text/csv"
    sync_deletions: bool = True
    decimal_separator: DecimalSeparators | None = None
    interpret_numbers: bool = False
    time_budget_seconds: float = 330.0

    @property
    def normalizes_locale(self) -> bool:
        seps = self.decimal_separator
        return seps is not None and not is_identity(seps.source, seps.destination)
