"""Domain models for the CSV folder -> worksheet sync tool."""

from .config_models import DecimalSeparators, ParserConfig, StatusConfig, SyncConfig
from .error_record import ErrorRecord
from .import_status import ImportStatus
from .processing_result import ReconciliationFailure, ReconciliationResult, Row, RunOutcome
from .run_phase import RunPhase
from .source_file import SourceFile

__all__ = [
    # Configuration models
    "DecimalSeparators",
    "ParserConfig",
    "StatusConfig",
    "SyncConfig",
    # Run models
    "ErrorRecord",
    "ImportStatus",
    "ReconciliationFailure",
    "ReconciliationResult",
    "Row",
    "RunOutcome",
    "RunPhase",
    "SourceFile",
]
