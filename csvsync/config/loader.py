from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..folder.enumerate import EnumerationError, compile_pattern
from ..models.config_models import DecimalSeparators, ParserConfig, StatusConfig, SyncConfig

"""Config loader.

Responsibilities:
- Load the YAML config (default ``config/sync.yml``)
- Validate it against the packaged JSON schema
- Apply defaults and environment overrides
- Produce a frozen SyncConfig
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/sync.yml")
DEFAULT_STATUS_PATH = "logs/status.json"

# Environment variable -> config key (env wins over the YAML file)
ENV_OVERRIDES = {
    "CSVSYNC_SOURCE_DIRECTORY": "source_directory",
    "CSVSYNC_TARGET_WORKBOOK": "target_workbook",
    "CSVSYNC_TARGET_SHEET": "target_sheet",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            violates the schema
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            merged[key] = value
    return merged


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> SyncConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    data = _apply_env_overrides(data)
    _validate_config_schema(data)

    pattern = data.get("path_pattern", ".*")
    try:
        compile_pattern(pattern)
    except EnumerationError as e:
        raise ConfigError(str(e)) from e

    columns = data.get("columns", "all")
    parser = ParserConfig(
        delimiter=data["delimiter"],
        skip_rows=data.get("skip_rows", 0),
        columns=None if columns == "all" else tuple(columns),
    )
    seps_raw = data.get("decimal_separator")
    seps = DecimalSeparators(source=seps_raw["source"], destination=seps_raw["destination"]) if seps_raw else None
    status_raw = data.get("status", {})
    status = StatusConfig(
        store_path=status_raw.get("store_path", DEFAULT_STATUS_PATH),
        key=status_raw.get("key", "csvsync_status"),
    )
    return SyncConfig(
        source_directory=data["source_directory"],
        target_workbook=data["target_workbook"],
        target_sheet=data["target_sheet"],
        start_row=data["start_row"],
        status=status,
        parser=parser,
        path_pattern=pattern,
        content_type=data.get("content_type", "text/csv"),
        sync_deletions=data.get("sync_deletions", True),
        decimal_separator=seps,
        interpret_numbers=data.get("interpret_numbers", False),
        time_budget_seconds=float(data.get("time_budget_seconds", 330)),
    )
