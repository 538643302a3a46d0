from __future__ import annotations

import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

"""Decimal separator normalization for numeric-looking fields.

Only a field whose trimmed value is strictly numeric under the source
convention (optional minus, digits, optional separator + digits) is touched,
so text such as "a,b" keeps its separator characters. The same pattern (with
"." as separator) decides which fields of new rows become numbers.
"""

__all__ = [
    "coerce_cell",
    "coerce_row",
    "is_identity",
    "numeric_pattern",
    "normalize_field",
    "normalize_row",
]


def is_identity(from_separator: str, to_separator: str) -> bool:
    """True when normalization cannot change anything; callers skip the pass."""
    return from_separator == to_separator


@lru_cache(maxsize=8)
def numeric_pattern(separator: str) -> re.Pattern[str]:
    return re.compile(rf"^-?\d+(?:{re.escape(separator)}\d+)?$")


def normalize_field(value: Any, from_separator: str, to_separator: str) -> Any:
    if not isinstance(value, str):
        return value
    if not numeric_pattern(from_separator).match(value.strip()):
        return value
    return value.replace(from_separator, to_separator, 1)


def normalize_row(row: Sequence[Any], from_separator: str, to_separator: str) -> list[Any]:
    """Rewrite the decimal separator of every numeric-looking field in ``row``."""
    return [normalize_field(v, from_separator, to_separator) for v in row]


def coerce_cell(value: Any) -> Any:
    """Numeric-looking text ('.' decimal) -> int/float; anything else unchanged."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not numeric_pattern(".").match(text):
        return value
    return float(text) if "." in text else int(text)


def coerce_row(row: Sequence[Any]) -> list[Any]:
    return [coerce_cell(v) for v in row]
