from __future__ import annotations

import logging
import re
from typing import Any

from ..models.source_file import SourceFile
from .store import FolderStore

"""Recursive file enumeration over a folder store.

Produces the insertion-ordered file map the reconciliation engine keys on.
Each folder's files are listed through the store's content-type filter (so
non-matching files are never materialised), then its subfolders are walked
depth-first.
"""

__all__ = [
    "EnumerationError",
    "compile_pattern",
    "enumerate_files",
]

logger = logging.getLogger(__name__)


class EnumerationError(Exception):
    """Raised for an invalid path pattern or an identifier collision."""


def compile_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise EnumerationError(f"invalid path pattern {pattern!r}: {e}") from e


def enumerate_files(
    store: FolderStore,
    root: Any,
    pattern: str | re.Pattern[str] = ".*",
    content_type: str = "text/csv",
) -> dict[str, SourceFile]:
    """Walk ``root`` and return matching files keyed by relative path.

    Args:
        store: Folder store to list and read through
        root: Root folder object (from ``store.resolve_root``)
        pattern: Regex searched case-insensitively in the relative path
        content_type: Only files of this type are listed

    Returns:
        Ordered mapping identifier -> SourceFile

    Raises:
        EnumerationError: If the pattern is invalid or two files map to one identifier
    """
    matcher = compile_pattern(pattern) if isinstance(pattern, str) else pattern
    files: dict[str, SourceFile] = {}
    skipped = 0

    # Explicit stack keeps deep trees off the recursion limit
    stack: list[tuple[str, Any]] = [("", root)]
    while stack:
        prefix, folder = stack.pop()
        for name, handle in store.list_files(folder, content_type):
            identifier = f"{prefix}{name}"
            if not matcher.search(identifier):
                skipped += 1
                continue
            if identifier in files:
                raise EnumerationError(f"duplicate file identifier: {identifier}")
            files[identifier] = SourceFile(identifier=identifier, handle=handle, loader=store.read_all)
        subfolders = list(store.list_subfolders(folder))
        for sub_name, sub in reversed(subfolders):
            stack.append((f"{prefix}{sub_name}/", sub))

    logger.debug("enumerated files=%d skipped_by_pattern=%d", len(files), skipped)
    return files
