from __future__ import annotations

import mimetypes
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

"""Folder stores: where the source files live.

The enumerator only needs three read operations (list files of one folder
narrowed by content type, list subfolders, read a file) plus root lookup.
``LocalFolderStore`` maps them onto a directory tree; ``InMemoryFolderStore``
is a dict-backed tree used by tests and dry runs.
"""

__all__ = [
    "FolderStore",
    "FolderStoreError",
    "InMemoryFolder",
    "InMemoryFolderStore",
    "LocalFolderStore",
    "guess_content_type",
]

# Extensions the stdlib table does not know on every platform
_EXTRA_TYPES = {
    ".csv": "text/csv",
    ".tsv": "text/tab-separated-values",
    ".tab": "text/tab-separated-values",
}


class FolderStoreError(Exception):
    """Raised when the source folder cannot be located or listed."""


class FolderStore(Protocol):
    def resolve_root(self, identifier: str) -> Any: ...

    def list_files(self, folder: Any, type_filter: str) -> Iterator[tuple[str, Any]]: ...

    def list_subfolders(self, folder: Any) -> Iterator[tuple[str, Any]]: ...

    def read_all(self, handle: Any) -> bytes: ...


def guess_content_type(name: str) -> str | None:
    suffix = Path(name).suffix.lower()
    if suffix in _EXTRA_TYPES:
        return _EXTRA_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed


class LocalFolderStore:
    """Directory tree on the local filesystem. Handles are ``Path`` objects."""

    def resolve_root(self, identifier: str) -> Path:
        root = Path(identifier)
        if not root.exists():
            raise FolderStoreError(f"Directory not found: {root}")
        if not root.is_dir():
            raise FolderStoreError(f"Path is not a directory: {root}")
        return root

    def list_files(self, folder: Path, type_filter: str) -> Iterator[tuple[str, Path]]:
        for entry in self._entries(folder):
            if entry.is_file() and guess_content_type(entry.name) == type_filter:
                yield entry.name, entry

    def list_subfolders(self, folder: Path) -> Iterator[tuple[str, Path]]:
        # Directory symlinks are not followed: they would alias or loop the tree
        for entry in self._entries(folder):
            if entry.is_dir() and not entry.is_symlink():
                yield entry.name, entry

    def read_all(self, handle: Path) -> bytes:
        return handle.read_bytes()

    @staticmethod
    def _entries(folder: Path) -> list[Path]:
        try:
            return sorted(folder.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FolderStoreError(f"Error reading directory {folder}: {e}") from e


@dataclass
class InMemoryFolder:
    """Folder node: ordered files (name -> bytes) and subfolders."""
    files: dict[str, bytes] = field(default_factory=dict)
    folders: dict[str, InMemoryFolder] = field(default_factory=dict)
    # Optional explicit content types; otherwise guessed from the name
    content_types: dict[str, str] = field(default_factory=dict)

    def add_file(self, path: str, content: bytes | str, content_type: str | None = None) -> None:
        """Add a file at ``path`` ('/'-separated), creating folders as needed."""
        *parents, name = path.split("/")
        node = self
        for part in parents:
            node = node.folders.setdefault(part, InMemoryFolder())
        node.files[name] = content.encode("utf-8") if isinstance(content, str) else content
        if content_type is not None:
            node.content_types[name] = content_type

    def remove_file(self, path: str) -> None:
        *parents, name = path.split("/")
        node = self
        for part in parents:
            node = node.folders[part]
        del node.files[name]
        node.content_types.pop(name, None)


class InMemoryFolderStore:
    """Folder store over named in-memory trees. Handles are (folder, name) pairs."""

    def __init__(self, roots: dict[str, InMemoryFolder] | None = None) -> None:
        self.roots: dict[str, InMemoryFolder] = dict(roots or {})
        self.reads: list[str] = []  # file names in read order

    def resolve_root(self, identifier: str) -> InMemoryFolder:
        try:
            return self.roots[identifier]
        except KeyError:
            raise FolderStoreError(f"Folder not found: {identifier}") from None

    def list_files(self, folder: InMemoryFolder, type_filter: str) -> Iterator[tuple[str, Any]]:
        for name in list(folder.files):
            ctype = folder.content_types.get(name) or guess_content_type(name)
            if ctype == type_filter:
                yield name, (folder, name)

    def list_subfolders(self, folder: InMemoryFolder) -> Iterator[tuple[str, InMemoryFolder]]:
        yield from list(folder.folders.items())

    def read_all(self, handle: tuple[InMemoryFolder, str]) -> bytes:
        folder, name = handle
        try:
            content = folder.files[name]
        except KeyError:
            raise FolderStoreError(f"File no longer exists: {name}") from None
        self.reads.append(name)
        return content
