from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

"""SourceFile domain model.

A SourceFile is discovered fresh by the enumerator on every run. Its identity
is the path relative to the sync root; its content is read lazily and at most
once, through the loader supplied by the folder store.
"""

__all__ = [
    "SourceFile",
]


@dataclass(eq=False)
class SourceFile:
    """A delimited file found under the sync root.

    Attributes:
        identifier: Relative path joined with '/' (stable across runs)
        handle: Opaque store handle (a Path for the local store)
        loader: Callable returning the raw bytes for ``handle``
    """
    identifier: str
    handle: Any
    loader: Callable[[Any], bytes] = field(repr=False)
    _content: bytes | None = field(default=None, init=False, repr=False)

    @property
    def name(self) -> str:
        return self.identifier.rsplit("/", 1)[-1]

    @property
    def is_loaded(self) -> bool:
        return self._content is not None

    def read_bytes(self) -> bytes:
        """Return the file content, reading it from the store on first access."""
        if self._content is None:
            self._content = self.loader(self.handle)
        return self._content
