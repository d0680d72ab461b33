"""Protocols for the collaborators the catalog relies on."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from bookshelf.core.media import ParsedMetadata, ScannedSeries


@runtime_checkable
class Scanner(Protocol):
    """Produce the current series/book snapshot under a library root.

    Implementations must be deterministic for a given filesystem state and
    must never touch the catalog.
    """

    def scan(self, root: Path) -> Sequence[ScannedSeries]:
        ...


@runtime_checkable
class Parser(Protocol):
    """Extract metadata from a single book.

    Implementations raise :class:`~bookshelf.catalog.errors.UnsupportedFormatError`
    for formats they cannot handle and any other exception for unreadable content.
    """

    def parse(self, url: str) -> ParsedMetadata:
        ...


__all__ = ["Parser", "Scanner"]
