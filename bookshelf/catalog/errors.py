"""Exceptions raised by the catalog services."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog-related failures."""


class LibraryNotFoundError(CatalogError):
    """Raised when an expected library does not exist."""


class LibraryConflictError(CatalogError):
    """Raised when a conflicting library already exists."""


class ScanError(CatalogError):
    """Raised when a library could not be scanned; nothing was committed."""


class SnapshotConsistencyError(ScanError):
    """Raised when a scanner snapshot contains entries the catalog cannot tell apart."""


class ParseError(CatalogError):
    """Raised by a Parser when a book's content cannot be read."""


class UnsupportedFormatError(ParseError):
    """Raised by a Parser when a book's format is not supported."""


__all__ = [
    "CatalogError",
    "LibraryConflictError",
    "LibraryNotFoundError",
    "ParseError",
    "ScanError",
    "SnapshotConsistencyError",
    "UnsupportedFormatError",
]
