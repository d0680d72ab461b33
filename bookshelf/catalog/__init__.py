"""Catalog feature package exports."""

from .book_lifecycle import BookLifecycle
from .errors import (
    CatalogError,
    LibraryConflictError,
    LibraryNotFoundError,
    ParseError,
    ScanError,
    SnapshotConsistencyError,
    UnsupportedFormatError,
)
from .filesystem_scanner import FileSystemScanner
from .interfaces import Parser, Scanner
from .library_manager import LibraryManager
from .library_scanner import LibraryScanner
from .repository import BookRepository, LibraryRepository, SeriesRepository

__all__ = [
    "BookLifecycle",
    "BookRepository",
    "CatalogError",
    "FileSystemScanner",
    "LibraryConflictError",
    "LibraryManager",
    "LibraryNotFoundError",
    "LibraryRepository",
    "LibraryScanner",
    "ParseError",
    "Parser",
    "ScanError",
    "Scanner",
    "SeriesRepository",
    "SnapshotConsistencyError",
    "UnsupportedFormatError",
]
