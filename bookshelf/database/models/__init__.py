"""SQLAlchemy models; importing this package registers every table with Base.metadata."""

from .catalog import (
    BookMetadataModel,
    BookModel,
    BookPageModel,
    LibraryModel,
    SeriesModel,
)

__all__ = [
    "BookMetadataModel",
    "BookModel",
    "BookPageModel",
    "LibraryModel",
    "SeriesModel",
]
