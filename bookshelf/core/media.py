"""Dataclasses exchanged with the Scanner and Parser collaborators."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


class MediaStatus(str, enum.Enum):
    """Parsing state of a book's metadata."""

    UNKNOWN = "UNKNOWN"
    ERROR = "ERROR"
    READY = "READY"
    UNSUPPORTED = "UNSUPPORTED"


@dataclass(frozen=True)
class BookPage:
    """A single page entry inside a book archive."""

    file_name: str
    media_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class ParsedMetadata:
    """Result returned by a Parser for one book."""

    status: MediaStatus = MediaStatus.READY
    media_type: Optional[str] = None
    thumbnail: Optional[bytes] = None
    pages: Tuple[BookPage, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", MediaStatus(self.status))
        object.__setattr__(self, "pages", tuple(self.pages))


@dataclass(frozen=True)
class ScannedBook:
    """A book file as observed by the Scanner."""

    name: str
    url: str
    file_last_modified: datetime


@dataclass(frozen=True)
class ScannedSeries:
    """A named group of books as observed by the Scanner."""

    name: str
    books: Tuple[ScannedBook, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "books", tuple(self.books))


@dataclass
class ScanSummary:
    """Counts of the mutations applied by one reconciliation pass."""

    library_id: int
    series_added: int = 0
    series_removed: int = 0
    series_updated: int = 0
    books_added: int = 0
    books_removed: int = 0
    books_updated: int = 0
    books_unchanged: int = 0
    moved_urls: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return any(
            (
                self.series_added,
                self.series_removed,
                self.series_updated,
                self.books_added,
                self.books_removed,
                self.books_updated,
            )
        )

    def as_payload(self) -> dict[str, object]:
        return {
            "library_id": self.library_id,
            "series_added": self.series_added,
            "series_removed": self.series_removed,
            "series_updated": self.series_updated,
            "books_added": self.books_added,
            "books_removed": self.books_removed,
            "books_updated": self.books_updated,
            "books_unchanged": self.books_unchanged,
        }


__all__ = [
    "BookPage",
    "MediaStatus",
    "ParsedMetadata",
    "ScanSummary",
    "ScannedBook",
    "ScannedSeries",
]
