"""Value types and helpers shared by the database and catalog layers."""

from .clock import current_datetime, normalize_timestamp
from .media import (
    BookPage,
    MediaStatus,
    ParsedMetadata,
    ScannedBook,
    ScannedSeries,
    ScanSummary,
)
from .natural_sort import natural_sort_key, natural_sorted

__all__ = [
    "BookPage",
    "MediaStatus",
    "ParsedMetadata",
    "ScanSummary",
    "ScannedBook",
    "ScannedSeries",
    "current_datetime",
    "natural_sort_key",
    "natural_sorted",
    "normalize_timestamp",
]
