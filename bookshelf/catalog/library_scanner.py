"""Reconcile the persisted catalog of a library with what its Scanner observes."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Sequence, Union

from sqlalchemy.orm import Session

from bookshelf import logging_manager as log_mgr
from bookshelf.core.clock import current_datetime, normalize_timestamp
from bookshelf.core.media import ScannedSeries, ScanSummary
from bookshelf.database import get_db_session
from bookshelf.database.models import BookMetadataModel, BookModel, LibraryModel, SeriesModel
from bookshelf.observability import catalog_operation

from .errors import LibraryNotFoundError, ScanError, SnapshotConsistencyError
from .interfaces import Scanner
from .locks import KeyedLock
from .repository import BookRepository, LibraryRepository, SeriesRepository

logger = log_mgr.get_logger().getChild("catalog.scanner")

LibraryRef = Union[LibraryModel, int]


class LibraryScanner:
    """Run scan passes that converge a library's series and books to the filesystem.

    A pass calls the Scanner outside of any transaction, then applies the whole
    diff in a single session: either every mutation for the library commits or
    none does. Passes for the same library are serialised; different libraries
    never share state and may be scanned concurrently.
    """

    def __init__(
        self,
        scanner: Scanner,
        *,
        clock: Callable[[], datetime] = current_datetime,
    ) -> None:
        self._scanner = scanner
        self._clock = clock
        self._library_locks = KeyedLock()

    @contextmanager
    def library_lock(self, library_id: int) -> Iterator[None]:
        """Hold the lock that keeps other passes off ``library_id``."""
        with self._library_locks.hold(library_id):
            yield

    def scan_root_folder(self, library: LibraryRef) -> ScanSummary:
        library_id = library if isinstance(library, int) else library.id
        with self.library_lock(library_id), log_mgr.log_context(library_id=library_id):
            with catalog_operation("library.scan", attributes={"library_id": library_id}):
                root = self._load_root(library_id)
                snapshot = self._scan(library_id, root)
                _validate_snapshot(snapshot)
                with get_db_session() as session:
                    summary = self._reconcile(session, library_id, snapshot)
            logger.info(
                "Library scan completed",
                extra={"event": "catalog.scan.completed", **summary.as_payload()},
            )
            return summary

    def _load_root(self, library_id: int) -> Path:
        with get_db_session() as session:
            library = LibraryRepository(session).get(library_id)
            if library is None:
                raise LibraryNotFoundError(f"Library {library_id} does not exist")
            return Path(library.root)

    def _scan(self, library_id: int, root: Path) -> List[ScannedSeries]:
        try:
            return list(self._scanner.scan(root))
        except ScanError:
            raise
        except Exception as exc:
            raise ScanError(f"Failed to scan library {library_id} at {root}: {exc}") from exc

    def _reconcile(
        self, session: Session, library_id: int, snapshot: Sequence[ScannedSeries]
    ) -> ScanSummary:
        if LibraryRepository(session).get(library_id) is None:
            raise LibraryNotFoundError(f"Library {library_id} was deleted during the scan")

        now = self._clock()
        series_repository = SeriesRepository(session)
        book_repository = BookRepository(session)
        summary = ScanSummary(library_id=library_id)

        # A series observed without books is treated like a missing one.
        snapshot = [scanned for scanned in snapshot if scanned.books]

        persisted: Dict[str, SeriesModel] = {
            series.name: series for series in series_repository.find_by_library(library_id)
        }
        locations: Dict[str, str] = {
            book.url: series.name for series in persisted.values() for book in series.books
        }

        for scanned in snapshot:
            existing = persisted.get(scanned.name)
            if existing is None:
                series = series_repository.create(library_id, scanned.name, now=now)
                for number, scanned_book in enumerate(scanned.books):
                    self._note_move(locations, scanned.name, scanned_book.url, summary)
                    book_repository.create(series, scanned_book, number=number, now=now)
                summary.series_added += 1
                summary.books_added += len(scanned.books)
                logger.debug(
                    "Series added",
                    extra={"event": "catalog.scan.series_added", "series": scanned.name},
                )
                continue

            if self._reconcile_books(existing, scanned, now, book_repository, locations, summary):
                existing.touch(now)
                summary.series_updated += 1

        observed_names = {scanned.name for scanned in snapshot}
        for name, series in persisted.items():
            if name in observed_names:
                continue
            summary.series_removed += 1
            summary.books_removed += len(series.books)
            series_repository.delete(series)
            logger.debug(
                "Series removed",
                extra={"event": "catalog.scan.series_removed", "series": name},
            )

        session.flush()
        return summary

    def _reconcile_books(
        self,
        series: SeriesModel,
        scanned: ScannedSeries,
        now: datetime,
        book_repository: BookRepository,
        locations: Dict[str, str],
        summary: ScanSummary,
    ) -> bool:
        persisted_books: Dict[str, BookModel] = {book.url: book for book in series.books}
        observed_urls = set()
        changed = False

        for number, scanned_book in enumerate(scanned.books):
            observed_urls.add(scanned_book.url)
            book = persisted_books.get(scanned_book.url)
            if book is None:
                self._note_move(locations, scanned.name, scanned_book.url, summary)
                book_repository.create(series, scanned_book, number=number, now=now)
                summary.books_added += 1
                changed = True
                continue

            if book.number != number:
                book.number = number
            observed_modified = normalize_timestamp(scanned_book.file_last_modified)
            if book.name == scanned_book.name and book.file_last_modified == observed_modified:
                summary.books_unchanged += 1
                continue

            book.name = scanned_book.name
            book.file_last_modified = observed_modified
            book.touch(now)
            if book.book_metadata is None:
                book.book_metadata = BookMetadataModel()
            else:
                book.book_metadata.reset()
            summary.books_updated += 1
            changed = True
            logger.debug(
                "Book changed on disk; metadata reset",
                extra={"event": "catalog.scan.book_updated", "url": book.url},
            )

        for url, book in persisted_books.items():
            if url in observed_urls:
                continue
            book_repository.delete(book)
            summary.books_removed += 1
            changed = True

        return changed

    @staticmethod
    def _note_move(
        locations: Dict[str, str], series_name: str, url: str, summary: ScanSummary
    ) -> None:
        previous = locations.get(url)
        if previous is None or previous == series_name:
            return
        summary.moved_urls.append(url)
        logger.warning(
            "Book moved between series; it is catalogued as a new book",
            extra={
                "event": "catalog.scan.book_moved",
                "url": url,
                "from_series": previous,
                "to_series": series_name,
            },
        )


def _validate_snapshot(snapshot: Sequence[ScannedSeries]) -> None:
    seen_series = set()
    for scanned in snapshot:
        if scanned.name in seen_series:
            raise SnapshotConsistencyError(
                f"Scanner reported series {scanned.name!r} more than once"
            )
        seen_series.add(scanned.name)
        seen_urls = set()
        for book in scanned.books:
            if book.url in seen_urls:
                raise SnapshotConsistencyError(
                    f"Scanner reported book {book.url!r} twice in series {scanned.name!r}"
                )
            seen_urls.add(book.url)


__all__ = ["LibraryScanner"]
