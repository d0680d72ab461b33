"""Parse book content and persist the resulting metadata."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from bookshelf import logging_manager as log_mgr
from bookshelf.core.clock import current_datetime
from bookshelf.core.media import MediaStatus, ParsedMetadata
from bookshelf.database import get_db_session
from bookshelf.database.models import BookMetadataModel, BookModel, LibraryModel

from .errors import UnsupportedFormatError
from .interfaces import Parser
from .locks import KeyedLock
from .repository import BookRepository

logger = log_mgr.get_logger().getChild("catalog.lifecycle")

BookRef = Union[BookModel, int]


@dataclass(frozen=True)
class _SourceState:
    url: str
    file_last_modified: datetime


class BookLifecycle:
    """Run the Parser for eligible books on a worker pool and store the results.

    At most one parse per book is queued or running at a time; asking again for
    a book already in flight returns the same future. Cancelling a future that
    has not started abandons only that book.
    """

    def __init__(
        self,
        parser: Parser,
        *,
        max_workers: Optional[int] = None,
        clock: Callable[[], datetime] = current_datetime,
    ) -> None:
        if max_workers is None:
            from bookshelf.config import get_settings

            max_workers = get_settings().parse_max_workers
        self._parser = parser
        self._clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="bookshelf-parse"
        )
        self._book_locks = KeyedLock()
        self._inflight: Dict[int, Future] = {}
        self._guard = threading.Lock()

    def __enter__(self) -> "BookLifecycle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)

    def parse_and_persist(self, book: BookRef) -> "Future[Optional[BookModel]]":
        """Schedule parsing of ``book``; the future resolves to the refreshed book.

        The future resolves to ``None`` when the book no longer exists by the
        time its result would be written.
        """
        book_id = book if isinstance(book, int) else book.id
        with self._guard:
            existing = self._inflight.get(book_id)
            if existing is not None and not existing.done():
                return existing
            future = self._executor.submit(self._parse_and_persist, book_id)
            self._inflight[book_id] = future
        future.add_done_callback(lambda done, key=book_id: self._forget(key, done))
        return future

    def parse_unparsed(self, library: Optional[Union[LibraryModel, int]] = None) -> List[Future]:
        """Schedule every book whose metadata is still UNKNOWN."""
        library_id = library.id if isinstance(library, LibraryModel) else library
        with get_db_session() as session:
            book_ids = BookRepository(session).find_ids_by_status(
                MediaStatus.UNKNOWN, library_id=library_id
            )
        logger.info(
            "Scheduling %d book(s) for parsing",
            len(book_ids),
            extra={"event": "catalog.parse.scheduled", "library_id": library_id},
        )
        return [self.parse_and_persist(book_id) for book_id in book_ids]

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def _forget(self, book_id: int, future: Future) -> None:
        with self._guard:
            if self._inflight.get(book_id) is future:
                del self._inflight[book_id]

    def _parse_and_persist(self, book_id: int) -> Optional[BookModel]:
        with log_mgr.log_context(book_id=book_id):
            source = self._load_source(book_id)
            if source is None:
                logger.info(
                    "Book disappeared before parsing",
                    extra={"event": "catalog.parse.missing"},
                )
                return None

            parsed = self._run_parser(source.url)

            with self._book_locks.hold(book_id):
                with get_db_session() as session:
                    book = BookRepository(session).get(book_id)
                    if book is None:
                        logger.info(
                            "Book deleted while parsing; result discarded",
                            extra={"event": "catalog.parse.missing"},
                        )
                        return None
                    if (book.url, book.file_last_modified) != (
                        source.url,
                        source.file_last_modified,
                    ):
                        logger.info(
                            "Book changed while parsing; result discarded",
                            extra={"event": "catalog.parse.stale"},
                        )
                        return book
                    if book.book_metadata is None:
                        book.book_metadata = BookMetadataModel()
                    _apply_parsed(book.book_metadata, parsed)
                    book.touch(self._clock())

            logger.info(
                "Book metadata stored",
                extra={"event": "catalog.parse.stored", "status": parsed.status.value},
            )
            return book

    def _load_source(self, book_id: int) -> Optional[_SourceState]:
        with get_db_session() as session:
            book = BookRepository(session).get(book_id)
            if book is None:
                return None
            return _SourceState(url=book.url, file_last_modified=book.file_last_modified)

    def _run_parser(self, url: str) -> ParsedMetadata:
        try:
            return self._parser.parse(url)
        except UnsupportedFormatError as exc:
            logger.info(
                "Unsupported book format: %s",
                exc,
                extra={"event": "catalog.parse.unsupported", "url": url},
            )
            return ParsedMetadata(status=MediaStatus.UNSUPPORTED)
        except Exception as exc:
            logger.warning(
                "Failed to parse book: %s",
                exc,
                exc_info=True,
                extra={"event": "catalog.parse.failed", "url": url},
            )
            return ParsedMetadata(status=MediaStatus.ERROR)


def _apply_parsed(metadata: BookMetadataModel, parsed: ParsedMetadata) -> None:
    if parsed.status is MediaStatus.READY:
        metadata.status = MediaStatus.READY
        metadata.media_type = parsed.media_type
        metadata.thumbnail = parsed.thumbnail
        metadata.pages = parsed.pages
        return
    # UNKNOWN from a parser would make the book eligible forever.
    status = MediaStatus.ERROR if parsed.status is MediaStatus.UNKNOWN else parsed.status
    metadata.reset()
    metadata.status = status


__all__ = ["BookLifecycle"]
