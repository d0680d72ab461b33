"""High-level coordination of libraries, scan passes and metadata parsing."""

from __future__ import annotations

from concurrent.futures import Future
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError

from bookshelf import logging_manager as log_mgr
from bookshelf.core.clock import current_datetime
from bookshelf.core.media import ScanSummary
from bookshelf.database import get_db_session
from bookshelf.database.models import LibraryModel

from .book_lifecycle import BookLifecycle
from .errors import LibraryConflictError, LibraryNotFoundError, ScanError
from .library_scanner import LibraryScanner
from .repository import LibraryRepository

logger = log_mgr.get_logger().getChild("catalog.manager")

ScanOutcome = Union[ScanSummary, ScanError]


class LibraryManager:
    """Create and remove libraries and drive scan-then-parse cycles."""

    def __init__(
        self,
        library_scanner: LibraryScanner,
        lifecycle: Optional[BookLifecycle] = None,
        *,
        clock: Callable[[], datetime] = current_datetime,
    ) -> None:
        self._library_scanner = library_scanner
        self._lifecycle = lifecycle
        self._clock = clock

    def add_library(self, name: str, root: Union[str, Path]) -> LibraryModel:
        normalized = name.strip()
        if not normalized:
            raise ValueError("Library name must not be empty")
        try:
            with get_db_session() as session:
                repository = LibraryRepository(session)
                if repository.get_by_name(normalized) is not None:
                    raise LibraryConflictError(f"Library {normalized!r} already exists")
                library = repository.create(
                    normalized, str(Path(root).expanduser()), now=self._clock()
                )
        except IntegrityError as exc:
            raise LibraryConflictError(f"Library {normalized!r} already exists") from exc
        logger.info(
            "Library added",
            extra={"event": "catalog.library.added", "library_id": library.id},
        )
        return library

    def get_library(self, library_id: int) -> LibraryModel:
        with get_db_session() as session:
            library = LibraryRepository(session).get(library_id)
        if library is None:
            raise LibraryNotFoundError(f"Library {library_id} does not exist")
        return library

    def list_libraries(self) -> List[LibraryModel]:
        with get_db_session() as session:
            return LibraryRepository(session).list_all()

    def delete_library(self, library_id: int) -> None:
        """Remove a library with all of its series, books and metadata."""
        with self._library_scanner.library_lock(library_id):
            with get_db_session() as session:
                repository = LibraryRepository(session)
                library = repository.get(library_id)
                if library is None:
                    raise LibraryNotFoundError(f"Library {library_id} does not exist")
                repository.delete(library)
        logger.info(
            "Library deleted",
            extra={"event": "catalog.library.deleted", "library_id": library_id},
        )

    def scan_library(self, library_id: int) -> Tuple[ScanSummary, List[Future]]:
        """Reconcile one library, then schedule parsing for its unparsed books."""
        summary = self._library_scanner.scan_root_folder(library_id)
        futures: List[Future] = []
        if self._lifecycle is not None:
            futures = self._lifecycle.parse_unparsed(library_id)
        return summary, futures

    def scan_all_libraries(self) -> Dict[int, ScanOutcome]:
        """Scan every library; a failing library does not stop the others."""
        outcomes: Dict[int, ScanOutcome] = {}
        for library in self.list_libraries():
            try:
                summary, _ = self.scan_library(library.id)
            except ScanError as exc:
                logger.error(
                    "Library scan failed: %s",
                    exc,
                    extra={"event": "catalog.scan.failed", "library_id": library.id},
                )
                outcomes[library.id] = exc
                continue
            outcomes[library.id] = summary
        return outcomes


__all__ = ["LibraryManager", "ScanOutcome"]
