"""Session-bound repositories for libraries, series and books.

Each repository works inside the caller's session so that several of them can
take part in one transaction (see :func:`bookshelf.database.get_db_session`).
Deletes go through ``Session.delete`` so the ORM cascades to children.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookshelf.core.clock import normalize_timestamp
from bookshelf.core.media import MediaStatus, ScannedBook
from bookshelf.database.models import (
    BookMetadataModel,
    BookModel,
    LibraryModel,
    SeriesModel,
)


class LibraryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, name: str, root: str, *, now: datetime) -> LibraryModel:
        library = LibraryModel(name=name, root=root)
        library.mark_created(now)
        self._session.add(library)
        self._session.flush()
        return library

    def get(self, library_id: int) -> Optional[LibraryModel]:
        return self._session.get(LibraryModel, library_id)

    def get_by_name(self, name: str) -> Optional[LibraryModel]:
        return self._session.execute(
            select(LibraryModel).where(LibraryModel.name == name)
        ).scalar_one_or_none()

    def list_all(self) -> List[LibraryModel]:
        return list(
            self._session.execute(select(LibraryModel).order_by(LibraryModel.id))
            .scalars()
            .all()
        )

    def delete(self, library: LibraryModel) -> None:
        self._session.delete(library)

    def count(self) -> int:
        return self._session.execute(
            select(func.count()).select_from(LibraryModel)
        ).scalar_one()


class SeriesRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, library_id: int, name: str, *, now: datetime) -> SeriesModel:
        series = SeriesModel(library_id=library_id, name=name)
        series.mark_created(now)
        self._session.add(series)
        return series

    def find_by_library(self, library_id: int) -> List[SeriesModel]:
        return list(
            self._session.execute(
                select(SeriesModel)
                .where(SeriesModel.library_id == library_id)
                .order_by(SeriesModel.id)
            )
            .scalars()
            .all()
        )

    def find_by_library_and_name(self, library_id: int, name: str) -> Optional[SeriesModel]:
        return self._session.execute(
            select(SeriesModel).where(
                SeriesModel.library_id == library_id, SeriesModel.name == name
            )
        ).scalar_one_or_none()

    def list_all(self) -> List[SeriesModel]:
        return list(
            self._session.execute(select(SeriesModel).order_by(SeriesModel.id))
            .scalars()
            .all()
        )

    def delete(self, series: SeriesModel) -> None:
        self._session.delete(series)

    def count(self, library_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(SeriesModel)
        if library_id is not None:
            stmt = stmt.where(SeriesModel.library_id == library_id)
        return self._session.execute(stmt).scalar_one()


class BookRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        series: SeriesModel,
        scanned: ScannedBook,
        *,
        number: int,
        now: datetime,
    ) -> BookModel:
        """Attach a new book to ``series`` together with fresh UNKNOWN metadata."""
        book = BookModel(
            name=scanned.name,
            url=scanned.url,
            number=number,
            file_last_modified=normalize_timestamp(scanned.file_last_modified),
            book_metadata=BookMetadataModel(),
        )
        book.mark_created(now)
        series.books.append(book)
        return book

    def get(self, book_id: int) -> Optional[BookModel]:
        return self._session.get(BookModel, book_id)

    def find_by_series(self, series_id: int) -> List[BookModel]:
        return list(
            self._session.execute(
                select(BookModel)
                .where(BookModel.series_id == series_id)
                .order_by(BookModel.number)
            )
            .scalars()
            .all()
        )

    def find_ids_by_status(
        self, status: MediaStatus, *, library_id: Optional[int] = None
    ) -> List[int]:
        stmt = (
            select(BookModel.id)
            .join(BookMetadataModel, BookMetadataModel.book_id == BookModel.id)
            .where(BookMetadataModel.status == status)
            .order_by(BookModel.id)
        )
        if library_id is not None:
            stmt = stmt.join(SeriesModel, SeriesModel.id == BookModel.series_id).where(
                SeriesModel.library_id == library_id
            )
        return list(self._session.execute(stmt).scalars().all())

    def list_all(self) -> List[BookModel]:
        return list(
            self._session.execute(select(BookModel).order_by(BookModel.id))
            .scalars()
            .all()
        )

    def delete(self, book: BookModel) -> None:
        series = book.series
        if series is not None and book in series.books:
            series.books.remove(book)
        self._session.delete(book)

    def count(self, library_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(BookModel)
        if library_id is not None:
            stmt = stmt.join(SeriesModel, SeriesModel.id == BookModel.series_id).where(
                SeriesModel.library_id == library_id
            )
        return self._session.execute(stmt).scalar_one()


__all__ = ["BookRepository", "LibraryRepository", "SeriesRepository"]
