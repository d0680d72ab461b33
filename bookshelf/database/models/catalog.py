"""Catalog models: libraries, series, books, book metadata and pages."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy import (
    Enum,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookshelf.core.media import BookPage, MediaStatus
from bookshelf.core.natural_sort import natural_sorted

from ..base import AuditMixin, Base


class LibraryModel(AuditMixin, Base):
    __tablename__ = "libraries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    root: Mapped[str] = mapped_column(Text, nullable=False)

    series: Mapped[list[SeriesModel]] = relationship(
        back_populates="library", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"LibraryModel(id={self.id!r}, name={self.name!r}, root={self.root!r})"


class SeriesModel(AuditMixin, Base):
    __tablename__ = "series"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    library_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("libraries.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    library: Mapped[LibraryModel] = relationship(back_populates="series")
    books: Mapped[list[BookModel]] = relationship(
        back_populates="series",
        cascade="all, delete-orphan",
        order_by="BookModel.number",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("library_id", "name", name="uq_series_library_name"),
    )

    def __repr__(self) -> str:
        return f"SeriesModel(id={self.id!r}, name={self.name!r})"


class BookModel(AuditMixin, Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_last_modified: Mapped[datetime] = mapped_column(nullable=False)

    series: Mapped[SeriesModel] = relationship(back_populates="books")
    book_metadata: Mapped[BookMetadataModel] = relationship(
        back_populates="book",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_books_series", "series_id"),
        Index("idx_books_url", "url"),
    )

    def __repr__(self) -> str:
        return f"BookModel(id={self.id!r}, name={self.name!r}, url={self.url!r})"


class BookPageModel(Base):
    __tablename__ = "book_metadata_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_metadata_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("book_metadata.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    media_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (Index("idx_pages_metadata", "book_metadata_id", "number"),)

    def to_page(self) -> BookPage:
        return BookPage(
            file_name=self.file_name,
            media_type=self.media_type,
            width=self.width,
            height=self.height,
        )


class BookMetadataModel(Base):
    """Parsed information about a book; exactly one row per book.

    Pages are only reachable through :attr:`pages`, which always stores them
    in natural order of file name and hands out an immutable tuple.
    """

    __tablename__ = "book_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    status: Mapped[MediaStatus] = mapped_column(
        Enum(MediaStatus, native_enum=False, length=20),
        nullable=False,
        default=MediaStatus.UNKNOWN,
    )
    media_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    thumbnail: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)

    book: Mapped[BookModel] = relationship(back_populates="book_metadata")
    _pages: Mapped[list[BookPageModel]] = relationship(
        cascade="all, delete-orphan",
        order_by=BookPageModel.number,
        lazy="selectin",
    )

    def __init__(
        self,
        *,
        status: MediaStatus = MediaStatus.UNKNOWN,
        media_type: Optional[str] = None,
        thumbnail: Optional[bytes] = None,
        pages: Iterable[BookPage] = (),
    ) -> None:
        self.status = MediaStatus(status)
        self.media_type = media_type
        self.thumbnail = thumbnail
        self.pages = pages

    @property
    def pages(self) -> Tuple[BookPage, ...]:
        return tuple(row.to_page() for row in self._pages)

    @pages.setter
    def pages(self, value: Iterable[BookPage]) -> None:
        ordered = natural_sorted(value, key=lambda page: page.file_name)
        self._pages.clear()
        for number, page in enumerate(ordered):
            self._pages.append(
                BookPageModel(
                    number=number,
                    file_name=page.file_name,
                    media_type=page.media_type,
                    width=page.width,
                    height=page.height,
                )
            )

    def reset(self) -> None:
        """Forget everything parsed so far; the book must be parsed again."""
        self.status = MediaStatus.UNKNOWN
        self.media_type = None
        self.thumbnail = None
        self._pages.clear()

    def __repr__(self) -> str:
        return f"BookMetadataModel(book_id={self.book_id!r}, status={self.status!r})"
