from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy import Engine

from bookshelf.config import CatalogSettings, apply_logging_settings, reset_settings
from bookshelf.database import configure_engine, dispose_engine, init_schema
from bookshelf.catalog import LibraryManager, LibraryScanner

from tests.helpers.catalog_stubs import ScriptedScanner, TickingClock


@pytest.fixture(autouse=True)
def catalog_database(tmp_path: Path) -> Iterator[Engine]:
    """Fresh SQLite catalog file for every test."""

    engine = configure_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    init_schema()
    yield engine
    dispose_engine()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "BOOKSHELF_CONFIG",
        "BOOKSHELF_DATABASE_URL",
        "DATABASE_URL",
        "BOOKSHELF_PARSE_WORKERS",
        "BOOKSHELF_LOG_LEVEL",
        "BOOKSHELF_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
    apply_logging_settings(CatalogSettings())


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def mock_scanner() -> ScriptedScanner:
    return ScriptedScanner()


@pytest.fixture
def library_scanner(mock_scanner: ScriptedScanner, clock: TickingClock) -> LibraryScanner:
    return LibraryScanner(mock_scanner, clock=clock)


@pytest.fixture
def library_manager(library_scanner: LibraryScanner, clock: TickingClock) -> LibraryManager:
    return LibraryManager(library_scanner, clock=clock)
