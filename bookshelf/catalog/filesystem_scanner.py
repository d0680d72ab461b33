"""Default Scanner: one series per directory holding supported book files."""

from __future__ import annotations

import os
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Collection, Dict, Iterable, List, Optional

from bookshelf import logging_manager as log_mgr
from bookshelf.core.media import ScannedBook, ScannedSeries
from bookshelf.core.natural_sort import natural_sorted

from .errors import ScanError

logger = log_mgr.get_logger().getChild("catalog.filesystem_scanner")


class FileSystemScanner:
    """Walk a library root and group supported files by their directory.

    Hidden files and directories (leading dot) are skipped. A series is named
    after its directory path relative to the root, so same-named directories in
    different places stay distinct; files directly under the root form a series
    named after the root itself. Series come out in natural order of that
    name and books in natural order of their file name.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None) -> None:
        if extensions is None:
            from bookshelf.config import get_settings

            extensions = get_settings().scanner_extensions
        self._extensions = frozenset(ext.lower() for ext in extensions)

    def scan(self, root: Path) -> List[ScannedSeries]:
        root = Path(root)
        if not root.is_dir():
            raise ScanError(f"Library root {root} is not a readable directory")

        grouped: Dict[Path, List[Path]] = defaultdict(list)

        def _raise(error: OSError) -> None:
            raise error

        try:
            for directory, dirnames, filenames in os.walk(root, onerror=_raise):
                dirnames[:] = [name for name in dirnames if not name.startswith(".")]
                for filename in filenames:
                    if filename.startswith("."):
                        continue
                    if Path(filename).suffix.lower() in self._extensions:
                        grouped[Path(directory)].append(Path(directory) / filename)
            names = _series_names(root, grouped)
            snapshot = [
                self._build_series(names[directory], grouped[directory])
                for directory in natural_sorted(grouped, key=lambda path: names[path])
            ]
        except OSError as exc:
            raise ScanError(f"Failed to walk library root {root}: {exc}") from exc

        logger.debug(
            "Filesystem scanned",
            extra={
                "event": "catalog.fs.scanned",
                "root": str(root),
                "series": len(snapshot),
            },
        )
        return snapshot

    @staticmethod
    def _build_series(name: str, files: List[Path]) -> ScannedSeries:
        books = [
            ScannedBook(
                name=path.stem,
                url=path.resolve().as_uri(),
                file_last_modified=datetime.fromtimestamp(
                    path.stat().st_mtime, tz=timezone.utc
                ).replace(tzinfo=None),
            )
            for path in natural_sorted(files, key=lambda path: path.name)
        ]
        return ScannedSeries(name=name, books=books)


def _series_names(root: Path, directories: Collection[Path]) -> Dict[Path, str]:
    names = {
        directory: directory.relative_to(root).as_posix()
        for directory in directories
        if directory != root
    }
    if root in directories:
        # A top-level directory may already carry the root's own name.
        root_name = root.name or root.as_posix()
        names[root] = "." if root_name in names.values() else root_name
    return names


__all__ = ["FileSystemScanner"]
