"""Shared constants for the configuration package."""
from __future__ import annotations

import os
from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
CONFIG_PATH_ENV = "BOOKSHELF_CONFIG"
DEFAULT_CONFIG_PATH = Path("conf") / "bookshelf.json"

DEFAULT_DATABASE_URL = "sqlite:///bookshelf.db"
DEFAULT_PARSE_MAX_WORKERS = min(8, (os.cpu_count() or 1) + 2)
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
    {".cbz", ".zip", ".cbr", ".rar", ".cb7", ".7z", ".pdf", ".epub"}
)
SENSITIVE_CONFIG_KEYS = {"database_url"}

__all__ = [
    "MODULE_DIR",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_PARSE_MAX_WORKERS",
    "DEFAULT_LOG_LEVEL",
    "VALID_LOG_LEVELS",
    "SUPPORTED_EXTENSIONS",
    "SENSITIVE_CONFIG_KEYS",
]
