"""Configuration management for bookshelf."""
from __future__ import annotations

from .constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_DATABASE_URL,
    DEFAULT_PARSE_MAX_WORKERS,
    SUPPORTED_EXTENSIONS,
)
from .loader import (
    apply_logging_settings,
    get_settings,
    load_configuration,
    reset_settings,
    set_settings,
)
from .settings import CatalogSettings, EnvironmentOverrides, load_environment_overrides

__all__ = [
    "CatalogSettings",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_PARSE_MAX_WORKERS",
    "EnvironmentOverrides",
    "SUPPORTED_EXTENSIONS",
    "apply_logging_settings",
    "get_settings",
    "load_configuration",
    "load_environment_overrides",
    "reset_settings",
    "set_settings",
]
