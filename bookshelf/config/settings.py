"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from bookshelf import logging_manager

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PARSE_MAX_WORKERS,
    SUPPORTED_EXTENSIONS,
    VALID_LOG_LEVELS,
)

logger = logging_manager.get_logger().getChild("config")


class CatalogSettings(BaseModel):
    """Typed representation of the catalog configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    database_url: str = DEFAULT_DATABASE_URL
    parse_max_workers: int = DEFAULT_PARSE_MAX_WORKERS
    scanner_extensions: frozenset[str] = Field(default_factory=lambda: SUPPORTED_EXTENSIONS)
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Optional[Path] = None

    @field_validator("parse_max_workers", mode="before")
    @classmethod
    def _normalize_workers(cls, value: Any) -> int:
        try:
            numeric = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PARSE_MAX_WORKERS
        return max(1, numeric)

    @field_validator("scanner_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = value.split(",")
        normalized = set()
        for item in value or ():
            token = str(item).strip().lower()
            if not token:
                continue
            normalized.add(token if token.startswith(".") else f".{token}")
        return frozenset(normalized) or SUPPORTED_EXTENSIONS

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        candidate = str(value or "").strip().upper()
        return candidate if candidate in VALID_LOG_LEVELS else DEFAULT_LOG_LEVEL


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    database_url: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("BOOKSHELF_DATABASE_URL", "DATABASE_URL"),
    )
    parse_max_workers: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("BOOKSHELF_PARSE_WORKERS")
    )
    log_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("BOOKSHELF_LOG_LEVEL")
    )
    log_dir: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("BOOKSHELF_LOG_DIR")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    payload = overrides.model_dump(exclude_none=True)
    secret = payload.get("database_url")
    if isinstance(secret, SecretStr):
        payload["database_url"] = secret.get_secret_value()
    return payload


def apply_settings_updates(
    settings: CatalogSettings, updates: Dict[str, Any]
) -> CatalogSettings:
    """Return a new settings object with ``updates`` merged in."""

    if not updates:
        return settings
    merged = settings.model_dump()
    merged.update(updates)
    return CatalogSettings.model_validate(merged)


__all__ = [
    "CatalogSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
]
