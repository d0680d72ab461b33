"""Configuration loading utilities."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from bookshelf import logging_manager

from .constants import CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH, SENSITIVE_CONFIG_KEYS
from .settings import CatalogSettings, apply_settings_updates, load_environment_overrides

logger = logging_manager.get_logger().getChild("config")

_ACTIVE_SETTINGS: Optional[CatalogSettings] = None


def _read_config_json(path: Optional[Path]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        logger.debug(
            "No configuration found at %s.",
            path,
            extra={"event": "config.file.missing"},
        )
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(
            "Error loading configuration from %s: %s. Proceeding without it.",
            path,
            exc,
            extra={"event": "config.file.error"},
        )
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Configuration at %s is not a JSON object; ignoring it.",
            path,
            extra={"event": "config.file.invalid"},
        )
        return {}
    return data


def _resolve_config_path(config_path: Optional[Path]) -> Path:
    if config_path is not None:
        return Path(config_path)
    candidate = os.environ.get(CONFIG_PATH_ENV, "").strip()
    return Path(candidate) if candidate else DEFAULT_CONFIG_PATH


def _masked(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: ("***" if key in SENSITIVE_CONFIG_KEYS else value)
        for key, value in payload.items()
    }


def load_configuration(config_path: Optional[Path] = None) -> CatalogSettings:
    """Build settings from defaults, the JSON config file, then the environment."""

    path = _resolve_config_path(config_path)
    file_payload = _read_config_json(path)
    try:
        settings = CatalogSettings.model_validate(file_payload)
    except ValidationError as exc:
        logger.warning(
            "Invalid configuration in %s; using defaults.",
            path,
            extra={"event": "config.file.validation_error", "error": str(exc)},
        )
        settings = CatalogSettings()

    overrides = load_environment_overrides()
    settings = apply_settings_updates(settings, overrides)
    logger.debug(
        "Configuration loaded",
        extra={
            "event": "config.loaded",
            "source": str(path),
            "overrides": _masked(overrides),
        },
    )
    return settings


def apply_logging_settings(settings: CatalogSettings) -> None:
    """Push the configured level and log directory onto the package logger."""

    logging_manager.configure_logging_level(
        log_level=logging.getLevelName(settings.log_level)
    )
    logging_manager.configure_log_directory(settings.log_dir)


def get_settings() -> CatalogSettings:
    """Return the active settings, loading and applying them on first use."""

    global _ACTIVE_SETTINGS
    if _ACTIVE_SETTINGS is None:
        settings = load_configuration()
        apply_logging_settings(settings)
        _ACTIVE_SETTINGS = settings
    return _ACTIVE_SETTINGS


def set_settings(settings: CatalogSettings) -> None:
    global _ACTIVE_SETTINGS
    apply_logging_settings(settings)
    _ACTIVE_SETTINGS = settings


def reset_settings() -> None:
    """Forget cached settings so the next ``get_settings`` reloads them."""

    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None
