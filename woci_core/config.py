"""Helper utilities for loading woci settings."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from .paths import UserDirs

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"
_TRUE_VALUES = {"1", "true", "yes", "on"}


def default_config_path() -> Path:
    """Return the platform-specific default config path."""

    return UserDirs.from_env().config_dir() / CONFIG_FILE_NAME


@dataclass(frozen=True)
class Settings:
    timeout_seconds: float = 30.0
    verify_tls: bool = True
    log_level: str = "WARNING"


def load_settings(path: Path | None = None) -> Settings:
    """Read ``config.toml`` and apply ``WOCI_*`` environment overrides.

    A missing or unreadable file yields the defaults.
    """

    config_path = path or default_config_path()
    settings = _read_file(config_path)
    return _apply_env(settings)


def _read_file(config_path: Path) -> Settings:
    if not config_path.exists():
        return Settings()
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return Settings()
    settings = Settings()
    level = payload.get("log_level")
    if isinstance(level, str) and level.strip():
        settings = replace(settings, log_level=level.strip().upper())
    registry = payload.get("registry")
    if not isinstance(registry, dict):
        return settings
    try:
        timeout = float(registry.get("timeout_seconds", settings.timeout_seconds))
    except (TypeError, ValueError):
        timeout = settings.timeout_seconds
    verify_tls = registry.get("verify_tls", settings.verify_tls)
    if not isinstance(verify_tls, bool):
        logger.warning("ignoring non-boolean verify_tls=%r in %s", verify_tls, config_path)
        verify_tls = settings.verify_tls
    return replace(settings, timeout_seconds=max(timeout, 1.0), verify_tls=verify_tls)


def _apply_env(settings: Settings) -> Settings:
    timeout = os.environ.get("WOCI_TIMEOUT", "").strip()
    if timeout:
        try:
            settings = replace(settings, timeout_seconds=max(float(timeout), 1.0))
        except ValueError:
            logger.warning("ignoring invalid WOCI_TIMEOUT=%r", timeout)
    verify = os.environ.get("WOCI_VERIFY_TLS", "").strip()
    if verify:
        settings = replace(settings, verify_tls=verify.lower() in _TRUE_VALUES)
    level = os.environ.get("WOCI_LOG_LEVEL", "").strip()
    if level:
        settings = replace(settings, log_level=level.upper())
    return settings
