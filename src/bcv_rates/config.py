"""Configuration handling for the BCV rates service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_SOURCE_URL = "https://www.bcv.org.ve/"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class ConfigError(ValueError):
    """Raised when configuration files are invalid or incomplete."""


@dataclass
class SourceSettings:
    """Where the rates page lives and how to fetch it."""

    url: str = DEFAULT_SOURCE_URL
    timeout_seconds: float = 10.0
    verify_ssl: bool = True
    user_agent: str | None = None


@dataclass
class ServerSettings:
    """HTTP server binding."""

    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class LoggingSettings:
    """Logging configuration section."""

    level: str = "INFO"


@dataclass
class Settings:
    """Container for all runtime settings."""

    source: SourceSettings = field(default_factory=SourceSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def log_level(self) -> int:
        return getattr(logging, self.logging.level)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} section must be a mapping.")
    return section


def _as_bool(value: Any, context: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {context}: {value!r}")


def _as_port(value: Any, context: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid port for {context}: {value!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Port out of range for {context}: {port}")
    return port


def _as_level(value: Any, context: str) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"Unknown log level for {context}: {value!r}")
    return level


def load_settings(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from a YAML file, then apply environment overrides.

    ``path=None`` skips the file and starts from the defaults.
    """
    raw: Any = {}
    if path is not None:
        raw = yaml.safe_load(_read_file(path)) or {}
    if not isinstance(raw, dict):
        raise ConfigError("Settings YAML must be a mapping/object.")

    source_section = _section(raw, "source")
    server_section = _section(raw, "server")
    logging_section = _section(raw, "logging")

    defaults = SourceSettings()
    try:
        timeout = float(source_section.get("timeout_seconds", defaults.timeout_seconds))
    except (TypeError, ValueError) as exc:
        raise ConfigError("source.timeout_seconds must be a number.") from exc

    settings = Settings(
        source=SourceSettings(
            url=str(source_section.get("url", defaults.url)),
            timeout_seconds=timeout,
            verify_ssl=_as_bool(source_section.get("verify_ssl", defaults.verify_ssl), "source.verify_ssl"),
            user_agent=source_section.get("user_agent"),
        ),
        server=ServerSettings(
            host=str(server_section.get("host", ServerSettings().host)),
            port=_as_port(server_section.get("port", ServerSettings().port), "server.port"),
        ),
        logging=LoggingSettings(
            level=_as_level(logging_section.get("level", LoggingSettings().level), "logging.level"),
        ),
    )
    return apply_env_overrides(settings, os.environ if environ is None else environ)


def apply_env_overrides(settings: Settings, environ: Mapping[str, str]) -> Settings:
    """Apply ``BCV_SOURCE_URL``, ``BCV_VERIFY_SSL``, ``PORT`` and ``LOG_LEVEL``."""
    if environ.get("BCV_SOURCE_URL"):
        settings.source.url = environ["BCV_SOURCE_URL"]
    if environ.get("BCV_VERIFY_SSL"):
        settings.source.verify_ssl = _as_bool(environ["BCV_VERIFY_SSL"], "BCV_VERIFY_SSL")
    if environ.get("PORT"):
        settings.server.port = _as_port(environ["PORT"], "PORT")
    if environ.get("LOG_LEVEL"):
        settings.logging.level = _as_level(environ["LOG_LEVEL"], "LOG_LEVEL")
    return settings


def _read_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
