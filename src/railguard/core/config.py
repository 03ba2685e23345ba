"""
Runtime settings for the Railguard CLI.

These are *process* settings (where to find the policy, where to write the
audit log, how verbose to be), not policy. They come from ``RAILGUARD_*``
environment variables and can be overridden by command-line options.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from railguard.core.constants import ENV_AUDIT_LOG, ENV_CONFIG, ENV_LOG_LEVEL
from railguard.core.exceptions import ConfigError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}
_LOG_FORMAT = "railguard: %(levelname)s %(name)s: %(message)s"


class RailguardSettings(BaseModel):
    config_path: Path | None = None
    audit_log: Path | None = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {sorted(_LOG_LEVELS)}")
        return v.upper()

    @field_validator("config_path", "audit_log", mode="before")
    @classmethod
    def empty_is_unset(cls, v: object) -> object:
        return v or None


def load_settings(**overrides: object) -> RailguardSettings:
    """
    Build settings from the environment, then apply non-None ``overrides``.

    Priority (highest to lowest):
      1. ``overrides`` (command-line options)
      2. Environment variables (``RAILGUARD_*``)
      3. Defaults

    Raises:
        ConfigError: if a value is invalid (e.g. an unknown log level).
    """
    data: dict[str, object] = {}
    if config := os.environ.get(ENV_CONFIG):
        data["config_path"] = config
    if audit := os.environ.get(ENV_AUDIT_LOG):
        data["audit_log"] = audit
    if level := os.environ.get(ENV_LOG_LEVEL):
        data["log_level"] = level
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RailguardSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid Railguard settings: {exc}") from exc


_handler: logging.Handler | None = None


def configure_logging(level: str = "WARNING") -> None:
    """
    Send Railguard's log records to stderr at ``level``.

    stdout is reserved for the hook protocol, so nothing is ever logged there.
    Calling this more than once replaces the previous handler.
    """
    global _handler
    root = logging.getLogger("railguard")
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(level.upper())
