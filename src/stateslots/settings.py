from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .paths import APP_NAME, ENV_DATA_DIR

logger = logging.getLogger(__name__)

ENV_APP_VERSION = "STATESLOTS_APP_VERSION"
ENV_LOG_LEVEL = "STATESLOTS_LOG_LEVEL"

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EngineSettings(BaseModel):
    """Configuration for a SlotStore and its logging."""

    app_name: str = Field(APP_NAME, description="Application name used for the platform data directory")
    application_version: str = Field("0.0.0", description="Version stamped into every save")
    data_dir: Optional[Path] = Field(default=None, description="Override for the data directory (saves live in <data_dir>/saves)")
    serialize_slot_writes: bool = Field(True, description="Serialize concurrent operations on the same slot")
    log_level: str = Field("INFO", description="Root log level used by configure_logging")

    @field_validator("application_version", "app_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LEVELS:
            raise ValueError(f"unknown log level {v!r}")
        return level


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    data_dir = os.getenv(ENV_DATA_DIR)
    if data_dir:
        overrides["data_dir"] = data_dir
    version = os.getenv(ENV_APP_VERSION)
    if version:
        overrides["application_version"] = version
    level = os.getenv(ENV_LOG_LEVEL)
    if level:
        overrides["log_level"] = level
    return overrides


def load_settings(path: Optional[Path] = None) -> EngineSettings:
    """Load settings from an optional YAML file, then apply environment overrides.

    A missing file is not an error: defaults are used and a warning is logged.
    Invalid values raise pydantic.ValidationError.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            data = _load_yaml(path)
            logger.info("Loaded settings from %s", path)
        else:
            logger.warning("Settings file not found: %s", path)
    data.update(_env_overrides())
    settings = EngineSettings(**data)
    logger.debug("Settings resolved: %s", settings)
    return settings
