"""Environment-driven settings."""

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    CONFIG_PATH_ENV_VAR,
    DEFAULT_GEMINI_CONFIG_PATH,
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV_VAR,
)


class Settings(BaseModel):
    """Runtime settings for the MCP manager."""

    config_path: Path = Field(DEFAULT_GEMINI_CONFIG_PATH, description="Shared Gemini config file")
    log_level: Literal["error", "warning", "info", "debug"] = DEFAULT_LOG_LEVEL

    @field_validator("config_path")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            # Accept the node-style "warn" too
            if value == "warn":
                return "warning"
        return value

    @property
    def logging_level(self) -> str:
        """Level name as understood by the logging module."""
        return self.log_level.upper()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values = {}
        if environ.get(CONFIG_PATH_ENV_VAR):
            values["config_path"] = Path(environ[CONFIG_PATH_ENV_VAR])
        if environ.get(LOG_LEVEL_ENV_VAR):
            values["log_level"] = environ[LOG_LEVEL_ENV_VAR]
        return cls(**values)
