"""Environment settings powered by Pydantic BaseSettings."""

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Process-level configuration read from ``CURATOR_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="CURATOR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path | None = Field(
        default=None, description="YAML file overriding the built-in categories"
    )
    log_level: str = Field(default="INFO", description="Minimum log level name")
    json_logs: bool = Field(default=True, description="Emit JSON log lines")
    default_period: str = Field(default="week", description="Period when none given")
    window_days: int | None = Field(
        default=None, ge=1, description="Override the period's candidate window"
    )

    def log_level_number(self) -> int:
        """Return the numeric logging level for ``log_level``."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
