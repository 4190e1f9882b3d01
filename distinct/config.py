"""Configuration management using Pydantic BaseSettings.

This module provides centralized configuration for views-distinct. Values
come from ``DISTINCT_*`` environment variables or a ``.env`` file.
"""
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Config(BaseSettings):
    """Main configuration class."""

    model_config = SettingsConfigDict(
        env_prefix="DISTINCT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Behaviour
    enabled: bool = Field(True, description="Global switch for both dedup passes")
    settings_file: Path = Field(
        Path("config/distinct.yaml"),
        description="YAML file holding per view/display/field settings",
    )
    default_display: str = Field(
        "default", min_length=1, description="Display whose settings apply when a display has none"
    )

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format"
    )
    log_max_context_length: int = Field(
        1000, ge=100, le=10000, description="Max length of JSON log context"
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f'Invalid log level: {v}. Valid options: {VALID_LOG_LEVELS}')
        return v.upper()

    def validate_configuration(self) -> List[str]:
        """Validate the configuration and return any issues."""
        issues = []

        if self.settings_file.suffix.lower() not in (".yaml", ".yml"):
            issues.append("DISTINCT_SETTINGS_FILE must point to a .yaml/.yml file")
        if self.settings_file.exists() and not self.settings_file.is_file():
            issues.append("DISTINCT_SETTINGS_FILE exists but is not a file")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration."""
        from distinct.utils.logger import log_info

        log_info("Configuration loaded",
                 enabled=self.enabled,
                 settings_file=str(self.settings_file),
                 settings_file_present=self.settings_file.exists(),
                 default_display=self.default_display,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
