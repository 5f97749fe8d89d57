"""
Application settings using Pydantic.

Provides environment-based configuration loading with RUNSTAMP_ prefix.
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from runstamp.core.errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Stamping
    label_prefix: str = "runstamp.io"
    default_namespace: str = "default"

    # Upper bound for a single realization, applied by the CLI
    realize_timeout: float = 30.0

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("realize_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("realize_timeout must be positive")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "RUNSTAMP_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: If environment values fail validation
    """
    try:
        return Settings()
    except ValueError as e:
        raise ConfigurationError(f"Invalid runstamp settings: {e}") from e
