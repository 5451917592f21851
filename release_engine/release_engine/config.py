"""Release engine configuration loaded from environment variables."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ReleaseEnv(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with RELEASE_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    env: ReleaseEnv = ReleaseEnv.DEV
    debug: bool = False

    # Differ
    max_concurrent_flow_checks: int = Field(default=16, ge=1)

    # Logging
    structured_logging: bool = False
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: object) -> str:
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings for environment: %s", settings.env.value)

    return settings
