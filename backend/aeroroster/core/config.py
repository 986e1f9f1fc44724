# backend/aeroroster/core/config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Runtime configuration for the roster engine."""

    model_config = SettingsConfigDict(
        env_prefix="AERO_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development")
    database_url: str = Field(default="sqlite:///./aeroroster.db")
    sql_echo: bool = False
    log_level: str = Field(default="INFO")

    # Run per-day conflict queries in worker threads with their own sessions.
    # Ignored on SQLite, which shares a single connection in tests.
    conflict_check_parallel: bool = True

    # Timeline window used when a tenant has no usable business hours
    default_timeline_start_hour: int = Field(default=9, ge=0, le=23)
    default_timeline_end_hour: int = Field(default=17, ge=1, le=24)
    default_timeline_interval_minutes: int = Field(default=30, ge=5)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


settings = Settings()
