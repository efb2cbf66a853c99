"""
Configuration settings for the kotoba learning engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///kotoba.db",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo every SQL statement to the log",
    )
    sqlite_busy_timeout_ms: int = Field(
        default=10000,
        description="How long a SQLite writer waits for the lock before failing",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8080,
        description="API server port",
    )

    # ========================================
    # Leaderboard
    # ========================================
    leaderboard_timezone: str = Field(
        default="UTC",
        description="IANA time zone that daily/weekly/monthly windows are computed in",
    )
    leaderboard_default_limit: int = Field(
        default=100,
        description="Number of entries returned when no limit is given",
    )

    # ========================================
    # Learners
    # ========================================
    avatar_base_url: str | None = Field(
        default="https://assets.peatch.io",
        description="Base URL for randomly assigned avatars (None disables assignment)",
    )
    avatar_count: int = Field(
        default=30,
        description="Number of avatar images available under <base>/avatars/",
    )
    default_exercise_kinds: str = Field(
        default="question,translation,grammar,audio",
        description="Comma-separated exercise kinds offered by RequestExercise",
    )

    def get_exercise_kinds(self) -> list[str]:
        """Parse the configured exercise kinds."""
        return [k.strip() for k in self.default_exercise_kinds.split(",") if k.strip()]

    def get_leaderboard_config(self) -> dict[str, object]:
        """Get leaderboard configuration as a dictionary."""
        return {
            "timezone": self.leaderboard_timezone,
            "default_limit": self.leaderboard_default_limit,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
