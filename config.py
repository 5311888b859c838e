"""
Configuration settings for prepdeck.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PREPDECK_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # SM-2 Scheduling
    # ========================================
    sm2_initial_easiness: float = Field(
        default=2.5,
        description="Easiness factor assumed for a card that has never been reviewed",
    )
    sm2_minimum_easiness: float = Field(
        default=1.3,
        ge=1.0,
        description="Floor for the easiness factor",
    )
    sm2_first_interval: int = Field(
        default=1,
        ge=1,
        description="Days until the next review after the first pass",
    )
    sm2_second_interval: int = Field(
        default=6,
        ge=1,
        description="Days until the next review after the second pass",
    )

    # ========================================
    # Mastery Thresholds
    # ========================================
    mastery_reviewing_min_repetitions: int = Field(
        default=1,
        ge=1,
        description="Consecutive passes needed to leave 'learning'",
    )
    mastery_mastered_min_repetitions: int = Field(
        default=5,
        ge=1,
        description="Consecutive passes needed to count as 'mastered'",
    )

    # ========================================
    # Study Queue Limits
    # ========================================
    daily_max_new: int = Field(default=10, ge=0, description="New cards in a daily review")
    daily_max_review: int = Field(default=50, ge=0, description="Due cards in a daily review")
    quick_max_new: int = Field(default=3, ge=0, description="New cards in a quick session")
    quick_max_review: int = Field(default=10, ge=0, description="Due cards in a quick session")

    # ========================================
    # Streaks
    # ========================================
    study_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to turn session timestamps into calendar days",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for the CLI",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )

    @model_validator(mode="after")
    def _check_mastery_thresholds(self) -> Settings:
        if self.mastery_mastered_min_repetitions <= self.mastery_reviewing_min_repetitions:
            raise ValueError(
                "mastery_mastered_min_repetitions must be greater than "
                "mastery_reviewing_min_repetitions"
            )
        if self.sm2_initial_easiness < self.sm2_minimum_easiness:
            raise ValueError("sm2_initial_easiness cannot be below sm2_minimum_easiness")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
