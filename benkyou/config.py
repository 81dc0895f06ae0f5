"""Scheduler configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scheduler defaults loaded from environment variables."""

    PROJECT_NAME: str = "Benkyou Scheduler"

    DEFAULT_NEW_CARDS_PER_DAY: int = Field(20, ge=0, description="New cards introduced per day")
    DEFAULT_MAX_REVIEWS_PER_DAY: int = Field(200, ge=0, description="Review cards shown per day")
    DEFAULT_LEARNING_STEPS: List[int] = Field(
        default_factory=lambda: [1, 10],
        description="Learning steps in minutes",
    )
    DEFAULT_RELEARNING_STEPS: List[int] = Field(
        default_factory=lambda: [10],
        description="Relearning steps in minutes",
    )
    DEFAULT_GRADUATING_INTERVAL: int = Field(1, ge=0, description="Days after graduating on Good")
    DEFAULT_EASY_INTERVAL: int = Field(4, ge=0, description="Days after graduating on Easy")
    DEFAULT_MINIMUM_INTERVAL: int = Field(1, ge=0, description="Smallest review interval in days")
    DEFAULT_MAXIMUM_INTERVAL: int = Field(36500, ge=1, description="Largest review interval in days")
    DEFAULT_ENABLE_FUZZ: bool = Field(True, description="Randomise review intervals")
    DEFAULT_DESIRED_RETENTION: float = Field(
        0.9, gt=0, lt=1, description="Target recall probability for the memory model"
    )

    # Smallest gap between a review and the next due date
    MINIMUM_DUE_OFFSET_SECONDS: int = Field(60, ge=1)

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached scheduler settings instance."""

    return Settings()


settings = get_settings()
