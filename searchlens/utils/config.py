"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Cannibalization
    MIN_IMPRESSIONS: int = 50
    POSITION_AVERAGING: Literal["weighted", "running"] = "weighted"

    # Keyword clustering budget
    SIMILARITY_THRESHOLD: float = 0.5
    MAX_CLUSTERS: int = 50
    MAX_ITERATIONS: int = 100
    TOP_QUERY_CAP: int = 500
    CLUSTER_SEARCH_WINDOW: int = 50
    CLUSTER_SAMPLE_PAIRS: int = 3

    # Action thresholds
    QUICK_WIN_THRESHOLD: float = 7
    CANNIBALIZATION_PAGE_THRESHOLD: int = 2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
