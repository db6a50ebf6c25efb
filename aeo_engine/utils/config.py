"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.

Opportunity thresholds are fixed policy and deliberately absent here.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Claude API (optional - without it domain context falls back to policy only
    # and recommendation conversion reports a generation failure)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"

    # Database
    DATABASE_URL: Optional[str] = None

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Opportunity identification
    DEFAULT_LOOKBACK_DAYS: int = 14

    # Recommendation synthesis
    MAX_RECOMMENDATION_QUERIES: int = 10
    MAX_SOURCES_PER_QUERY: int = 3

    # Generative calls
    LLM_MAX_TOKENS: int = 16000
    LLM_TIMEOUT_SECONDS: int = 180

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
