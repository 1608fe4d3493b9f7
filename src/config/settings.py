"""
Configuration management for the written exam grader.

All configuration comes from environment variables or .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from functools import lru_cache

from config.constants import (
    DEFAULT_GRADING_MODEL,
    DEFAULT_VALIDATION_MODEL,
    DEFAULT_NUM_RUNS,
    DEFAULT_CONCURRENCY,
    DEFAULT_WARMUP_DELAY,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AI_GRADER_",
        case_sensitive=False,
        extra="ignore"
    )

    # Backend credentials (comma-separated list of keys)
    gemini_api_key: str = ""
    gemini_api_base_url: Optional[str] = None

    # Models
    model: str = DEFAULT_GRADING_MODEL
    validation_model: str = DEFAULT_VALIDATION_MODEL

    # Multipass ("pro") mode
    pro_runs: int = Field(default=DEFAULT_NUM_RUNS, ge=1)
    pro_concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    warmup_delay: float = Field(default=DEFAULT_WARMUP_DELAY, ge=0)

    # Retries
    retries: int = Field(default=MAX_RETRIES, ge=0)
    retry_base_delay: float = Field(default=RETRY_BASE_DELAY, ge=0)
    retry_max_delay: float = Field(default=RETRY_MAX_DELAY, ge=0)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Validate and upper-case the log level."""
        valid_levels = ['TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def api_keys(self) -> List[str]:
        """Configured API keys, trimmed, blanks dropped."""
        return [k.strip() for k in self.gemini_api_key.split(',') if k.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from environment."""
    get_settings.cache_clear()
    return get_settings()
