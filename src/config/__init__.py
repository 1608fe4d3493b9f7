"""
Configuration module for the written exam grader.

Provides settings, constants, prompt templates, and logging configuration.
"""

from config.settings import get_settings, reload_settings, Settings
from config.logging_config import (
    setup_structured_logging,
    get_logger,
    logger,
)
from config.constants import (
    # Model Configuration
    GEMINI_MODEL_PRO,
    GEMINI_MODEL_FLASH,
    DEFAULT_GRADING_MODEL,
    DEFAULT_VALIDATION_MODEL,
    # Retry Configuration
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
    # Multipass Defaults
    DEFAULT_NUM_RUNS,
    DEFAULT_CONCURRENCY,
    DEFAULT_WARMUP_DELAY,
)

__all__ = [
    # Settings
    'get_settings',
    'reload_settings',
    'Settings',
    # Logging
    'setup_structured_logging',
    'get_logger',
    'logger',
    # Constants
    'GEMINI_MODEL_PRO',
    'GEMINI_MODEL_FLASH',
    'DEFAULT_GRADING_MODEL',
    'DEFAULT_VALIDATION_MODEL',
    'MAX_RETRIES',
    'RETRY_BASE_DELAY',
    'RETRY_MAX_DELAY',
    'DEFAULT_NUM_RUNS',
    'DEFAULT_CONCURRENCY',
    'DEFAULT_WARMUP_DELAY',
]
