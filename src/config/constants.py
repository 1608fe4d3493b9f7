"""
Constants and configuration values for the written exam grader.

Defines model names, retry defaults, and multipass defaults.
"""

from typing import Final

# Gemini Model Configuration
GEMINI_MODEL_PRO: Final[str] = "gemini-2.5-pro"
GEMINI_MODEL_FLASH: Final[str] = "gemini-2.0-flash"
DEFAULT_GRADING_MODEL: Final[str] = GEMINI_MODEL_PRO
DEFAULT_VALIDATION_MODEL: Final[str] = GEMINI_MODEL_FLASH

# MIME types of the parts sent to the backend
PDF_MIME_TYPE: Final[str] = "application/pdf"
DEFAULT_IMAGE_MIME_TYPE: Final[str] = "image/jpeg"
JSON_MIME_TYPE: Final[str] = "application/json"

# Retry Configuration (seconds)
MAX_RETRIES: Final[int] = 3
RETRY_BASE_DELAY: Final[float] = 2.0
RETRY_MAX_DELAY: Final[float] = 600.0

# Multipass Defaults
DEFAULT_NUM_RUNS: Final[int] = 5
DEFAULT_CONCURRENCY: Final[int] = 5
# Pause before the rest of the first batch so the backend can reuse cached context
DEFAULT_WARMUP_DELAY: Final[float] = 15.0

# Backend pool
API_KEY_ID_LENGTH: Final[int] = 8
GATEWAY_METADATA_HEADER: Final[str] = "cf-aig-metadata"
SERVICE_NAME: Final[str] = "written-exam-grader"

# Confidence display thresholds (CLI)
CONFIDENCE_THRESHOLD_HIGH: Final[float] = 0.8
CONFIDENCE_THRESHOLD_LOW: Final[float] = 0.5
