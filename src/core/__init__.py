"""
Core module for the written exam grader.

Exports key models and exceptions for easy access.
"""

from core.models import (
    BackendConfig,
    GradingProgress,
    GradingRequest,
    GradingResponse,
    GradingResult,
    ImageValidationResult,
    MultipassResult,
    Position,
    QuestionResult,
    UsageMetadata,
)

from core.exceptions import (
    GraderError,
    ConfigurationError,
    MissingAPIKeyError,
    EmptyPoolError,
    ProviderError,
    APIConnectionError,
    APITimeoutError,
    APIRateLimitError,
    APIResponseError,
    EmptyResponseError,
    MissingUsageError,
    ParsingError,
    SchemaError,
)

__all__ = [
    # Models
    'BackendConfig',
    'GradingProgress',
    'GradingRequest',
    'GradingResponse',
    'GradingResult',
    'ImageValidationResult',
    'MultipassResult',
    'Position',
    'QuestionResult',
    'UsageMetadata',
    # Exceptions
    'GraderError',
    'ConfigurationError',
    'MissingAPIKeyError',
    'EmptyPoolError',
    'ProviderError',
    'APIConnectionError',
    'APITimeoutError',
    'APIRateLimitError',
    'APIResponseError',
    'EmptyResponseError',
    'MissingUsageError',
    'ParsingError',
    'SchemaError',
]
