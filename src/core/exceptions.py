"""
Custom exception hierarchy for the written exam grader.

Provides a consistent error handling approach across all modules.
"""


class GraderError(Exception):
    """
    Base exception for all grader errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ==================== Configuration Errors ====================

class ConfigurationError(GraderError):
    """
    Error in system configuration.

    Raised when required configuration is missing or invalid.
    """
    pass


class MissingAPIKeyError(ConfigurationError):
    """Raised when no API key is configured and none was supplied."""
    pass


class EmptyPoolError(ConfigurationError):
    """Raised when a backend is requested from a pool with no entries."""
    pass


# ==================== Provider Errors ====================

class ProviderError(GraderError):
    """
    Base error for backend call failures.

    Raised when there's a problem talking to the LLM backend.
    """
    pass


class APIConnectionError(ProviderError):
    """Raised when connection to the backend fails."""
    pass


class APITimeoutError(ProviderError):
    """Raised when a backend call times out."""
    pass


class APIRateLimitError(ProviderError):
    """Raised when the backend rate limit is exceeded."""
    pass


class APIResponseError(ProviderError):
    """Raised when the backend returns an unexpected or unusable response."""
    pass


class EmptyResponseError(APIResponseError):
    """Raised when the backend call succeeds but returns no text."""
    pass


class MissingUsageError(APIResponseError):
    """Raised when the backend call succeeds but returns no usage metadata."""
    pass


# ==================== Parsing Errors ====================

class ParsingError(GraderError):
    """Raised when parsing a backend response fails."""
    pass


class SchemaError(ParsingError):
    """
    Raised when a response payload does not match the expected structure.

    The validation messages, when available, are kept in ``details["errors"]``.
    """
    pass
