"""
Backend handles for the Gemini API.

A backend handle is anything exposing ``generate_content``. The grader is
written against ``BaseBackend`` so it works the same with a single handle
or with a pool of handles (see ``ai.pool``).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import google.genai as genai
from google.genai import errors as genai_errors
from google.genai import types

from config.logging_config import get_logger
from core.exceptions import (
    GraderError,
    ProviderError,
    APIConnectionError,
    APITimeoutError,
    APIRateLimitError,
)
from core.models import BackendConfig

logger = get_logger(__name__)


class BackendErrorContext:
    """
    Context manager translating backend exceptions into ProviderError types.

    Usage:
        with BackendErrorContext("generate_content", model):
            response = await client.aio.models.generate_content(...)
    """

    def __init__(self, operation: str, model: str = "unknown"):
        self.operation = operation
        self.model = model

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False

        # Cancellation and our own errors pass through untouched
        if not issubclass(exc_type, Exception) or issubclass(exc_type, GraderError):
            return False

        exc_name = exc_type.__name__
        where = f"{self.operation} ({self.model})"

        if isinstance(exc_val, genai_errors.APIError) and exc_val.code == 429:
            raise APIRateLimitError(
                f"Rate limited during {where}: {exc_val}",
                {"code": exc_val.code}
            ) from exc_val

        if any(name in exc_name for name in ['Timeout', 'TimedOut']):
            raise APITimeoutError(f"Timeout during {where}: {exc_val}") from exc_val

        if any(name in exc_name for name in ['Connection', 'Connect', 'Network']):
            raise APIConnectionError(f"Failed to connect during {where}: {exc_val}") from exc_val

        details = {}
        if isinstance(exc_val, genai_errors.APIError):
            details["code"] = exc_val.code
        raise ProviderError(f"API error during {where}: {exc_val}", details) from exc_val


class BaseBackend(ABC):
    """Something that can issue one ``generate_content`` call."""

    @abstractmethod
    async def generate_content(
        self,
        model: str,
        contents: Any,
        config: Optional[types.GenerateContentConfig] = None
    ) -> types.GenerateContentResponse:
        """Issue one generation call and return the raw response."""
        pass


class GeminiBackend(BaseBackend):
    """
    Backend handle bound to one Gemini API key.

    Uses the async surface of the google-genai client.
    """

    def __init__(self, config: BackendConfig, client: Optional[genai.Client] = None):
        """
        Initialize the handle.

        Args:
            config: API key, optional base URL and extra HTTP headers
            client: Pre-built client (mainly for tests)
        """
        self.config = config

        if client is None:
            http_options = types.HttpOptions(
                base_url=config.base_url,
                headers=dict(config.headers) or None
            )
            client = genai.Client(api_key=config.api_key, http_options=http_options)
        self.client = client

    async def generate_content(
        self,
        model: str,
        contents: Any,
        config: Optional[types.GenerateContentConfig] = None
    ) -> types.GenerateContentResponse:
        with BackendErrorContext("generate_content", model):
            return await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config
            )
