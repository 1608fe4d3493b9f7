"""
Answer sheet image validation.

Asks a (cheap) model whether uploaded photos look like exam answer
sheets before spending a grading call on them.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence

from google.genai import types

from ai.backend import BaseBackend
from ai.response_parser import parse_validation_result
from ai.schemas import VALIDATION_RESULT_SCHEMA
from config.constants import DEFAULT_VALIDATION_MODEL, JSON_MIME_TYPE
from config.logging_config import get_logger
from config.prompts import build_validation_prompt
from core.exceptions import EmptyPoolError, EmptyResponseError
from core.models import ImageValidationResult
from utils.retry import API_RETRY_CONFIG, RetryConfig, call_with_retry
from vision.images import detect_image_mime_type

logger = get_logger(__name__)


class ImageValidator:
    """Check that images are student answer sheets."""

    def __init__(
        self,
        backend: BaseBackend,
        retry_config: RetryConfig = API_RETRY_CONFIG,
        sleep: Callable[[float], Any] = asyncio.sleep
    ):
        self.backend = backend
        self.retry_config = retry_config
        self._sleep = sleep

    async def validate(
        self,
        images: Sequence[bytes],
        model: Optional[str] = None
    ) -> ImageValidationResult:
        """
        Validate a set of answer sheet photos.

        Args:
            images: Encoded images
            model: Model name (default: DEFAULT_VALIDATION_MODEL)

        Returns:
            ImageValidationResult

        Raises:
            EmptyResponseError: If the backend returned no text
            SchemaError: If the text does not match the expected shape
        """
        model = model or DEFAULT_VALIDATION_MODEL

        parts = [types.Part.from_text(text=build_validation_prompt(len(images)))]
        parts.extend(
            types.Part.from_bytes(data=image, mime_type=detect_image_mime_type(image))
            for image in images
        )
        contents = [types.Content(role="user", parts=parts)]
        config = types.GenerateContentConfig(
            response_mime_type=JSON_MIME_TYPE,
            response_schema=VALIDATION_RESULT_SCHEMA
        )

        logger.info(f"Sending validation request to {model} ({len(images)} image(s))")

        response = await call_with_retry(
            lambda: self.backend.generate_content(model=model, contents=contents, config=config),
            retries=self.retry_config.retries,
            base_delay=self.retry_config.base_delay,
            max_delay=self.retry_config.max_delay,
            fatal_exceptions=(EmptyPoolError,),
            sleep=self._sleep,
            operation_name="generate_content"
        )

        if not response.text:
            raise EmptyResponseError("No content received from validation model")

        result = parse_validation_result(response.text)
        logger.info(f"Validation: valid={result.is_valid} confidence={result.confidence:.2f}")
        return result
