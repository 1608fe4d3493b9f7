"""
Single-Pass Grader.

Grades all questions of an answer sheet in a single backend call,
returning a structured GradingResult plus the call's token usage.

The question sheet and the answer photos are sent fresh with every call.
"""

import asyncio
import time
from typing import Any, Callable, List

from google.genai import types

from ai.backend import BaseBackend
from ai.response_parser import parse_grading_result
from ai.schemas import GRADING_RESULT_SCHEMA
from config.constants import JSON_MIME_TYPE, PDF_MIME_TYPE
from config.logging_config import get_logger
from config.prompts import build_grading_prompt
from core.exceptions import EmptyPoolError, EmptyResponseError, MissingUsageError
from core.models import GradingRequest, GradingResponse, UsageMetadata
from utils.retry import API_RETRY_CONFIG, RetryConfig, call_with_retry
from vision.images import detect_image_mime_type

logger = get_logger(__name__)


class SinglePassGrader:
    """
    Grade all questions in a single API call.

    - Send the question sheet + all answer images in one call
    - Receive structured JSON with every question's grade
    - Recompute the totals locally

    The backend may be a single handle or a BackendPool; the call goes
    through ``call_with_retry`` so transient failures are retried with
    backoff. Post-call checks (empty text, missing usage, schema) are not
    retried.
    """

    def __init__(
        self,
        backend: BaseBackend,
        retry_config: RetryConfig = API_RETRY_CONFIG,
        sleep: Callable[[float], Any] = asyncio.sleep
    ):
        """
        Initialize single-pass grader.

        Args:
            backend: Backend handle or pool
            retry_config: Retry limits and backoff delays
            sleep: Awaitable sleep used between retries
        """
        self.backend = backend
        self.retry_config = retry_config
        self._sleep = sleep

    def build_contents(self, request: GradingRequest) -> List[types.Content]:
        """Build the user turn: prompt, question sheet PDF, then the photos."""
        parts = [
            types.Part.from_text(text=build_grading_prompt(len(request.answer_images))),
            types.Part.from_bytes(data=request.question_document, mime_type=PDF_MIME_TYPE),
        ]
        parts.extend(
            types.Part.from_bytes(data=image, mime_type=detect_image_mime_type(image))
            for image in request.answer_images
        )
        return [types.Content(role="user", parts=parts)]

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type=JSON_MIME_TYPE,
            response_schema=GRADING_RESULT_SCHEMA
        )

    async def grade(self, request: GradingRequest) -> GradingResponse:
        """
        Grade one answer sheet.

        Args:
            request: Question sheet, answer images and model name

        Returns:
            GradingResponse with the parsed result and usage counters

        Raises:
            EmptyPoolError: If the backend pool has no entries
            EmptyResponseError: If the backend returned no text
            MissingUsageError: If the backend returned no usage metadata
            SchemaError: If the text does not match the GradingResult shape
            ProviderError: If the call still fails after all retries
        """
        start_time = time.time()
        contents = self.build_contents(request)
        config = self.build_config()

        logger.info(
            f"Sending grading request to {request.model} "
            f"({len(request.answer_images)} answer image(s))"
        )

        response = await call_with_retry(
            lambda: self.backend.generate_content(
                model=request.model,
                contents=contents,
                config=config
            ),
            retries=self.retry_config.retries,
            base_delay=self.retry_config.base_delay,
            max_delay=self.retry_config.max_delay,
            fatal_exceptions=(EmptyPoolError,),
            sleep=self._sleep,
            operation_name="generate_content"
        )

        if not response.text:
            raise EmptyResponseError("No content received from grading model")
        if not response.usage_metadata:
            raise MissingUsageError("No usage metadata received from grading model")

        result = parse_grading_result(response.text).recompute_totals()
        usage = UsageMetadata.from_response(response.usage_metadata)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Graded {len(result.results)} question(s): "
            f"{result.total_score}/{result.max_possible_score} in {duration_ms:.0f}ms"
        )

        return GradingResponse(result=result, usage=usage)
