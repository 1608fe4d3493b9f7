"""
Response parser for backend answers.

Turns the JSON text returned by the backend into validated models.
Any decode or shape problem is reported as a SchemaError.
"""

import re
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from core.exceptions import SchemaError
from core.models import GradingResult, ImageValidationResult

M = TypeVar('M', bound=BaseModel)

_CODE_FENCE = re.compile(r'^```(?:json)?\s*([\s\S]*?)\s*```$')


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block, if any."""
    stripped = text.strip()
    match = _CODE_FENCE.match(stripped)
    return match.group(1) if match else stripped


def parse_model(text: str, model: Type[M]) -> M:
    """
    Validate a JSON payload against a model.

    Args:
        text: Raw response text
        model: Pydantic model class to validate against

    Returns:
        Model instance

    Raises:
        SchemaError: If the text is not JSON or does not match the model
    """
    try:
        return model.model_validate_json(strip_code_fence(text))
    except ValidationError as e:
        raise SchemaError(
            f"Response does not match {model.__name__}: {e.error_count()} error(s)",
            {"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]}
        ) from e


def parse_grading_result(text: str) -> GradingResult:
    """Parse a grading payload."""
    return parse_model(text, GradingResult)


def parse_validation_result(text: str) -> ImageValidationResult:
    """Parse an image validation payload."""
    return parse_model(text, ImageValidationResult)
