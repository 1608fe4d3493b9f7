"""
Core data models for the written exam grader.

This module defines the Pydantic models exchanged between the backend,
the graders and their callers. Wire-facing models serialize with
camelCase aliases so they match the backend's response schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models that travel as camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Position(WireModel):
    """Location of a student answer on the answer sheet."""
    page: int = Field(description="The page number where the answer is located (1-based)")
    box2d: List[float] = Field(
        description="The bounding box [ymin, xmin, ymax, xmax] normalized to 0-1000."
    )


class QuestionResult(WireModel):
    """Grading of one question in one run."""
    question_number: int = Field(description="The question number")
    is_correct: bool = Field(description="Whether the answer is correct")
    explanation: str = Field(
        description="Explanation of why the answer is correct or incorrect"
    )
    student_answer: str = Field(description="What the student wrote")
    correct_answer: str = Field(description="The correct answer")
    max_score: float = Field(
        description="The maximum score for this question as shown in the question sheet"
    )
    earned_score: float = Field(
        description="The score the student earned for this question (can be partial credit)"
    )
    position: Optional[Position] = Field(
        default=None,
        description=(
            "The position of the student answer on the answer sheet if exists "
            "(if not exists, fill with -1)."
        ),
    )


class GradingResult(WireModel):
    """
    Complete grading of one answer sheet.

    ``total_score`` and ``max_possible_score`` are derived values: call
    ``recompute_totals()`` rather than trusting what the backend reported.
    """
    results: List[QuestionResult]
    total_score: float = Field(
        default=0.0,
        description="The total score earned by the student (sum of all earned scores)",
    )
    max_possible_score: float = Field(
        default=0.0,
        description="The maximum possible score (sum of all max scores)",
    )
    comments: str = Field(
        description="Overall comments about the student's performance",
    )

    def recompute_totals(self) -> "GradingResult":
        """Overwrite the totals with sums over ``results``."""
        self.total_score = sum(r.earned_score for r in self.results)
        self.max_possible_score = sum(r.max_score for r in self.results)
        return self


class UsageMetadata(WireModel):
    """Token counters reported by the backend. Missing counters count as 0."""
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    thoughts_token_count: int = 0
    total_token_count: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def none_as_zero(cls, v):
        return 0 if v is None else v

    @classmethod
    def from_response(cls, usage: Any) -> "UsageMetadata":
        """Build from a backend usage object (attribute or mapping style)."""
        names = (
            "prompt_token_count",
            "candidates_token_count",
            "thoughts_token_count",
            "total_token_count",
        )
        if isinstance(usage, dict):
            return cls.model_validate(
                {name: usage.get(name, usage.get(to_camel(name))) for name in names}
            )
        return cls(**{name: getattr(usage, name, None) for name in names})

    def __add__(self, other: "UsageMetadata") -> "UsageMetadata":
        return UsageMetadata(
            prompt_token_count=self.prompt_token_count + other.prompt_token_count,
            candidates_token_count=self.candidates_token_count + other.candidates_token_count,
            thoughts_token_count=self.thoughts_token_count + other.thoughts_token_count,
            total_token_count=self.total_token_count + other.total_token_count,
        )


class GradingResponse(WireModel):
    """Result of a single grading call."""
    result: GradingResult
    usage: UsageMetadata


class MultipassResult(WireModel):
    """
    Result of a multipass grading batch.

    ``result`` is the reconciled grading, ``results`` holds every run's
    grading and ``confidences`` lines up with ``result.results``.
    """
    result: GradingResult
    usage: UsageMetadata
    confidences: List[float] = Field(default_factory=list)
    runs: int
    results: List[GradingResult] = Field(default_factory=list)


class ImageValidationResult(WireModel):
    """Verdict on whether a set of images looks like answer sheets."""
    is_valid: bool = Field(
        description="Whether the images appear to be student answer sheets"
    )
    reason: str = Field(
        description=(
            "Explanation of why the images are valid or invalid. If invalid, "
            "explain what type of images were detected instead."
        )
    )
    confidence: float = Field(
        ge=0, le=1, description="Confidence level of the validation (0-1)"
    )


@dataclass(frozen=True)
class GradingRequest:
    """
    Inputs of one grading invocation.

    Shared read-only across all runs of a multipass batch.
    """
    question_document: bytes
    answer_images: Tuple[bytes, ...]
    model: str

    def __post_init__(self):
        # Lists are accepted but stored as a tuple
        object.__setattr__(self, "answer_images", tuple(self.answer_images))


@dataclass(frozen=True)
class GradingProgress:
    """Progress event emitted by the multipass grader."""
    type: Literal["grading", "run-completed"]
    current: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "current": self.current, "total": self.total}


@dataclass
class BackendConfig:
    """Configuration used to construct one backend handle."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
