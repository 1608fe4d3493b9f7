"""
Shared fixtures and fakes for the grader tests.
"""

import json
from types import SimpleNamespace

import pytest

from ai.backend import BaseBackend
from core.models import GradingRequest


def make_usage(prompt=100, candidates=20, thoughts=5, total=125):
    """Usage object shaped like google-genai's usage metadata."""
    return SimpleNamespace(
        prompt_token_count=prompt,
        candidates_token_count=candidates,
        thoughts_token_count=thoughts,
        total_token_count=total,
    )


def make_question(number, earned, max_score=10.0, **overrides):
    """camelCase question payload as the backend returns it."""
    question = {
        "questionNumber": number,
        "isCorrect": earned == max_score,
        "explanation": f"Q{number} earned {earned}",
        "studentAnswer": f"answer {number}",
        "correctAnswer": f"correct {number}",
        "maxScore": max_score,
        "earnedScore": earned,
        "position": {"page": 1, "box2d": [10, 20, 30, 40]},
    }
    question.update(overrides)
    return question


def grading_payload(questions, comments="Good work", total_score=999, max_possible_score=999):
    """JSON text of a grading result; totals are deliberately wrong."""
    return json.dumps({
        "results": questions,
        "totalScore": total_score,
        "maxPossibleScore": max_possible_score,
        "comments": comments,
    })


def make_response(text, usage=None):
    return SimpleNamespace(text=text, usage_metadata=usage if usage is not None else make_usage())


class FakeBackend(BaseBackend):
    """
    Backend returning scripted outcomes in order.

    Each outcome is a response object or an exception to raise. The last
    outcome repeats once the script is exhausted.
    """

    def __init__(self, *outcomes, config=None):
        self.outcomes = list(outcomes)
        self.config = config
        self.calls = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SleepRecorder:
    """Replacement for asyncio.sleep that returns immediately."""

    def __init__(self):
        self.delays = []

    async def sleep(self, delay):
        self.delays.append(delay)


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def grading_request():
    return GradingRequest(
        question_document=b"%PDF-1.4 question sheet",
        answer_images=(b"photo-1", b"photo-2"),
        model="gemini-2.5-pro",
    )
