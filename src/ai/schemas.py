"""
Response schemas sent to the backend.

Mirrors the models in ``core.models`` using the camelCase wire names so the
backend answers with JSON that ``ai.response_parser`` can validate.
"""

from google.genai import types


def _number(description: str) -> types.Schema:
    return types.Schema(type=types.Type.NUMBER, description=description)


def _string(description: str) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


def _boolean(description: str) -> types.Schema:
    return types.Schema(type=types.Type.BOOLEAN, description=description)


POSITION_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    description=(
        "The position of the student answer on the answer sheet if exists "
        "(if not exists, fill with -1)."
    ),
    properties={
        "page": types.Schema(
            type=types.Type.INTEGER,
            description="The page number where the answer is located (1-based)",
        ),
        "box2d": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.NUMBER),
            description="The bounding box [ymin, xmin, ymax, xmax] normalized to 0-1000.",
        ),
    },
    required=["page", "box2d"],
)

QUESTION_RESULT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "questionNumber": types.Schema(
            type=types.Type.INTEGER, description="The question number"
        ),
        "isCorrect": _boolean("Whether the answer is correct"),
        "explanation": _string("Explanation of why the answer is correct or incorrect"),
        "studentAnswer": _string("What the student wrote"),
        "correctAnswer": _string("The correct answer"),
        "maxScore": _number(
            "The maximum score for this question as shown in the question sheet"
        ),
        "earnedScore": _number(
            "The score the student earned for this question (can be partial credit)"
        ),
        "position": POSITION_SCHEMA,
    },
    required=[
        "questionNumber",
        "isCorrect",
        "explanation",
        "studentAnswer",
        "correctAnswer",
        "maxScore",
        "earnedScore",
        "position",
    ],
)

GRADING_RESULT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "results": types.Schema(type=types.Type.ARRAY, items=QUESTION_RESULT_SCHEMA),
        "totalScore": _number(
            "The total score earned by the student (sum of all earned scores)"
        ),
        "maxPossibleScore": _number("The maximum possible score (sum of all max scores)"),
        "comments": _string("Overall comments about the student's performance"),
    },
    required=["results", "totalScore", "maxPossibleScore", "comments"],
)

VALIDATION_RESULT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "isValid": _boolean("Whether the images appear to be student answer sheets"),
        "reason": _string(
            "Explanation of why the images are valid or invalid. If invalid, "
            "explain what type of images were detected instead."
        ),
        "confidence": types.Schema(
            type=types.Type.NUMBER,
            minimum=0,
            maximum=1,
            description="Confidence level of the validation (0-1)",
        ),
    },
    required=["isValid", "reason", "confidence"],
)
