"""
Answer Normalizer

The single chokepoint that turns raw answer payloads (scalars, lists,
numbers-as-strings) into a typed canonical value for the question's type.

Rules:
- Choice:      scalar string/number -> Choice
- MultiChoice: list of scalars (or one scalar) -> MultiChoice
- Text:        string/number/None -> Text
- Scale:       finite number or numeric string -> Scale
- Rating:      integral number in [1, 10] -> Rating (never clamped)
- Files:       list of strings (or one string) -> Files

A one-element list is accepted wherever a scalar is expected (choice,
scale, rating); trader ratings are stored as ["7"]. Longer lists are
malformed. Anything else raises MalformedAnswer. Side-effect free.
"""

import math
from typing import Any, Optional

from survey_analytics.forms.models import Question, QuestionType
from survey_analytics.shared.errors import MalformedAnswer

from .models import (
    Choice,
    Files,
    MultiChoice,
    NormalizedAnswer,
    Rating,
    RATING_MAX,
    RATING_MIN,
    Scale,
    Text,
)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _scalar_to_str(value: Any) -> str:
    """Stringify a scalar; integral floats lose their trailing .0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def unwrap_single(value: Any) -> Any:
    """A one-element list of a scalar stands for that scalar (["7"] -> "7")."""
    if isinstance(value, (list, tuple)) and len(value) == 1 and _is_scalar(value[0]):
        return value[0]
    return value


def is_blank(value: Any) -> bool:
    """Unanswered: None, whitespace-only string or empty list."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def coerce_number(value: Any, question_id: Optional[str] = None) -> float:
    """Parse a finite number from a number or numeric string."""
    if isinstance(value, bool) or value is None:
        raise MalformedAnswer(question_id, f"expected a number, got {type(value).__name__}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise MalformedAnswer(question_id, f"non-numeric value {value!r}")
    else:
        raise MalformedAnswer(question_id, f"expected a scalar, got {type(value).__name__}")
    if not math.isfinite(number):
        raise MalformedAnswer(question_id, "non-finite number")
    return number


def normalize_choice(value: Any, question_id: Optional[str] = None) -> Choice:
    value = unwrap_single(value)
    if not _is_scalar(value):
        raise MalformedAnswer(question_id, f"expected a single choice, got {type(value).__name__}")
    text = _scalar_to_str(value)
    if not text.strip():
        raise MalformedAnswer(question_id, "empty choice")
    return Choice(value=text)


def normalize_multi_choice(value: Any, question_id: Optional[str] = None) -> MultiChoice:
    if _is_scalar(value):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise MalformedAnswer(question_id, f"expected a list of choices, got {type(value).__name__}")
    values = set()
    for item in value:
        if not _is_scalar(item):
            raise MalformedAnswer(question_id, "nested value in multiple choice")
        text = _scalar_to_str(item)
        if text.strip():
            values.add(text)
    return MultiChoice(values=frozenset(values))


def normalize_text(value: Any, question_id: Optional[str] = None) -> Text:
    if value is None:
        return Text(value="")
    if not _is_scalar(value):
        raise MalformedAnswer(question_id, f"expected text, got {type(value).__name__}")
    return Text(value=_scalar_to_str(value))


def normalize_scale(value: Any, question_id: Optional[str] = None) -> Scale:
    value = unwrap_single(value)
    return Scale(value=coerce_number(value, question_id))


def normalize_rating(value: Any, question_id: Optional[str] = None) -> Rating:
    number = coerce_number(unwrap_single(value), question_id)
    if not number.is_integer():
        raise MalformedAnswer(question_id, f"rating must be an integer, got {number}")
    rating = int(number)
    if rating < RATING_MIN or rating > RATING_MAX:
        raise MalformedAnswer(
            question_id, f"rating {rating} outside [{RATING_MIN}, {RATING_MAX}]"
        )
    return Rating(value=rating)


def normalize_files(value: Any, question_id: Optional[str] = None) -> Files:
    if value is None:
        return Files(refs=())
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise MalformedAnswer(question_id, "expected a list of file references")
    return Files(refs=tuple(v for v in value if v.strip()))


_NORMALIZERS = {
    QuestionType.SINGLE_CHOICE: normalize_choice,
    QuestionType.MULTIPLE_CHOICE: normalize_multi_choice,
    QuestionType.TEXT_SHORT: normalize_text,
    QuestionType.TEXT_LONG: normalize_text,
    QuestionType.LIKERT_SCALE: normalize_scale,
    QuestionType.NUMERIC_SCALE: normalize_scale,
    QuestionType.FILE_UPLOAD: normalize_files,
    QuestionType.TRADER_RATING: normalize_rating,
}


def normalize_answer(value: Any, question: Question) -> NormalizedAnswer:
    """
    Normalize a raw answer value for its question.

    Args:
        value: Raw answer payload as stored
        question: The question the answer belongs to

    Returns:
        Typed canonical value

    Raises:
        MalformedAnswer: value cannot be coerced for this question type
    """
    question_type = question.effective_type
    normalizer = _NORMALIZERS.get(question_type)
    if normalizer is None:
        raise MalformedAnswer(question.id, f"{question_type.value} questions take no answers")
    return normalizer(value, question.id)
