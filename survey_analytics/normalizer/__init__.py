"""
Answer Normalizer

Raw answer payload + question type -> canonical typed value.

Version: normalizer_v1
"""

from .models import (
    Choice,
    MultiChoice,
    Text,
    Scale,
    Rating,
    Files,
    NormalizedAnswer,
    RATING_MIN,
    RATING_MAX,
)
from .normalize import normalize_answer, coerce_number, is_blank, unwrap_single

__all__ = [
    "Choice",
    "MultiChoice",
    "Text",
    "Scale",
    "Rating",
    "Files",
    "NormalizedAnswer",
    "RATING_MIN",
    "RATING_MAX",
    "normalize_answer",
    "coerce_number",
    "is_blank",
    "unwrap_single",
]

__version__ = "normalizer_v1"
