"""
Aggregation Engine

Form + eligible responses -> per-question summaries (counts,
distributions, means) for every question type, plus export rows.

Version: aggregation_v1
"""

from .models import (
    AggregationResult,
    FormHeader,
    QuestionSummary,
    ReportSummary,
    RespondentRow,
)
from .aggregate import (
    aggregate_form,
    analyzable_questions,
    question_kind,
    ordered_selection,
    format_number,
)

__all__ = [
    "AggregationResult",
    "FormHeader",
    "QuestionSummary",
    "ReportSummary",
    "RespondentRow",
    "aggregate_form",
    "analyzable_questions",
    "question_kind",
    "ordered_selection",
    "format_number",
]

__version__ = "aggregation_v1"
