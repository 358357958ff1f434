"""
Aggregation Models

Per-question summaries of a form's eligible responses, plus the
per-respondent rows the export consumes.

Version: aggregation_v1
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from survey_analytics.instruments.models import InstrumentSummary
from survey_analytics.risk.models import RiskSummary


class FormHeader(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    total_questions: int


class ReportSummary(BaseModel):
    total_responses: int = Field(description="Eligible responses aggregated")
    excluded_responses: int = Field(
        default=0, description="Responses dropped for ineligible status"
    )
    malformed_answers: int = Field(
        default=0, description="Answers skipped because they could not be normalized"
    )


class QuestionSummary(BaseModel):
    """
    Summary of one question.

    Which optional blocks are filled depends on kind:
    - choice / multi_choice: option_counts, other, total_respondents, percentages
    - scale / rating: mean, min, max, std_dev, distribution
    - text: average_length
    - rating on a trader question: also instrument / instrument_error, risk_summary
    Statistics are null when count is 0.
    """
    question_id: str
    text: str
    type: str
    kind: str
    order_index: int
    count: int = 0
    excluded_count: int = 0

    # Choice
    option_counts: Optional[Dict[str, int]] = None
    other: Optional[int] = None
    total_respondents: Optional[int] = None
    percentages: Optional[Dict[str, float]] = None

    # Scale / rating
    mean: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    std_dev: Optional[float] = None
    distribution: Optional[Dict[str, int]] = None

    # Text
    average_length: Optional[float] = None

    # Trader rating
    instrument: Optional[InstrumentSummary] = None
    instrument_error: Optional[str] = None
    risk_summary: Optional[RiskSummary] = None


class RespondentRow(BaseModel):
    """
    One eligible response flattened for export.

    values maps question_id to the rendered normalized value:
    str (choice/text), int (rating), float (scale), List[str] (multi/files).
    Missing or malformed answers are absent.
    """
    response_id: str
    respondent_id: str
    respondent_name: Optional[str] = None
    submitted_at: Optional[datetime] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class AggregationResult(BaseModel):
    form: FormHeader
    summary: ReportSummary
    per_question: List[QuestionSummary] = Field(default_factory=list)
    rows: List[RespondentRow] = Field(default_factory=list)
    result_hash: str = ""
    version: str = "aggregation_v1"
