"""
Risk-Aversion Models

Pydantic models for per-respondent scores, population results, chart data
and the admin batch run.

Version: risk_aversion_v1
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RiskLabel(str, Enum):
    RISK_AVERSE = "risk-averse"
    RISK_NEUTRAL = "risk-neutral"
    RISK_SEEKING = "risk-seeking"


class RiskStatus(str, Enum):
    """Outcome of scoring one respondent."""
    SCORED = "scored"
    INSUFFICIENT_DATA = "insufficient_data"  # exactly 1 rated instrument
    ZERO_VARIANCE = "zero_variance"  # >= 2 rated, correlation undefined
    NO_RATINGS = "no_ratings"  # nothing rated, excluded entirely


# Chart colours per category
CATEGORY_COLORS: Dict[RiskLabel, str] = {
    RiskLabel.RISK_AVERSE: "#ef4444",
    RiskLabel.RISK_NEUTRAL: "#f59e0b",
    RiskLabel.RISK_SEEKING: "#3b82f6",
}


class RatedInstrument(BaseModel):
    """One (objective profile, subjective rating) pair."""
    question_id: str
    instrument_name: str
    mean: float
    std_dev: float
    risk_adjusted_return: Optional[float] = None
    rating: int = Field(ge=1, le=10)
    normalized_rating: float = Field(
        default=0.0, description="z-score of the rating within the respondent"
    )

    class Config:
        extra = "forbid"


class RespondentRiskResult(BaseModel):
    """
    Risk-aversion result for a single respondent.

    score is None unless status == scored. A null score means "cannot
    compute"; 0.0 means "no discernible preference".
    """
    response_id: str
    respondent_id: str
    respondent_name: Optional[str] = None
    status: RiskStatus
    insufficient_data: bool = False
    correlation: Optional[float] = Field(
        default=None, description="Pearson r between std_dev and rating"
    )
    score: Optional[float] = Field(
        default=None, ge=-1.0, le=1.0, description="-correlation, clamped to [-1, 1]"
    )
    label: Optional[RiskLabel] = None
    rated_instruments: List[RatedInstrument] = Field(default_factory=list)
    rating_mean: Optional[float] = None
    rating_std_dev: Optional[float] = None
    regression_slope: Optional[float] = Field(
        default=None, description="OLS slope of normalized rating on std_dev"
    )
    regression_intercept: Optional[float] = None
    r_squared: Optional[float] = None
    malformed_ratings: int = 0
    version: str = "risk_aversion_v1"

    class Config:
        extra = "forbid"


class HistogramBucket(BaseModel):
    lower: float
    upper: float
    label: str
    count: int = 0


class ScatterPoint(BaseModel):
    std_dev: float
    rating: int
    respondent_id: str
    question_id: str
    instrument_name: str


class RespondentPoint(BaseModel):
    score: float
    average_normalized_rating: float
    label: RiskLabel
    respondent_id: str


class ScoreStats(BaseModel):
    mean: Optional[float] = None
    median: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    std_dev: Optional[float] = None


class ExcludedBreakdown(BaseModel):
    insufficient_data: int = 0
    zero_variance: int = 0


class PopulationRiskResult(BaseModel):
    """Risk-aversion analysis for every eligible respondent of a form."""
    form_id: str
    form_title: str = ""
    trader_question_count: int = 0
    invalid_instruments: Dict[str, str] = Field(
        default_factory=dict, description="question_id -> reason"
    )
    total_respondents: int = Field(
        default=0, description="Eligible respondents with at least one rating"
    )
    scored_count: int = 0
    excluded_count: int = 0
    excluded_breakdown: ExcludedBreakdown = Field(default_factory=ExcludedBreakdown)
    respondents_without_ratings: int = 0
    category_counts: Dict[str, int] = Field(default_factory=dict)
    score_stats: ScoreStats = Field(default_factory=ScoreStats)
    distribution: List[HistogramBucket] = Field(default_factory=list)
    scatter: List[ScatterPoint] = Field(default_factory=list)
    respondents: List[RespondentRiskResult] = Field(default_factory=list)
    result_hash: str = ""
    version: str = "risk_aversion_v1"

    class Config:
        extra = "forbid"


class RiskSummary(BaseModel):
    """Compact population summary embedded in aggregate reports."""
    scored_count: int
    excluded_count: int
    respondents_without_ratings: int
    category_counts: Dict[str, int]
    mean_score: Optional[float] = None


class CategoryCount(BaseModel):
    category: RiskLabel
    count: int
    color: str


class RiskChartData(BaseModel):
    form_id: str
    distribution: List[HistogramBucket]
    category_counts: List[CategoryCount]
    scatter: List[ScatterPoint]
    respondent_points: List[RespondentPoint]


class FormError(BaseModel):
    code: str
    message: str


class BatchRiskAnalysis(BaseModel):
    """Result of the admin-triggered analysis over every eligible form."""
    results: Dict[str, PopulationRiskResult] = Field(default_factory=dict)
    errors: Dict[str, FormError] = Field(default_factory=dict)
    forms_total: int = 0
    forms_succeeded: int = 0
    forms_failed: int = 0
    result_hash: str = ""
    version: str = "risk_aversion_v1"
