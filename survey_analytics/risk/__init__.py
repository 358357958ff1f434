"""
Risk-Aversion Analysis

Relates respondents' subjective trader ratings to the objective volatility
of the rated instruments.

- scorer:     one respondent -> score, label, diagnostics
- population: all respondents of a form -> distribution, categories, scatter
- batch:      every eligible form, concurrently, errors collected per form

Version: risk_aversion_v1
"""

from .models import (
    RiskLabel,
    RiskStatus,
    RatedInstrument,
    RespondentRiskResult,
    PopulationRiskResult,
    RiskSummary,
    RiskChartData,
    BatchRiskAnalysis,
    FormError,
)
from .scorer import (
    score_respondent,
    pearson_correlation,
    ols_regression,
    classify_score,
)
from .population import (
    analyze_population,
    build_trader_questions,
    build_histogram,
    chart_data,
    summarize,
)
from .batch import run_batch, perform_risk_analysis

__all__ = [
    # Models
    "RiskLabel",
    "RiskStatus",
    "RatedInstrument",
    "RespondentRiskResult",
    "PopulationRiskResult",
    "RiskSummary",
    "RiskChartData",
    "BatchRiskAnalysis",
    "FormError",
    # Functions
    "score_respondent",
    "pearson_correlation",
    "ols_regression",
    "classify_score",
    "analyze_population",
    "build_trader_questions",
    "build_histogram",
    "chart_data",
    "summarize",
    "run_batch",
    "perform_risk_analysis",
]

__version__ = "risk_aversion_v1"
