"""
Risk-Aversion Scorer (single respondent)

Relates a respondent's 1..10 ratings to the volatility of the rated
instruments:

1. Pair each rated instrument's std_dev with its rating
2. Pearson correlation r(std_dev, rating) over distinct instruments
3. score = -r, clamped to [-1, 1]
   > 0: lower-volatility instruments rated higher (risk-averse)
   < 0: higher-volatility instruments rated higher (risk-seeking)
4. label from RiskThresholds

Fewer than 2 rated instruments never yields a score: the result is flagged
insufficient_data (1 rating) or no_ratings (0 ratings).

The OLS slope of z-scored ratings on std_dev and its R² are reported as
diagnostics alongside the score.

Version: risk_aversion_v1
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from survey_analytics.config import RiskThresholds
from survey_analytics.forms.models import Question, Response
from survey_analytics.instruments.models import InstrumentSummary
from survey_analytics.instruments.profile import population_mean, population_std_dev
from survey_analytics.normalizer import Rating, is_blank, normalize_answer
from survey_analytics.shared.errors import MalformedAnswer

from .models import RatedInstrument, RespondentRiskResult, RiskLabel, RiskStatus

logger = logging.getLogger(__name__)

TraderQuestion = Tuple[Question, InstrumentSummary]


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """
    Pearson r, or None when undefined (n < 2 or either series constant).
    """
    n = len(xs)
    if n != len(ys) or n < 2:
        return None
    x_mean = sum(xs) / n
    y_mean = sum(ys) / n
    sxy = sum((x - x_mean) * (y - y_mean) for x, y in zip(xs, ys))
    sxx = sum((x - x_mean) ** 2 for x in xs)
    syy = sum((y - y_mean) ** 2 for y in ys)
    if sxx == 0 or syy == 0:
        return None
    return sxy / math.sqrt(sxx * syy)


def ols_regression(xs: Sequence[float], ys: Sequence[float]) -> Tuple[Optional[float], Optional[float]]:
    """Simple linear regression y = a + b*x. Returns (slope, intercept)."""
    n = len(xs)
    if n != len(ys) or n < 2:
        return None, None
    x_mean = sum(xs) / n
    y_mean = sum(ys) / n
    sxx = sum((x - x_mean) ** 2 for x in xs)
    if sxx == 0:
        return None, None
    slope = sum((x - x_mean) * (y - y_mean) for x, y in zip(xs, ys)) / sxx
    return slope, y_mean - slope * x_mean


def classify_score(score: float, thresholds: RiskThresholds) -> RiskLabel:
    if score >= thresholds.averse:
        return RiskLabel.RISK_AVERSE
    if score <= thresholds.seeking:
        return RiskLabel.RISK_SEEKING
    return RiskLabel.RISK_NEUTRAL


def _clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    # + 0.0 folds -0.0 into 0.0
    return max(low, min(high, value)) + 0.0


def collect_ratings(
    response: Response,
    trader_questions: List[TraderQuestion],
) -> Tuple[List[Tuple[InstrumentSummary, int]], int]:
    """
    Pull the respondent's valid ratings for each trader question.

    Returns:
        ([(instrument, rating)] in question order, malformed rating count)
    """
    answers = response.answers_by_question()
    rated: List[Tuple[InstrumentSummary, int]] = []
    malformed = 0
    for question, instrument in trader_questions:
        answer = answers.get(question.id)
        if answer is None or is_blank(answer.value):
            continue
        try:
            normalized = normalize_answer(answer.value, question)
        except MalformedAnswer as e:
            malformed += 1
            logger.debug(f"Skipping rating on response {response.id}: {e.reason}")
            continue
        if isinstance(normalized, Rating):
            rated.append((instrument, normalized.value))
    return rated, malformed


def score_respondent(
    response: Response,
    trader_questions: List[TraderQuestion],
    thresholds: Optional[RiskThresholds] = None,
) -> RespondentRiskResult:
    """
    Score one respondent.

    Args:
        response: The respondent's response (answers nested)
        trader_questions: (question, instrument summary) for every trader
            question with a valid instrument
        thresholds: Category cut-offs (defaults 0.33 / -0.33)

    Returns:
        RespondentRiskResult; never raises for missing or bad ratings
    """
    thresholds = thresholds or RiskThresholds()
    rated, malformed = collect_ratings(response, trader_questions)

    base = dict(
        response_id=response.id,
        respondent_id=response.respondent_id,
        respondent_name=response.respondent_name,
        malformed_ratings=malformed,
    )

    if not rated:
        return RespondentRiskResult(status=RiskStatus.NO_RATINGS, **base)

    ratings = [float(r) for _, r in rated]
    std_devs = [inst.profile.std_dev for inst, _ in rated]

    rating_mean = population_mean(ratings)
    rating_std = population_std_dev(ratings, rating_mean)
    normalized = [
        (r - rating_mean) / rating_std if rating_std > 0 else 0.0
        for r in ratings
    ]

    rated_instruments = [
        RatedInstrument(
            question_id=inst.question_id,
            instrument_name=inst.name,
            mean=inst.profile.mean,
            std_dev=inst.profile.std_dev,
            risk_adjusted_return=inst.profile.risk_adjusted_return,
            rating=rating,
            normalized_rating=z,
        )
        for (inst, rating), z in zip(rated, normalized)
    ]
    base.update(
        rated_instruments=rated_instruments,
        rating_mean=rating_mean,
        rating_std_dev=rating_std,
    )

    if len(rated) < 2:
        return RespondentRiskResult(
            status=RiskStatus.INSUFFICIENT_DATA,
            insufficient_data=True,
            **base,
        )

    slope, intercept = ols_regression(std_devs, normalized)
    correlation = pearson_correlation(std_devs, ratings)
    if correlation is None:
        return RespondentRiskResult(
            status=RiskStatus.ZERO_VARIANCE,
            regression_slope=slope,
            regression_intercept=intercept,
            **base,
        )

    correlation = _clamp(correlation)
    score = _clamp(-correlation)
    return RespondentRiskResult(
        status=RiskStatus.SCORED,
        correlation=correlation,
        score=score,
        label=classify_score(score, thresholds),
        regression_slope=slope,
        regression_intercept=intercept,
        r_squared=correlation ** 2,
        **base,
    )
