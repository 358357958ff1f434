"""
Population Risk Analyzer

Runs the scorer over every eligible response of a form and builds the
chart-ready aggregates:
- score distribution (fixed buckets spanning [-1, 1])
- category counts
- scatter of (std_dev, rating) per scored respondent per rated instrument

insufficient_data and zero_variance respondents are excluded from the
statistics and tallied separately. Respondents who rated nothing are
excluded entirely and only counted in respondents_without_ratings.

Version: risk_aversion_v1
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from survey_analytics import config
from survey_analytics.config import RiskThresholds
from survey_analytics.forms.models import Form, Response, is_eligible
from survey_analytics.instruments.profile import (
    population_mean,
    population_std_dev,
    profile_for_question,
)
from survey_analytics.shared.errors import InvalidInstrument
from survey_analytics.shared.hashing import canonicalize_and_hash

from .models import (
    CATEGORY_COLORS,
    CategoryCount,
    ExcludedBreakdown,
    HistogramBucket,
    PopulationRiskResult,
    RespondentPoint,
    RespondentRiskResult,
    RiskChartData,
    RiskLabel,
    RiskStatus,
    RiskSummary,
    ScatterPoint,
    ScoreStats,
)
from .scorer import TraderQuestion, score_respondent

logger = logging.getLogger(__name__)


def build_trader_questions(form: Form) -> Tuple[List[TraderQuestion], Dict[str, str]]:
    """
    Profile every trader question on the form.

    Returns:
        ([(question, instrument summary)] for valid instruments,
         {question_id: reason} for invalid ones)
    """
    valid: List[TraderQuestion] = []
    invalid: Dict[str, str] = {}
    for question in form.trader_questions():
        try:
            valid.append((question, profile_for_question(question)))
        except InvalidInstrument as e:
            invalid[question.id] = e.reason
            logger.warning(f"Form {form.id}: excluding question {question.id} from risk analysis: {e.reason}")
    return valid, invalid


def build_histogram(scores: Iterable[float], buckets: int) -> List[HistogramBucket]:
    """Equal-width buckets over [-1, 1]; the last bucket includes +1."""
    if buckets < 1:
        raise ValueError("histogram needs at least one bucket")
    width = 2.0 / buckets
    histogram = []
    for i in range(buckets):
        lower = round(-1.0 + i * width, 10)
        upper = round(-1.0 + (i + 1) * width, 10)
        closing = "]" if i == buckets - 1 else ")"
        histogram.append(HistogramBucket(
            lower=lower,
            upper=upper,
            label=f"[{lower:.1f}, {upper:.1f}{closing}",
        ))
    for score in scores:
        index = int((score + 1.0) / width)
        index = max(0, min(buckets - 1, index))
        # Guard against float error pushing a score across a boundary
        if index > 0 and score < histogram[index].lower:
            index -= 1
        elif index < buckets - 1 and score >= histogram[index + 1].lower:
            index += 1
        histogram[index].count += 1
    return histogram


def score_stats(scores: List[float]) -> ScoreStats:
    if not scores:
        return ScoreStats()
    ordered = sorted(scores)
    n = len(ordered)
    mid = n // 2
    median = ordered[mid] if n % 2 else (ordered[mid - 1] + ordered[mid]) / 2
    mean = population_mean(ordered)
    return ScoreStats(
        mean=mean,
        median=median,
        min=ordered[0],
        max=ordered[-1],
        std_dev=population_std_dev(ordered, mean),
    )


def _sort_key(result: RespondentRiskResult):
    # Highest score first, unscored last, then stable by ids
    has_score = result.score is not None
    return (not has_score, -(result.score or 0.0), result.respondent_id, result.response_id)


def analyze_population(
    form: Form,
    responses: List[Response],
    thresholds: Optional[RiskThresholds] = None,
    buckets: Optional[int] = None,
    eligible_statuses: Optional[Iterable[str]] = None,
    trader_questions: Optional[Tuple[List[TraderQuestion], Dict[str, str]]] = None,
) -> PopulationRiskResult:
    """
    Risk-aversion analysis for all eligible respondents of a form.

    Args:
        form: Form with its questions
        responses: Responses for the form; ineligible ones are ignored
        thresholds: Category cut-offs
        buckets: Histogram bucket count
        eligible_statuses: Response statuses to include (default: submitted)
        trader_questions: Output of build_trader_questions(form), when the
            caller has already profiled the instruments

    Returns:
        PopulationRiskResult (fresh object, deterministic for the input)
    """
    thresholds = thresholds or RiskThresholds()
    buckets = buckets or config.RISK_HISTOGRAM_BUCKETS
    statuses = tuple(eligible_statuses or config.ANALYTICS_ELIGIBLE_STATUSES)

    if trader_questions is None:
        trader_questions = build_trader_questions(form)
    valid, invalid = trader_questions
    eligible = [r for r in responses if r.form_id == form.id and is_eligible(r, statuses)]

    results: List[RespondentRiskResult] = []
    without_ratings = 0
    for response in eligible:
        result = score_respondent(response, valid, thresholds)
        if result.status == RiskStatus.NO_RATINGS:
            without_ratings += 1
            continue
        results.append(result)
    results.sort(key=_sort_key)

    scored = [r for r in results if r.status == RiskStatus.SCORED]
    breakdown = ExcludedBreakdown(
        insufficient_data=sum(1 for r in results if r.status == RiskStatus.INSUFFICIENT_DATA),
        zero_variance=sum(1 for r in results if r.status == RiskStatus.ZERO_VARIANCE),
    )

    category_counts = {label.value: 0 for label in RiskLabel}
    for r in scored:
        category_counts[r.label.value] += 1

    scatter = [
        ScatterPoint(
            std_dev=item.std_dev,
            rating=item.rating,
            respondent_id=r.respondent_id,
            question_id=item.question_id,
            instrument_name=item.instrument_name,
        )
        for r in scored
        for item in r.rated_instruments
    ]

    scores = [r.score for r in scored]
    result = PopulationRiskResult(
        form_id=form.id,
        form_title=form.title,
        trader_question_count=len(form.trader_questions()),
        invalid_instruments=invalid,
        total_respondents=len(results),
        scored_count=len(scored),
        excluded_count=breakdown.insufficient_data + breakdown.zero_variance,
        excluded_breakdown=breakdown,
        respondents_without_ratings=without_ratings,
        category_counts=category_counts,
        score_stats=score_stats(scores),
        distribution=build_histogram(scores, buckets),
        scatter=scatter,
        respondents=results,
    )
    result.result_hash = canonicalize_and_hash(result)
    return result


def summarize(result: PopulationRiskResult) -> RiskSummary:
    return RiskSummary(
        scored_count=result.scored_count,
        excluded_count=result.excluded_count,
        respondents_without_ratings=result.respondents_without_ratings,
        category_counts=dict(result.category_counts),
        mean_score=result.score_stats.mean,
    )


def chart_data(result: PopulationRiskResult) -> RiskChartData:
    """Distribution + scatter series for the admin charts."""
    respondent_points = [
        RespondentPoint(
            score=r.score,
            average_normalized_rating=population_mean(
                [item.normalized_rating for item in r.rated_instruments]
            ),
            label=r.label,
            respondent_id=r.respondent_id,
        )
        for r in result.respondents
        if r.status == RiskStatus.SCORED
    ]
    return RiskChartData(
        form_id=result.form_id,
        distribution=result.distribution,
        category_counts=[
            CategoryCount(
                category=label,
                count=result.category_counts.get(label.value, 0),
                color=CATEGORY_COLORS[label],
            )
            for label in RiskLabel
        ],
        scatter=result.scatter,
        respondent_points=respondent_points,
    )
