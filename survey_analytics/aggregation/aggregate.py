"""
Aggregation Engine

Walks every eligible response of a form, normalizes each answer once, and
produces one summary per question regardless of its type.

Pipeline:
1. Drop ineligible (non-submitted) responses
2. Normalize answers per question; malformed answers are skipped + tallied
3. Summarize each question by kind
4. Attach instrument profile + population risk summary to trader questions
5. Flatten each response into an export row

A question with no eligible answers gets count 0 and null statistics.

Version: aggregation_v1
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from survey_analytics import config
from survey_analytics.config import RiskThresholds
from survey_analytics.forms.models import Form, Question, QuestionType, Response, is_eligible
from survey_analytics.instruments.models import InstrumentSummary
from survey_analytics.instruments.profile import population_mean, population_std_dev
from survey_analytics.normalizer import (
    Choice,
    Files,
    MultiChoice,
    NormalizedAnswer,
    Rating,
    Scale,
    Text,
    is_blank,
    normalize_answer,
)
from survey_analytics.risk.models import RiskSummary
from survey_analytics.risk.population import analyze_population, build_trader_questions, summarize
from survey_analytics.shared.errors import MalformedAnswer
from survey_analytics.shared.hashing import canonicalize_and_hash

from .models import (
    AggregationResult,
    FormHeader,
    QuestionSummary,
    ReportSummary,
    RespondentRow,
)

logger = logging.getLogger(__name__)

_KIND_BY_TYPE = {
    QuestionType.SINGLE_CHOICE: "choice",
    QuestionType.MULTIPLE_CHOICE: "multi_choice",
    QuestionType.TEXT_SHORT: "text",
    QuestionType.TEXT_LONG: "text",
    QuestionType.LIKERT_SCALE: "scale",
    QuestionType.NUMERIC_SCALE: "scale",
    QuestionType.FILE_UPLOAD: "file",
    QuestionType.TRADER_RATING: "rating",
}


def question_kind(question: Question) -> Optional[str]:
    """Summary kind, or None for questions that collect no answers."""
    return _KIND_BY_TYPE.get(question.effective_type)


def analyzable_questions(form: Form) -> List[Question]:
    """Ordered questions that collect answers (instructions dropped)."""
    return [q for q in form.ordered_questions() if question_kind(q) is not None]


def format_number(value: float) -> str:
    """7.0 -> "7", 7.5 -> "7.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


# =============================================================================
# OPTION RESOLUTION
# =============================================================================

def _option_lookup(question: Question) -> Tuple[List[str], Dict[str, str]]:
    """
    Returns:
        (option values in option order, {value or id -> value})
    """
    ordered = [o.value for o in question.sorted_options()]
    lookup: Dict[str, str] = {}
    for option in question.options:
        lookup.setdefault(option.id, option.value)
    for option in question.options:
        lookup[option.value] = option.value
    return ordered, lookup


def ordered_selection(question: Question, values: Iterable[str]) -> List[str]:
    """Known options in option order, unknown values after, alphabetically."""
    ordered, lookup = _option_lookup(question)
    position = {value: i for i, value in enumerate(ordered)}
    resolved = {lookup.get(v, v) for v in values}
    return sorted(resolved, key=lambda v: (0, position[v], "") if v in position else (1, 0, v))


# =============================================================================
# PER-KIND SUMMARIES
# =============================================================================

def summarize_choice(question: Question, answers: List[NormalizedAnswer], base: Dict[str, Any]) -> QuestionSummary:
    """Frequency per option; unknown/retired values go to `other`."""
    ordered, lookup = _option_lookup(question)
    counts = {value: 0 for value in ordered}
    other = 0
    for answer in answers:
        selected = [answer.value] if isinstance(answer, Choice) else sorted(answer.values)
        for raw in selected:
            value = lookup.get(raw)
            if value is None:
                other += 1
            else:
                counts[value] += 1

    total = len(answers)
    percentages = {
        value: round(count / total * 100, 2) if total else 0.0
        for value, count in counts.items()
    }
    return QuestionSummary(
        **base,
        count=total,
        option_counts=counts,
        other=other,
        total_respondents=total,
        percentages=percentages,
    )


def summarize_numeric(values: List[float], base: Dict[str, Any]) -> QuestionSummary:
    """count/mean/min/max/std_dev (population) + value distribution."""
    if not values:
        return QuestionSummary(**base, count=0, distribution={})

    mean = population_mean(values)
    distribution: Dict[str, int] = {}
    for value in sorted(values):
        key = format_number(value)
        distribution[key] = distribution.get(key, 0) + 1
    return QuestionSummary(
        **base,
        count=len(values),
        mean=mean,
        min=min(values),
        max=max(values),
        std_dev=population_std_dev(values, mean),
        distribution=distribution,
    )


def summarize_text(answers: List[Text], base: Dict[str, Any]) -> QuestionSummary:
    """Count of non-empty answers only; no content analysis."""
    non_empty = [a.value for a in answers if not a.is_empty]
    average_length = (
        sum(len(v) for v in non_empty) / len(non_empty) if non_empty else None
    )
    return QuestionSummary(**base, count=len(non_empty), average_length=average_length)


def summarize_files(answers: List[Files], base: Dict[str, Any]) -> QuestionSummary:
    return QuestionSummary(**base, count=sum(1 for a in answers if a.refs))


def summarize_question(
    question: Question,
    answers: List[NormalizedAnswer],
    excluded: int,
    risk_summary: Optional[RiskSummary] = None,
    instrument: Optional[InstrumentSummary] = None,
    instrument_error: Optional[str] = None,
) -> QuestionSummary:
    kind = question_kind(question)
    base = dict(
        question_id=question.id,
        text=question.text,
        type=question.effective_type.value,
        kind=kind,
        order_index=question.order_index,
        excluded_count=excluded,
    )

    if kind in ("choice", "multi_choice"):
        return summarize_choice(question, answers, base)
    if kind == "text":
        return summarize_text(answers, base)
    if kind == "file":
        return summarize_files(answers, base)

    values = [float(a.value) for a in answers if isinstance(a, (Scale, Rating))]
    summary = summarize_numeric(values, base)
    if kind == "rating":
        if instrument is not None:
            summary.instrument = instrument
            summary.risk_summary = risk_summary
        else:
            summary.instrument_error = instrument_error
    return summary


# =============================================================================
# ROW RENDERING
# =============================================================================

def render_value(question: Question, answer: NormalizedAnswer) -> Any:
    """Cell value of an answer; options resolve to their stored value."""
    if isinstance(answer, Choice):
        _, lookup = _option_lookup(question)
        return lookup.get(answer.value, answer.value)
    if isinstance(answer, MultiChoice):
        return ordered_selection(question, answer.values)
    if isinstance(answer, Files):
        return sorted(answer.refs)
    return answer.value


# =============================================================================
# MAIN
# =============================================================================

def aggregate_form(
    form: Form,
    responses: List[Response],
    eligible_statuses: Optional[Iterable[str]] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> AggregationResult:
    """
    Aggregate all eligible answers of a form, question by question.

    Args:
        form: Form with questions and options
        responses: Responses for the form (answers nested)
        eligible_statuses: Response statuses to include (default: submitted)
        thresholds: Risk category cut-offs for the trader risk summary

    Returns:
        AggregationResult with per-question summaries ordered by
        order_index and one export row per eligible response
    """
    statuses = tuple(eligible_statuses or config.ANALYTICS_ELIGIBLE_STATUSES)
    questions = analyzable_questions(form)
    by_id = {q.id: q for q in questions}

    # Step 1: Eligibility
    form_responses = [r for r in responses if r.form_id == form.id]
    eligible = [r for r in form_responses if is_eligible(r, statuses)]

    # Step 2: Normalize
    normalized: Dict[str, List[NormalizedAnswer]] = {q.id: [] for q in questions}
    excluded: Dict[str, int] = {q.id: 0 for q in questions}
    rows: List[RespondentRow] = []
    for response in eligible:
        row = RespondentRow(
            response_id=response.id,
            respondent_id=response.respondent_id,
            respondent_name=response.respondent_name,
            submitted_at=response.submitted_at,
        )
        for question_id, answer in response.answers_by_question().items():
            question = by_id.get(question_id)
            if question is None or is_blank(answer.value):
                continue
            try:
                value = normalize_answer(answer.value, question)
            except MalformedAnswer as e:
                excluded[question_id] += 1
                logger.debug(f"Skipping answer on response {response.id}: {e.reason}")
                continue
            normalized[question_id].append(value)
            row.values[question_id] = render_value(question, value)
        rows.append(row)

    # Step 3 + 4: Summaries, with risk summary on trader questions
    risk_summary = None
    instruments: Dict[str, InstrumentSummary] = {}
    invalid: Dict[str, str] = {}
    if any(q.is_trader_rating for q in questions):
        trader_questions = build_trader_questions(form)
        instruments = {q.id: summary for q, summary in trader_questions[0]}
        invalid = trader_questions[1]
        population = analyze_population(
            form,
            eligible,
            thresholds=thresholds,
            eligible_statuses=statuses,
            trader_questions=trader_questions,
        )
        risk_summary = summarize(population)

    per_question = [
        summarize_question(
            q,
            normalized[q.id],
            excluded[q.id],
            risk_summary,
            instrument=instruments.get(q.id),
            instrument_error=invalid.get(q.id),
        )
        for q in questions
    ]

    result = AggregationResult(
        form=FormHeader(
            id=form.id,
            title=form.title,
            description=form.description,
            total_questions=len(form.questions),
        ),
        summary=ReportSummary(
            total_responses=len(eligible),
            excluded_responses=len(form_responses) - len(eligible),
            malformed_answers=sum(excluded.values()),
        ),
        per_question=per_question,
        rows=rows,
    )
    result.result_hash = canonicalize_and_hash(result)
    logger.info(
        f"Aggregated form {form.id}: {len(eligible)} responses, "
        f"{len(per_question)} questions, {result.summary.malformed_answers} malformed answers"
    )
    return result
