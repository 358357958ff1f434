"""
Instrument Risk Profile

Derives mean, population standard deviation and risk-adjusted return from a
trader's 12 monthly returns.

Population statistics (divide by 12) because the 12 months are the entire
observed history of the instrument, not a sample of it.

Version: instrument_profile_v1
"""

import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from survey_analytics.forms.models import Question, TRADER_CONFIG_KEY
from survey_analytics.shared.errors import InvalidInstrument

from .models import CRORE, MONTHS, Instrument, InstrumentRiskProfile, InstrumentSummary

logger = logging.getLogger(__name__)

# Stored advisory metrics are rounded to 2 dp in the authoring UI
ADVISORY_TOLERANCE = 0.01


def population_mean(values: List[float]) -> float:
    return sum(values) / len(values)


def population_std_dev(values: List[float], mean: Optional[float] = None) -> float:
    if mean is None:
        mean = population_mean(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def _parse_return(value: Any, month: int) -> float:
    if isinstance(value, bool):
        raise InvalidInstrument(f"month {month + 1} return is not numeric")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInstrument(f"month {month + 1} return is not numeric: {value!r}")
    if not math.isfinite(number):
        raise InvalidInstrument(f"month {month + 1} return is not finite")
    return number


def _optional_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_instrument(payload: Optional[Dict[str, Any]]) -> Instrument:
    """
    Validate a traderPerformance payload.

    Raises:
        InvalidInstrument: missing payload, wrong-length or non-numeric
            return series, bad capital
    """
    if not isinstance(payload, dict):
        raise InvalidInstrument("missing trader payload")

    returns = payload.get("monthlyReturns")
    if not isinstance(returns, (list, tuple)):
        raise InvalidInstrument("monthlyReturns must be a list")
    if len(returns) != MONTHS:
        raise InvalidInstrument(
            f"monthlyReturns must have exactly {MONTHS} entries, got {len(returns)}"
        )
    monthly_returns = [_parse_return(v, i) for i, v in enumerate(returns)]

    name = payload.get("traderName") or payload.get("name") or ""
    capital = _optional_float(payload.get("capital", 0))
    if capital is None:
        raise InvalidInstrument("capital is not numeric")

    try:
        return Instrument(
            name=str(name),
            capital=capital,
            monthly_returns=monthly_returns,
            advisory_mean=_optional_float(payload.get("mean")),
            advisory_std_dev=_optional_float(payload.get("stdDev")),
        )
    except ValidationError as e:
        raise InvalidInstrument(f"invalid trader payload: {e.errors()[0].get('msg')}")


def compute_risk_profile(instrument: Instrument) -> InstrumentRiskProfile:
    """
    Compute the objective profile of an instrument.

    riskAdjustedReturn is undefined (None) when there is no volatility,
    reported distinctly from zero.
    """
    returns = instrument.monthly_returns
    if len(returns) != MONTHS:
        raise InvalidInstrument(f"expected {MONTHS} monthly returns, got {len(returns)}")

    mean = population_mean(returns)
    std_dev = population_std_dev(returns, mean)
    risk_adjusted = mean / std_dev if std_dev > 0 else None

    worst = min(returns)
    mismatch = False
    if instrument.advisory_mean is not None and abs(instrument.advisory_mean - mean) > ADVISORY_TOLERANCE:
        mismatch = True
    if instrument.advisory_std_dev is not None and abs(instrument.advisory_std_dev - std_dev) > ADVISORY_TOLERANCE:
        mismatch = True

    return InstrumentRiskProfile(
        mean=mean,
        std_dev=std_dev,
        risk_adjusted_return=risk_adjusted,
        worst_month=worst,
        best_month=max(returns),
        total_return=sum(returns),
        max_drawdown=max(-worst, 0.0),
        monthly_pnl=[r / 100 * instrument.capital * CRORE for r in returns],
        advisory_mismatch=mismatch,
    )


def profile_for_question(question: Question) -> InstrumentSummary:
    """
    Parse and profile the instrument embedded in a trader-rating question.

    Raises:
        InvalidInstrument: tagged with the question id
    """
    payload = (question.config or {}).get(TRADER_CONFIG_KEY)
    try:
        instrument = parse_instrument(payload)
        profile = compute_risk_profile(instrument)
    except InvalidInstrument as e:
        raise InvalidInstrument(e.reason, question_id=question.id)

    if profile.advisory_mismatch:
        logger.warning(
            f"Advisory metrics for question {question.id} disagree with recomputed values "
            f"(stored mean={instrument.advisory_mean}, stdDev={instrument.advisory_std_dev}; "
            f"computed mean={profile.mean:.4f}, stdDev={profile.std_dev:.4f})"
        )

    return InstrumentSummary(
        question_id=question.id,
        name=instrument.name or f"Trader {question.id}",
        capital=instrument.capital,
        profile=profile,
    )
