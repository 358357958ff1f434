"""
Instrument Risk Profile Test Suite

Validates:
- Population mean / std dev over the 12 monthly returns
- risk_adjusted_return is null exactly when std_dev is zero
- Bad payloads raise InvalidInstrument tagged with the question id
- Advisory (stored) metrics are never trusted

Version: instrument_profile_v1
"""

import math

import pytest

from survey_analytics.instruments import (
    CRORE,
    Instrument,
    compute_risk_profile,
    parse_instrument,
    profile_for_question,
)
from survey_analytics.shared.errors import AnalyticsErrorCode, InvalidInstrument

from tests.factories import alternating_returns, make_trader_payload, make_trader_question


def make_instrument(returns, capital=10.0, **kwargs) -> Instrument:
    return Instrument(name="T", capital=capital, monthly_returns=returns, **kwargs)


# ============================================================
# PROFILE COMPUTATION
# ============================================================

class TestComputeRiskProfile:

    def test_all_zero_returns(self):
        profile = compute_risk_profile(make_instrument([0.0] * 12))
        assert profile.mean == 0.0
        assert profile.std_dev == 0.0
        assert profile.risk_adjusted_return is None

    def test_alternating_returns(self):
        profile = compute_risk_profile(make_instrument(alternating_returns(10.0)))
        assert profile.mean == pytest.approx(0.0)
        assert profile.std_dev == pytest.approx(10.0)
        assert profile.risk_adjusted_return == pytest.approx(0.0)

    def test_constant_nonzero_returns_have_no_ratio(self):
        profile = compute_risk_profile(make_instrument([2.5] * 12))
        assert profile.mean == pytest.approx(2.5)
        assert profile.std_dev == 0.0
        assert profile.risk_adjusted_return is None

    def test_population_std_dev(self):
        returns = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0, 12.0]
        profile = compute_risk_profile(make_instrument(returns))
        assert profile.mean == pytest.approx(6.5)
        assert profile.std_dev == pytest.approx(math.sqrt(143 / 12))
        assert profile.risk_adjusted_return == pytest.approx(6.5 / math.sqrt(143 / 12))

    def test_extremes_and_drawdown(self):
        returns = alternating_returns(4.0, mean=1.0)
        profile = compute_risk_profile(make_instrument(returns))
        assert profile.best_month == pytest.approx(5.0)
        assert profile.worst_month == pytest.approx(-3.0)
        assert profile.max_drawdown == pytest.approx(3.0)
        assert profile.total_return == pytest.approx(12.0)

    def test_no_losing_month_has_zero_drawdown(self):
        profile = compute_risk_profile(make_instrument([1.0] * 12))
        assert profile.max_drawdown == 0.0

    def test_monthly_pnl_in_capital_units(self):
        profile = compute_risk_profile(make_instrument([10.0] * 12, capital=2.0))
        assert profile.monthly_pnl[0] == pytest.approx(0.1 * 2.0 * CRORE)

    def test_advisory_mismatch_flagged(self):
        instrument = make_instrument(alternating_returns(3.0), advisory_mean=5.0, advisory_std_dev=3.0)
        assert compute_risk_profile(instrument).advisory_mismatch is True

    def test_advisory_match_within_rounding(self):
        instrument = make_instrument(alternating_returns(3.0), advisory_mean=0.0, advisory_std_dev=3.004)
        assert compute_risk_profile(instrument).advisory_mismatch is False


# ============================================================
# PAYLOAD VALIDATION
# ============================================================

class TestParseInstrument:

    def test_valid_payload(self):
        instrument = parse_instrument(make_trader_payload(name="Asha", capital="25", mean=1.0, stdDev=5.0))
        assert instrument.name == "Asha"
        assert instrument.capital == 25.0
        assert instrument.advisory_std_dev == 5.0
        assert len(instrument.monthly_returns) == 12

    def test_numeric_string_returns_accepted(self):
        instrument = parse_instrument(make_trader_payload(returns=["1.5"] * 12))
        assert instrument.monthly_returns == [1.5] * 12

    @pytest.mark.parametrize("length", [0, 11, 13])
    def test_wrong_length_rejected(self, length):
        with pytest.raises(InvalidInstrument) as exc:
            parse_instrument(make_trader_payload(returns=[1.0] * length))
        assert exc.value.error_code == AnalyticsErrorCode.INVALID_INSTRUMENT
        assert "12" in exc.value.reason

    def test_non_numeric_return_rejected(self):
        returns = [1.0] * 11 + ["n/a"]
        with pytest.raises(InvalidInstrument) as exc:
            parse_instrument(make_trader_payload(returns=returns))
        assert "month 12" in exc.value.reason

    def test_missing_payload_rejected(self):
        with pytest.raises(InvalidInstrument):
            parse_instrument(None)

    def test_negative_capital_rejected(self):
        with pytest.raises(InvalidInstrument):
            parse_instrument(make_trader_payload(capital=-1))


# ============================================================
# QUESTION INTEGRATION
# ============================================================

class TestProfileForQuestion:

    def test_profile_from_question(self):
        summary = profile_for_question(make_trader_question("t1", spread=7.0))
        assert summary.question_id == "t1"
        assert summary.name == "Trader t1"
        assert summary.profile.std_dev == pytest.approx(7.0)

    def test_invalid_question_tagged_with_id(self):
        question = make_trader_question("t9", returns=[1.0] * 5)
        with pytest.raises(InvalidInstrument) as exc:
            profile_for_question(question)
        assert exc.value.question_id == "t9"

    def test_recomputes_instead_of_trusting_stored_metrics(self):
        question = make_trader_question("t1", spread=2.0, mean=0.0, stdDev=99.0)
        summary = profile_for_question(question)
        assert summary.profile.std_dev == pytest.approx(2.0)
        assert summary.profile.advisory_mismatch is True
