"""
Population Risk Analyzer Test Suite

Validates:
- Only eligible (submitted) respondents of the form are analyzed
- insufficient-data / zero-variance respondents are excluded and counted
- Respondents without ratings are counted separately
- Histogram buckets span [-1, 1] with the top bucket closed
- Chart data carries category colours
- Deterministic, fresh result for unchanged input

Version: risk_aversion_v1
"""

import pytest

from survey_analytics.config import RiskThresholds
from survey_analytics.forms.models import ResponseStatus
from survey_analytics.risk import (
    RiskLabel,
    RiskStatus,
    analyze_population,
    build_histogram,
    build_trader_questions,
    chart_data,
    summarize,
)

from tests.factories import make_response, make_trader_form, make_trader_question, make_form


def make_population():
    form = make_trader_form(spreads=(2.0, 4.0, 6.0))
    responses = [
        make_response("r_averse", {"t1": 9, "t2": 6, "t3": 3}),
        make_response("r_seeking", {"t1": 3, "t2": 6, "t3": 9}),
        make_response("r_single", {"t1": 5}),
        make_response("r_flat", {"t1": 5, "t2": 5, "t3": 5}),
        make_response("r_none", {}),
        make_response("r_draft", {"t1": 9, "t2": 6, "t3": 3}, status=ResponseStatus.IN_PROGRESS),
        make_response("r_other_form", {"t1": 9, "t2": 6, "t3": 3}, form_id="form_2"),
    ]
    return form, responses


# ============================================================
# POPULATION ANALYSIS
# ============================================================

class TestAnalyzePopulation:

    def test_counts(self):
        form, responses = make_population()
        result = analyze_population(form, responses)
        assert result.trader_question_count == 3
        assert result.total_respondents == 4
        assert result.scored_count == 2
        assert result.excluded_count == 2
        assert result.excluded_breakdown.insufficient_data == 1
        assert result.excluded_breakdown.zero_variance == 1
        assert result.respondents_without_ratings == 1

    def test_category_counts_include_every_label(self):
        form, responses = make_population()
        result = analyze_population(form, responses)
        assert result.category_counts == {
            "risk-averse": 1,
            "risk-neutral": 0,
            "risk-seeking": 1,
        }

    def test_ineligible_responses_ignored(self):
        form, responses = make_population()
        result = analyze_population(form, responses)
        ids = {r.response_id for r in result.respondents}
        assert "r_draft" not in ids
        assert "r_other_form" not in ids
        assert "r_none" not in ids

    def test_respondents_sorted_by_score(self):
        form, responses = make_population()
        result = analyze_population(form, responses)
        assert [r.response_id for r in result.respondents[:2]] == ["r_averse", "r_seeking"]
        assert all(r.score is None for r in result.respondents[2:])

    def test_score_stats(self):
        form, responses = make_population()
        stats = analyze_population(form, responses).score_stats
        assert stats.mean == pytest.approx(0.0)
        assert stats.min == pytest.approx(-1.0)
        assert stats.max == pytest.approx(1.0)
        assert stats.median == pytest.approx(0.0)

    def test_scatter_only_scored_respondents(self):
        form, responses = make_population()
        result = analyze_population(form, responses)
        assert len(result.scatter) == 6
        assert {p.respondent_id for p in result.scatter} == {"user_r_averse", "user_r_seeking"}

    def test_histogram_covers_scores(self):
        form, responses = make_population()
        result = analyze_population(form, responses, buckets=4)
        assert len(result.distribution) == 4
        assert result.distribution[0].count == 1
        assert result.distribution[-1].count == 1
        assert sum(b.count for b in result.distribution) == result.scored_count

    def test_no_responses(self):
        form = make_trader_form()
        result = analyze_population(form, [])
        assert result.total_respondents == 0
        assert result.score_stats.mean is None
        assert all(b.count == 0 for b in result.distribution)

    def test_invalid_instrument_excluded(self):
        questions = [
            make_trader_question("t1", spread=2.0, order_index=0),
            make_trader_question("t2", spread=6.0, order_index=1),
            make_trader_question("t_bad", order_index=2, returns=[1.0] * 3),
        ]
        form = make_form(questions)
        response = make_response("r1", {"t1": 9, "t2": 3, "t_bad": 10})
        result = analyze_population(form, [response])
        assert "t_bad" in result.invalid_instruments
        assert result.scored_count == 1
        assert len(result.respondents[0].rated_instruments) == 2

    def test_ratings_stored_as_one_element_lists(self):
        form = make_trader_form(spreads=(2.0, 4.0, 6.0))
        response = make_response("r1", {"t1": ["9"], "t2": ["6"], "t3": ["3"]})
        result = analyze_population(form, [response])
        assert result.scored_count == 1
        assert result.respondents_without_ratings == 0
        assert result.respondents[0].score == pytest.approx(1.0)

    def test_thresholds_change_labels(self):
        form = make_trader_form()
        response = make_response("r1", {"t1": 9, "t2": 6, "t3": 4})
        strict = analyze_population(form, [response], thresholds=RiskThresholds(averse=1.0, seeking=-1.0))
        assert strict.category_counts["risk-neutral"] == 1

    def test_idempotent(self):
        form, responses = make_population()
        first = analyze_population(form, responses)
        second = analyze_population(form, responses)
        assert first.result_hash == second.result_hash
        assert first.result_hash.startswith("sha256:")
        assert first.model_dump() == second.model_dump()
        assert first is not second

    def test_hash_changes_with_data(self):
        form, responses = make_population()
        first = analyze_population(form, responses)
        second = analyze_population(form, responses[1:])
        assert first.result_hash != second.result_hash


# ============================================================
# HISTOGRAM
# ============================================================

class TestHistogram:

    def test_default_bucket_labels(self):
        buckets = build_histogram([], 10)
        assert buckets[0].label == "[-1.0, -0.8)"
        assert buckets[-1].label == "[0.8, 1.0]"

    def test_boundaries(self):
        buckets = build_histogram([-1.0, 0.0, 1.0, 0.2], 10)
        counts = [b.count for b in buckets]
        assert counts[0] == 1
        assert counts[5] == 1
        assert counts[6] == 1
        assert counts[9] == 1

    def test_invalid_bucket_count(self):
        with pytest.raises(ValueError):
            build_histogram([0.0], 0)


# ============================================================
# SUMMARY / CHART DATA
# ============================================================

class TestChartData:

    def test_chart_data(self):
        form, responses = make_population()
        data = chart_data(analyze_population(form, responses))
        colors = {c.category: c.color for c in data.category_counts}
        assert colors[RiskLabel.RISK_AVERSE] == "#ef4444"
        assert colors[RiskLabel.RISK_NEUTRAL] == "#f59e0b"
        assert colors[RiskLabel.RISK_SEEKING] == "#3b82f6"
        assert len(data.respondent_points) == 2
        assert len(data.scatter) == 6

    def test_respondent_points_average_z_score(self):
        form, responses = make_population()
        data = chart_data(analyze_population(form, responses))
        for point in data.respondent_points:
            assert point.average_normalized_rating == pytest.approx(0.0)

    def test_summarize(self):
        form, responses = make_population()
        summary = summarize(analyze_population(form, responses))
        assert summary.scored_count == 2
        assert summary.respondents_without_ratings == 1
        assert summary.mean_score == pytest.approx(0.0)

    def test_trader_questions_in_order(self):
        form = make_trader_form(spreads=(3.0, 1.0))
        valid, invalid = build_trader_questions(form)
        assert [q.id for q, _ in valid] == ["t1", "t2"]
        assert invalid == {}
