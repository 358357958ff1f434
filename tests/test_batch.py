"""
Batch Risk Analysis Test Suite

Validates:
- Every published form is analyzed
- One failing form never aborts the others
- Forms still running at the timeout are reported as TIMEOUT
- Unchanged data gives an identical batch result
- Timed-out work keeps its pool slot, so later batches stay within the pool size

Version: risk_aversion_v1
"""

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from survey_analytics.forms import InMemoryFormRepository
from survey_analytics.forms.models import FormStatus
from survey_analytics.risk import analyze_population, perform_risk_analysis, run_batch
from survey_analytics.service import AnalyticsService
from survey_analytics.shared.errors import NotFound

from tests.factories import make_response, make_trader_form


def make_repository() -> InMemoryFormRepository:
    forms = [
        make_trader_form(form_id="form_a"),
        make_trader_form(form_id="form_b"),
        make_trader_form(form_id="form_draft", status=FormStatus.DRAFT),
    ]
    responses = [
        make_response("a1", {"t1": 9, "t2": 6, "t3": 3}, form_id="form_a"),
        make_response("a2", {"t1": 2, "t2": 5, "t3": 8}, form_id="form_a"),
        make_response("b1", {"t1": 4, "t2": 4, "t3": 9}, form_id="form_b"),
    ]
    return InMemoryFormRepository(forms=forms, responses=responses)


def analyze_from(repository):
    def analyze(form_id):
        form = repository.get_form(form_id)
        if form is None:
            raise NotFound(f"Form {form_id} not found")
        return analyze_population(form, repository.get_responses(form_id))
    return analyze


# ============================================================
# RUN BATCH
# ============================================================

class TestRunBatch:

    def test_all_forms_succeed(self):
        repository = make_repository()
        batch = asyncio.run(run_batch(["form_a", "form_b"], analyze_from(repository)))
        assert set(batch.results) == {"form_a", "form_b"}
        assert batch.errors == {}
        assert batch.forms_total == 2
        assert batch.forms_succeeded == 2
        assert batch.results["form_a"].scored_count == 2

    def test_error_isolated_per_form(self):
        repository = make_repository()
        batch = asyncio.run(run_batch(["form_a", "missing"], analyze_from(repository)))
        assert "form_a" in batch.results
        assert batch.errors["missing"].code == "NOT_FOUND"
        assert batch.forms_failed == 1

    def test_unexpected_exception_is_internal_error(self):
        def analyze(form_id):
            raise RuntimeError("boom")

        batch = asyncio.run(run_batch(["form_a"], analyze))
        assert batch.errors["form_a"].code == "INTERNAL_ERROR"
        assert "boom" in batch.errors["form_a"].message

    def test_timeout_reported_per_form(self):
        repository = make_repository()
        fast = analyze_from(repository)

        def analyze(form_id):
            if form_id == "form_b":
                time.sleep(0.5)
            return fast(form_id)

        batch = asyncio.run(run_batch(["form_a", "form_b"], analyze, timeout=0.1))
        assert "form_a" in batch.results
        assert batch.errors["form_b"].code == "TIMEOUT"

    def test_concurrency_bounded(self):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def analyze(form_id):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.02)
            with lock:
                state["running"] -= 1
            raise NotFound(form_id)

        asyncio.run(run_batch([f"f{i}" for i in range(6)], analyze, concurrency=2))
        assert state["peak"] <= 2

    def test_pool_bounded_across_batches_after_timeout(self):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def analyze(form_id):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.3 if form_id == "slow" else 0.01)
            with lock:
                state["running"] -= 1
            raise NotFound(form_id)

        pool = ThreadPoolExecutor(max_workers=1)
        try:
            with patch("survey_analytics.risk.batch._executor", pool):
                first = asyncio.run(run_batch(["slow"], analyze, timeout=0.05))
                second = asyncio.run(run_batch(["f1", "f2", "f3"], analyze, concurrency=3))
        finally:
            pool.shutdown(wait=True)
        assert first.errors["slow"].code == "TIMEOUT"
        assert second.forms_failed == 3
        assert all(e.code == "NOT_FOUND" for e in second.errors.values())
        assert state["peak"] == 1

    def test_duplicate_ids_analyzed_once(self):
        calls = []

        def analyze(form_id):
            calls.append(form_id)
            raise NotFound(form_id)

        batch = asyncio.run(run_batch(["x", "x", "y"], analyze))
        assert sorted(calls) == ["x", "y"]
        assert batch.forms_total == 2

    def test_empty_batch(self):
        batch = asyncio.run(run_batch([], analyze_from(make_repository())))
        assert batch.forms_total == 0
        assert batch.results == {}


# ============================================================
# PERFORM RISK ANALYSIS
# ============================================================

class TestPerformRiskAnalysis:

    def test_only_published_forms(self):
        repository = make_repository()
        batch = asyncio.run(perform_risk_analysis(repository, analyze_from(repository)))
        assert set(batch.results) == {"form_a", "form_b"}

    def test_idempotent(self):
        repository = make_repository()
        first = asyncio.run(perform_risk_analysis(repository, analyze_from(repository)))
        second = asyncio.run(perform_risk_analysis(repository, analyze_from(repository)))
        assert first.result_hash == second.result_hash
        assert first.model_dump() == second.model_dump()

    def test_service_batch(self):
        service = AnalyticsService(make_repository())
        batch = asyncio.run(service.perform_risk_analysis(concurrency=1))
        assert batch.forms_succeeded == 2
        assert batch.results["form_b"].form_id == "form_b"
