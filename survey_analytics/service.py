"""
Analytics Service

The operations exposed to the transport layer:

    get_aggregate_report(form_id)                         -> AggregationResult
    export_csv(form_id)                                   -> ExportFile
    get_risk_aversion_analysis(form_id)                   -> PopulationRiskResult
    get_risk_aversion_chart_data(form_id)                 -> RiskChartData
    get_individual_risk_analysis(response_id, requester)  -> RespondentRiskResult
    perform_risk_analysis()                               -> BatchRiskAnalysis

Loads data through the repository, enforces form eligibility and the
response ownership check, then delegates to the pure engine functions.
Role checks beyond ownership belong to the caller.
"""

import logging
from typing import List, Optional, Tuple

from survey_analytics import config
from survey_analytics.aggregation import AggregationResult, aggregate_form
from survey_analytics.config import RiskThresholds, get_risk_thresholds
from survey_analytics.export import ExportFile, format_csv
from survey_analytics.forms.models import Form, Response, is_eligible
from survey_analytics.forms.repository import FormRepository, get_repository
from survey_analytics.instruments import InstrumentSummary
from survey_analytics.risk import (
    BatchRiskAnalysis,
    PopulationRiskResult,
    RespondentRiskResult,
    RiskChartData,
    analyze_population,
    build_trader_questions,
    chart_data,
    perform_risk_analysis,
    score_respondent,
)
from survey_analytics.shared.errors import Forbidden, FormNotEligible, NotFound

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Read-only analytics over a FormRepository."""

    def __init__(
        self,
        repository: FormRepository,
        thresholds: Optional[RiskThresholds] = None,
        eligible_statuses: Optional[Tuple[str, ...]] = None,
        require_published: Optional[bool] = None,
        histogram_buckets: Optional[int] = None,
    ):
        self.repository = repository
        self.thresholds = thresholds or get_risk_thresholds()
        self.eligible_statuses = tuple(eligible_statuses or config.ANALYTICS_ELIGIBLE_STATUSES)
        self.require_published = (
            config.ANALYTICS_REQUIRE_PUBLISHED if require_published is None else require_published
        )
        self.histogram_buckets = histogram_buckets or config.RISK_HISTOGRAM_BUCKETS

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load_form(self, form_id: str) -> Form:
        form = self.repository.get_form(form_id)
        if form is None:
            raise NotFound(f"Form {form_id} not found")
        if self.require_published and not form.is_published:
            raise FormNotEligible(
                f"Form {form_id} is {form.status.value}; only published forms are analyzed"
            )
        return form

    def _load_eligible_responses(self, form: Form) -> List[Response]:
        responses = self.repository.get_responses(form.id, self.eligible_statuses)
        return [
            r for r in responses
            if r.form_id == form.id and is_eligible(r, self.eligible_statuses)
        ]

    # =========================================================================
    # REPORTS
    # =========================================================================

    def get_aggregate_report(self, form_id: str) -> AggregationResult:
        form = self._load_form(form_id)
        responses = self._load_eligible_responses(form)
        return aggregate_form(
            form,
            responses,
            eligible_statuses=self.eligible_statuses,
            thresholds=self.thresholds,
        )

    def export_csv(self, form_id: str) -> ExportFile:
        report = self.get_aggregate_report(form_id)
        export = format_csv(report)
        logger.info(f"Exported form {form_id}: {len(report.rows)} rows")
        return export

    # =========================================================================
    # RISK AVERSION
    # =========================================================================

    def get_risk_aversion_analysis(self, form_id: str) -> PopulationRiskResult:
        form = self._load_form(form_id)
        responses = self._load_eligible_responses(form)
        result = analyze_population(
            form,
            responses,
            thresholds=self.thresholds,
            buckets=self.histogram_buckets,
            eligible_statuses=self.eligible_statuses,
        )
        logger.info(
            f"Risk analysis for form {form_id}: {result.scored_count} scored, "
            f"{result.excluded_count} excluded"
        )
        return result

    def get_risk_aversion_chart_data(self, form_id: str) -> RiskChartData:
        return chart_data(self.get_risk_aversion_analysis(form_id))

    def get_individual_risk_analysis(
        self,
        response_id: str,
        requester_id: Optional[str],
        is_privileged: bool = False,
    ) -> RespondentRiskResult:
        """
        Score a single response.

        Raises:
            NotFound: response or its form absent, or response not eligible
            Forbidden: requester does not own the response and is not privileged
        """
        response = self.repository.get_response(response_id)
        if response is None:
            raise NotFound(f"Response {response_id} not found")
        if not is_privileged and response.respondent_id != requester_id:
            raise Forbidden("Access denied")
        if not is_eligible(response, self.eligible_statuses):
            raise NotFound(f"Response {response_id} has not been submitted")

        form = self._load_form(response.form_id)
        trader_questions, _ = build_trader_questions(form)
        return score_respondent(response, trader_questions, self.thresholds)

    def get_instrument_profiles(self, form_id: str) -> Tuple[List[InstrumentSummary], dict]:
        """Profiles of a form's trader questions, plus {question_id: error}."""
        form = self._load_form(form_id)
        valid, errors = build_trader_questions(form)
        return [summary for _, summary in valid], errors

    async def perform_risk_analysis(
        self,
        concurrency: Optional[int] = None,
        timeout: Optional[float] = config.RISK_BATCH_TIMEOUT_SECONDS,
    ) -> BatchRiskAnalysis:
        return await perform_risk_analysis(
            self.repository,
            self.get_risk_aversion_analysis,
            concurrency=concurrency,
            timeout=timeout,
        )


# =============================================================================
# PROVIDER
# =============================================================================

_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Process-wide service over the configured repository (FastAPI dependency)."""
    global _service
    if _service is None:
        _service = AnalyticsService(get_repository())
    return _service
