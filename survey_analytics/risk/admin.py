"""
Risk-Aversion Analytics Endpoints

Endpoints:
- GET  /api/v1/analytics/health - Module health check
- GET  /api/v1/analytics/risk-aversion/{form_id} - Population analysis
- GET  /api/v1/analytics/risk-aversion/{form_id}/chart - Chart-ready data
- GET  /api/v1/analytics/individual-risk/{response_id} - One respondent
- POST /api/v1/analytics/admin/risk-analysis - Every published form
- GET  /api/v1/analytics/instruments/{form_id} - Instrument profiles

Security: form-level endpoints require X-Admin-API-Key. The individual
endpoint accepts either the respondent's own X-User-Id or an admin key.

Version: risk_aversion_v1
"""

import logging
from datetime import datetime
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from survey_analytics import config
from survey_analytics.instruments import InstrumentSummary
from survey_analytics.service import AnalyticsService, get_analytics_service
from survey_analytics.shared.errors import AnalyticsError
from survey_analytics.shared.http import Requester, get_requester, http_error, verify_admin_key

from .models import BatchRiskAnalysis, PopulationRiskResult, RespondentRiskResult, RiskChartData

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/analytics",
    tags=["analytics", "risk"],
)


# Response models

class BatchRiskAnalysisResponse(BaseModel):
    """Admin batch run, stamped with the request time."""
    success: bool = True
    analysis: BatchRiskAnalysis
    generated_at: datetime = Field(default_factory=datetime.utcnow)


class InstrumentProfilesResponse(BaseModel):
    form_id: str
    instruments: List[InstrumentSummary]
    invalid_instruments: Dict[str, str] = Field(
        default_factory=dict, description="question_id -> reason"
    )


# ============================================================
# HEALTH CHECK
# ============================================================

@router.get("/health")
def analytics_health():
    """Module health check. Does not require authentication."""
    return {
        "status": "ok",
        "module": "risk_aversion",
        "version": config.RISK_AVERSION_VERSION,
        "thresholds": {
            "averse": config.RISK_AVERSE_THRESHOLD,
            "seeking": config.RISK_SEEKING_THRESHOLD,
        },
        "timestamp": datetime.utcnow().isoformat(),
    }


# ============================================================
# FORM-LEVEL ANALYSIS
# ============================================================

@router.get("/risk-aversion/{form_id}", response_model=PopulationRiskResult)
def get_risk_aversion(
    form_id: str,
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Risk-aversion analysis over every submitted response of a form.

    Respondents who rated fewer than two instruments, or whose ratings do
    not vary, are excluded from the statistics and counted separately.
    """
    try:
        return service.get_risk_aversion_analysis(form_id)
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception(f"Risk analysis failed for form {form_id}")
        raise HTTPException(status_code=500, detail=f"Risk analysis error: {str(e)}")


@router.get("/risk-aversion/{form_id}/chart", response_model=RiskChartData)
def get_risk_aversion_chart(
    form_id: str,
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Histogram, category counts and scatter series for rendering."""
    try:
        return service.get_risk_aversion_chart_data(form_id)
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception(f"Chart data failed for form {form_id}")
        raise HTTPException(status_code=500, detail=f"Chart data error: {str(e)}")


@router.get("/instruments/{form_id}", response_model=InstrumentProfilesResponse)
def get_instruments(
    form_id: str,
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Objective risk profile of each trader question on a form."""
    try:
        profiles, errors = service.get_instrument_profiles(form_id)
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception(f"Instrument profiles failed for form {form_id}")
        raise HTTPException(status_code=500, detail=f"Instrument profile error: {str(e)}")
    return InstrumentProfilesResponse(
        form_id=form_id,
        instruments=profiles,
        invalid_instruments=errors,
    )


# ============================================================
# INDIVIDUAL ANALYSIS
# ============================================================

@router.get("/individual-risk/{response_id}", response_model=RespondentRiskResult)
def get_individual_risk(
    response_id: str,
    requester: Requester = Depends(get_requester),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Risk-aversion score for one response.

    Respondents may only read their own response; admins may read any.
    """
    try:
        return service.get_individual_risk_analysis(
            response_id,
            requester_id=requester.user_id,
            is_privileged=requester.is_privileged,
        )
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception(f"Individual risk analysis failed for response {response_id}")
        raise HTTPException(status_code=500, detail=f"Risk analysis error: {str(e)}")


# ============================================================
# ADMIN BATCH
# ============================================================

@router.post("/admin/risk-analysis", response_model=BatchRiskAnalysisResponse)
async def run_risk_analysis(
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Analyze every published form concurrently.

    Per-form failures are reported in `errors` and never abort the run.
    """
    try:
        analysis = await service.perform_risk_analysis()
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("Batch risk analysis failed")
        raise HTTPException(status_code=500, detail=f"Batch risk analysis error: {str(e)}")
    return BatchRiskAnalysisResponse(analysis=analysis)
