"""
Reports Admin Endpoints

Endpoints:
- GET /api/v1/reports/health - Module health check
- GET /api/v1/reports/forms/{form_id}/aggregate - Per-question aggregate report
- GET /api/v1/reports/forms/{form_id}/export - Wide CSV download

Security: report endpoints require X-Admin-API-Key, health check is public.

Version: reports_v1
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response

from survey_analytics import config
from survey_analytics.aggregation import AggregationResult
from survey_analytics.service import AnalyticsService, get_analytics_service
from survey_analytics.shared.errors import AnalyticsError
from survey_analytics.shared.http import http_error, verify_admin_key

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/reports",
    tags=["reports"],
)


# ============================================================
# HEALTH CHECK
# ============================================================

@router.get("/health")
def reports_health():
    """Module health check. Does not require authentication."""
    return {
        "status": "ok",
        "module": "reports",
        "aggregation_version": config.AGGREGATION_VERSION,
        "export_version": config.EXPORT_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
    }


# ============================================================
# AGGREGATE REPORT
# ============================================================

@router.get("/forms/{form_id}/aggregate", response_model=AggregationResult)
def get_aggregate_report(
    form_id: str,
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Per-question aggregate report for a published form.

    Choice questions: counts per option plus `other` for unknown values.
    Scale and rating questions: count, mean, min, max, std_dev, distribution.
    Text questions: non-empty answer count only.
    Trader questions also carry the instrument profile and a population
    risk summary.
    """
    try:
        return service.get_aggregate_report(form_id)
    except AnalyticsError as e:
        raise http_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Aggregate report failed for form {form_id}")
        raise HTTPException(status_code=500, detail=f"Aggregation error: {str(e)}")


# ============================================================
# CSV EXPORT
# ============================================================

@router.get("/forms/{form_id}/export")
def export_responses(
    form_id: str,
    api_key: str = Depends(verify_admin_key),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Download every eligible response as CSV, one row per response.

    Multi-value answers are joined with the configured delimiter
    (default "|").
    """
    try:
        export = service.export_csv(form_id)
    except AnalyticsError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception(f"Export failed for form {form_id}")
        raise HTTPException(status_code=500, detail=f"Export error: {str(e)}")

    return Response(
        content=export.content,
        media_type=f"{export.mime_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
