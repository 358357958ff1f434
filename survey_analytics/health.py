"""
Deployment Health Check Endpoint
================================
Returns component status of the deployed analytics service.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from survey_analytics import __version__, config
from survey_analytics.service import AnalyticsService, get_analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("/deployment")
def deployment_health(service: AnalyticsService = Depends(get_analytics_service)):
    """
    Component health check.
    Verifies the data source answers and reports engine versions.
    """
    status = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "api_version": __version__,
        "components": {},
    }

    repository = service.repository
    try:
        form_ids = repository.list_published_form_ids()
        status["components"]["data_source"] = {
            "status": "healthy",
            "backend": type(repository).__name__,
            "published_forms": len(form_ids),
        }
    except Exception as e:
        logger.error(f"Data source health check failed: {e}")
        status["components"]["data_source"] = {
            "status": "error",
            "backend": type(repository).__name__,
            "error": str(e),
        }

    status["components"]["engine"] = {
        "status": "healthy",
        "normalizer": config.NORMALIZER_VERSION,
        "instrument_profile": config.INSTRUMENT_PROFILE_VERSION,
        "aggregation": config.AGGREGATION_VERSION,
        "risk_aversion": config.RISK_AVERSION_VERSION,
        "export": config.EXPORT_VERSION,
    }

    healthy = all(c["status"] == "healthy" for c in status["components"].values())
    status["overall_status"] = "healthy" if healthy else "degraded"
    return status
