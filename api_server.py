"""
Survey Analytics API Server
Aggregate reports, CSV export and trader risk-aversion analysis over
survey responses.

All endpoints are read-only.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_analytics import __version__, config
from survey_analytics.health import router as health_router
from survey_analytics.reports import router as reports_router
from survey_analytics.risk.admin import router as risk_router

# ============================================
# Logging
# ============================================
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("survey_analytics")

# ============================================
# App Configuration
# ============================================
app = FastAPI(
    title="Survey Analytics API",
    description="Survey response analytics and trader risk profiling",
    version=__version__,
)

# ============================================
# CORS Configuration
# ============================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# ============================================
# Routers
# ============================================
app.include_router(reports_router)
app.include_router(risk_router)
app.include_router(health_router)


# ============================================
# Core Endpoints
# ============================================
@app.get("/")
def root():
    return {
        "service": "Survey Analytics API",
        "version": __version__,
        "status": "operational",
        "modules": ["reports", "risk_aversion"],
    }


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/version")
def version():
    return {
        "api_version": __version__,
        "normalizer": config.NORMALIZER_VERSION,
        "instrument_profile": config.INSTRUMENT_PROFILE_VERSION,
        "aggregation": config.AGGREGATION_VERSION,
        "risk_aversion": config.RISK_AVERSION_VERSION,
        "export": config.EXPORT_VERSION,
    }


logger.info(f"Survey Analytics API {__version__} initialized")
