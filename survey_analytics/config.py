"""
Analytics Configuration
=======================
Environment-driven settings for the analytics service.

All values are read once at import time except ADMIN_API_KEY, which the
routers read per request so tests and operators can rotate it without a
restart.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_timeout(name: str, default: str) -> Optional[float]:
    raw = os.getenv(name, default).strip().lower()
    if raw in ("", "none", "0"):
        return None
    return float(raw)


# =============================================================================
# DATA ACCESS
# =============================================================================

DATABASE_URL = os.getenv("DATABASE_URL")
SURVEY_DATA_FILE = os.getenv("SURVEY_DATA_FILE")

# =============================================================================
# ELIGIBILITY
# =============================================================================

ANALYTICS_REQUIRE_PUBLISHED = _env_bool("ANALYTICS_REQUIRE_PUBLISHED", True)
ANALYTICS_ELIGIBLE_STATUSES = _env_list("ANALYTICS_ELIGIBLE_STATUSES", "submitted")

# =============================================================================
# RISK AVERSION
# =============================================================================

RISK_AVERSE_THRESHOLD = float(os.getenv("RISK_AVERSE_THRESHOLD", "0.33"))
RISK_SEEKING_THRESHOLD = float(os.getenv("RISK_SEEKING_THRESHOLD", "-0.33"))
RISK_HISTOGRAM_BUCKETS = int(os.getenv("RISK_HISTOGRAM_BUCKETS", "10"))
RISK_BATCH_CONCURRENCY = int(os.getenv("RISK_BATCH_CONCURRENCY", "4"))
RISK_BATCH_TIMEOUT_SECONDS = _env_timeout("RISK_BATCH_TIMEOUT_SECONDS", "60")

# =============================================================================
# EXPORT
# =============================================================================

EXPORT_MULTI_VALUE_DELIMITER = os.getenv("EXPORT_MULTI_VALUE_DELIMITER", "|")

# =============================================================================
# SERVER
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = list(_env_list("CORS_ORIGINS", "*"))

# =============================================================================
# LAYER VERSIONS
# =============================================================================

NORMALIZER_VERSION = "normalizer_v1"
INSTRUMENT_PROFILE_VERSION = "instrument_profile_v1"
AGGREGATION_VERSION = "aggregation_v1"
RISK_AVERSION_VERSION = "risk_aversion_v1"
EXPORT_VERSION = "export_v1"


@dataclass(frozen=True)
class RiskThresholds:
    """
    Category cut-offs for the risk-aversion score.

    score >= averse  -> risk-averse
    score <= seeking -> risk-seeking
    otherwise        -> risk-neutral
    """
    averse: float = 0.33
    seeking: float = -0.33

    def __post_init__(self):
        if not (-1.0 <= self.seeking < self.averse <= 1.0):
            raise ValueError(
                f"Invalid risk thresholds: seeking={self.seeking}, averse={self.averse} "
                "(require -1 <= seeking < averse <= 1)"
            )


def get_risk_thresholds() -> RiskThresholds:
    """Thresholds from the environment."""
    return RiskThresholds(averse=RISK_AVERSE_THRESHOLD, seeking=RISK_SEEKING_THRESHOLD)


def get_admin_api_key() -> Optional[str]:
    return os.getenv("ADMIN_API_KEY")
