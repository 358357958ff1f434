"""Shared utilities: errors and canonical hashing."""

from .errors import (
    AnalyticsError,
    AnalyticsErrorCode,
    MalformedAnswer,
    InvalidInstrument,
    NotFound,
    Forbidden,
    FormNotEligible,
    DataSourceUnavailable,
)
from .hashing import (
    canonicalize,
    canonicalize_and_hash,
    verify_hash,
)

__all__ = [
    "AnalyticsError",
    "AnalyticsErrorCode",
    "MalformedAnswer",
    "InvalidInstrument",
    "NotFound",
    "Forbidden",
    "FormNotEligible",
    "DataSourceUnavailable",
    "canonicalize",
    "canonicalize_and_hash",
    "verify_hash",
]
