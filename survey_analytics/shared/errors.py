"""
Analytics Error Taxonomy

Per-record errors (MalformedAnswer, InvalidInstrument) are absorbed and
tallied by the engine. Per-request errors (NotFound, Forbidden,
FormNotEligible) propagate to the caller and map onto an HTTP status.
"""

from enum import Enum
from typing import Optional


class AnalyticsErrorCode(Enum):
    MALFORMED_ANSWER = "MALFORMED_ANSWER"
    INVALID_INSTRUMENT = "INVALID_INSTRUMENT"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    FORM_NOT_ELIGIBLE = "FORM_NOT_ELIGIBLE"
    TIMEOUT = "TIMEOUT"
    DATA_SOURCE_UNAVAILABLE = "DATA_SOURCE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AnalyticsError(Exception):
    """Base exception for analytics failures."""

    error_code = AnalyticsErrorCode.INTERNAL_ERROR
    http_code = 500

    def __init__(self, message: str, error_code: Optional[AnalyticsErrorCode] = None,
                 http_code: Optional[int] = None):
        if error_code is not None:
            self.error_code = error_code
        if http_code is not None:
            self.http_code = http_code
        self.message = message
        super().__init__(f"{self.error_code.value}: {message}")

    def to_dict(self) -> dict:
        return {"error_code": self.error_code.value, "message": self.message}


class MalformedAnswer(AnalyticsError):
    """Raw answer value cannot be coerced to its question's canonical type."""

    error_code = AnalyticsErrorCode.MALFORMED_ANSWER
    http_code = 422

    def __init__(self, question_id: Optional[str], reason: str):
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"question {question_id}: {reason}")


class InvalidInstrument(AnalyticsError):
    """Trader-rating question carries an unusable instrument payload."""

    error_code = AnalyticsErrorCode.INVALID_INSTRUMENT
    http_code = 422

    def __init__(self, reason: str, question_id: Optional[str] = None):
        self.question_id = question_id
        self.reason = reason
        prefix = f"question {question_id}: " if question_id else ""
        super().__init__(f"{prefix}{reason}")


class NotFound(AnalyticsError):
    error_code = AnalyticsErrorCode.NOT_FOUND
    http_code = 404


class Forbidden(AnalyticsError):
    error_code = AnalyticsErrorCode.FORBIDDEN
    http_code = 403


class FormNotEligible(AnalyticsError):
    """Form exists but is not published."""

    error_code = AnalyticsErrorCode.FORM_NOT_ELIGIBLE
    http_code = 409


class DataSourceUnavailable(AnalyticsError):
    error_code = AnalyticsErrorCode.DATA_SOURCE_UNAVAILABLE
    http_code = 503
