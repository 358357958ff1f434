"""
HTTP Helpers: request identity and error mapping

Admin endpoints require X-Admin-API-Key matching ADMIN_API_KEY. When no key
is configured the service runs in dev mode and admin endpoints are open.

Respondent-facing endpoints identify the caller with X-User-Id.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

from survey_analytics.config import get_admin_api_key
from survey_analytics.shared.errors import AnalyticsError

logger = logging.getLogger(__name__)

_dev_mode_warned = False


def _warn_dev_mode() -> None:
    global _dev_mode_warned
    if not _dev_mode_warned:
        logger.warning("ADMIN_API_KEY not set; admin endpoints are unauthenticated (dev mode)")
        _dev_mode_warned = True


def verify_admin_key(x_admin_api_key: str = Header(None, alias="X-Admin-API-Key")) -> str:
    """
    Verify admin API key from header.

    Raises 401 if missing or invalid.
    """
    expected_key = get_admin_api_key()

    if not expected_key:
        _warn_dev_mode()
        return "dev_mode"

    if not x_admin_api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-API-Key header"
        )

    if x_admin_api_key != expected_key:
        raise HTTPException(
            status_code=401,
            detail="Invalid admin API key"
        )

    return x_admin_api_key


class Requester:
    """Caller of a respondent-facing endpoint."""

    def __init__(self, user_id: Optional[str], is_privileged: bool):
        self.user_id = user_id
        self.is_privileged = is_privileged


def get_requester(
    x_user_id: str = Header(None, alias="X-User-Id"),
    x_admin_api_key: str = Header(None, alias="X-Admin-API-Key"),
) -> Requester:
    """
    Resolve the caller from headers.

    A presented admin key must be valid (401 otherwise) and grants
    privileged access. Without an admin key, X-User-Id is required.
    """
    is_privileged = False
    if x_admin_api_key:
        verify_admin_key(x_admin_api_key)
        is_privileged = True

    if not is_privileged and not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    return Requester(user_id=x_user_id, is_privileged=is_privileged)


def http_error(error: AnalyticsError) -> HTTPException:
    """AnalyticsError -> HTTPException with a {error_code, message} body."""
    return HTTPException(status_code=error.http_code, detail=error.to_dict())
