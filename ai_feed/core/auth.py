"""
Token checks for the feed endpoints.
"""

from typing import Optional
from fastapi import Header, HTTPException, status

from ai_feed.config import get_settings
from ai_feed.core.feed.models import FeedSettings
from ai_feed.core.security import bearer_token, tokens_match


async def require_admin(
    authorization: Optional[str] = Header(None)
) -> None:
    """
    FastAPI dependency for admin endpoints (preview, download, validate, push).

    Usage:
        @router.get("/endpoint", dependencies=[Depends(require_admin)])
    """
    expected = get_settings().admin_api_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin API token is not configured",
            headers={"X-Error-Code": "admin_token_not_configured"}
        )

    provided = bearer_token(authorization)
    if not provided:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if not tokens_match(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
            headers={"X-Error-Code": "invalid_token"}
        )


def verify_pull_access(
    settings: FeedSettings,
    authorization: Optional[str] = None,
    token: Optional[str] = None
) -> None:
    """
    Check access to the pull endpoint.

    Raises:
        HTTPException: 404 if the pull endpoint is disabled, 401/403 on a
            missing or wrong token
    """
    if not settings.pull_endpoint_enabled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found"
        )

    provided = bearer_token(authorization) or token
    if not provided:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing access token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if not tokens_match(provided, settings.pull_access_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid access token",
            headers={"X-Error-Code": "invalid_token"}
        )
