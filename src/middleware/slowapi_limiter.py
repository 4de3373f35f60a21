"""
Slowapi-based rate limiting.

Limits are keyed by the authenticated user when an access token cookie is
present, falling back to the client IP (Slack's egress for slash commands).
"""
from typing import Optional

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
import logging

from config import settings
from .auth import decode_access_token
from ..models.api_validation import SlackReply

logger = logging.getLogger(__name__)

SLACK_PATH_PREFIX = "/slack/"
SLACK_RATE_LIMITED_TEXT = "❌ Too many commands, try again shortly"


def get_request_identifier(request: Request) -> str:
    """
    Get unique identifier for rate limiting.

    Priority:
    1. User ID from the access token cookie
    2. IP address (fallback)
    """
    token = request.cookies.get(settings.access_token_cookie)
    if token:
        try:
            return f"user:{decode_access_token(token).id}"
        except HTTPException:
            pass

    return get_remote_address(request)


def create_limiter(redis_url: Optional[str] = None) -> Limiter:
    """
    Create and configure slowapi Limiter.

    Args:
        redis_url: Redis connection URL for distributed rate limiting

    Returns:
        Configured Limiter instance
    """
    if redis_url:
        limiter = Limiter(
            key_func=get_request_identifier,
            storage_uri=redis_url,
            headers_enabled=True,
        )
        logger.info("Rate limiting configured with Redis backend")
    else:
        limiter = Limiter(
            key_func=get_request_identifier,
            headers_enabled=True,
        )
        logger.info("Rate limiting using in-memory storage (not distributed)")

    return limiter


limiter = create_limiter(settings.redis_url or None)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Reply to a request over its limit.

    Slash commands always get an ephemeral 200 reply; other routes get
    slowapi's 429.
    """
    if request.url.path.startswith(SLACK_PATH_PREFIX):
        logger.warning(f"Slack command rate limited for {get_request_identifier(request)}: {exc.detail}")
        return JSONResponse(
            status_code=200,
            content=SlackReply(text=SLACK_RATE_LIMITED_TEXT).model_dump(),
        )
    return _rate_limit_exceeded_handler(request, exc)


def setup_rate_limiting(app) -> Limiter:
    """
    Attach the limiter to a FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    logger.info("Slowapi rate limiting enabled")
    return limiter
