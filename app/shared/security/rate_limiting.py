"""
Rate limiting configuration and setup.

Uses slowapi to apply one default limit to every route, keyed by client
address. The limit and an on/off switch come from settings.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """Create the application limiter from settings.

    Args:
        settings: Application settings carrying the rate limit options.

    Returns:
        A limiter applying ``settings.rate_limit_default`` to every route.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit_default],
        enabled=settings.rate_limit_enabled,
    )


def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response in the standard error shape.
    """
    return JSONResponse(
        status_code=429,
        content={"error": "RATE_LIMIT_EXCEEDED", "detail": str(exc.detail)},
    )
