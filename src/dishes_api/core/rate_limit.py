"""Rate limiting using SlowAPI.

This module provides:
- A process-wide ``Limiter`` configured from settings
- A stricter IP-keyed limit for registration and login
- The 429 exception handler

Endpoints decorated with ``rate_limit_auth()`` must accept a
``request: Request`` parameter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from dishes_api.core.config import get_settings
from dishes_api.core.exceptions import ErrorResponse
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def _get_auth_rate_limit_key(request: Request) -> str:
    """Key auth endpoints by client IP to slow down credential stuffing."""
    return f"auth:{get_remote_address(request)}"


def create_limiter() -> Limiter:
    """Create the limiter from the ``rate_limiting`` settings section."""
    settings = get_settings().rate_limiting
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.default],
        storage_uri=settings.storage_uri,
        strategy="fixed-window",
        enabled=settings.enabled,
        headers_enabled=False,
    )


# Global limiter instance
limiter = create_limiter()


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Render ``RateLimitExceeded`` in the common error shape."""
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        method=request.method,
        client_ip=get_remote_address(request),
        limit=str(getattr(exc, "detail", "")),
    )
    body = ErrorResponse(
        error="RATE_LIMIT_EXCEEDED",
        message="rate limit exceeded, please try again later",
        request_id=getattr(request.state, "request_id", None),
    )
    return ORJSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=body.model_dump(),
        headers={"Retry-After": "60"},
    )


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter, its middleware and its exception handler to ``app``.

    The middleware applies ``rate_limiting.default`` to every route.
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    logger.info("Rate limiting configured", enabled=limiter.enabled)


def rate_limit_auth() -> Any:
    """Apply the auth-specific rate limit (stricter, IP-based).

    Example:
        @router.post("/tokens/authentication")
        @rate_limit_auth()
        async def create_authentication_token(request: Request, ...):
            ...
    """
    return limiter.limit(
        get_settings().rate_limiting.auth, key_func=_get_auth_rate_limit_key
    )
