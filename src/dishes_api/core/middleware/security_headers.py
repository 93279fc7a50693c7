"""Security headers middleware.

Adds hardening headers to every response. Responses depend on the bearer
token presented, so ``Vary: Authorization`` is added as well to keep shared
caches from serving one member's response to another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


def append_vary(response: Response, header: str) -> None:
    """Add ``header`` to the response's ``Vary`` list if it is missing."""
    existing = [v.strip() for v in response.headers.get("Vary", "").split(",") if v.strip()]
    if header.lower() not in (v.lower() for v in existing):
        existing.append(header)
    response.headers["Vary"] = ", ".join(existing)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        api_prefix: str = "/api/",
    ) -> None:
        super().__init__(app)
        self.api_prefix = api_prefix

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        append_vary(response, "Authorization")

        # Token and member payloads must never be cached
        if request.url.path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store"

        return response
