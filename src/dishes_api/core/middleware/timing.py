"""Request duration header and slow request warnings.

A request is slow when it takes longer than one store operation is allowed
to (``database.query_timeout``). The warning carries the member bound by
the authentication dependency, so slow calls can be traced to a caller.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from dishes_api.observability.logging import get_context, get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

logger = get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Set ``X-Process-Time`` on every response."""

    def __init__(
        self,
        app: ASGIApp,
        slow_threshold: float,
        header_name: str = "X-Process-Time",
    ) -> None:
        super().__init__(app)
        self.slow_threshold = slow_threshold
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        elapsed_ms = round(elapsed * 1000, 2)

        response.headers[self.header_name] = f"{elapsed_ms}ms"

        if elapsed > self.slow_threshold:
            logger.warning(
                "Slow request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=elapsed_ms,
                threshold_ms=self.slow_threshold * 1000,
                member_id=get_context().get("member_id"),
            )
        return response
