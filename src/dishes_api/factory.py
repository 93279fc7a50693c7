"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up middleware stack in the correct order
- Registers exception handlers and rate limiting
- Mounts API routers
- Exposes Prometheus metrics
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from dishes_api.api.v1.router import router as v1_router
from dishes_api.core.config import Settings, get_settings
from dishes_api.core.events import lifespan
from dishes_api.core.exceptions import setup_exception_handlers
from dishes_api.core.middleware import (
    LoggingMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    TimingMiddleware,
)
from dishes_api.core.rate_limit import setup_rate_limiting
from dishes_api.observability.metrics import setup_metrics


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Dishes API - restaurant ordering backend with member accounts",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        debug=settings.app.debug,
    )

    # Store settings in app state for access in lifespan
    app.state.settings = settings

    setup_exception_handlers(app)
    setup_rate_limiting(app)

    # Middleware (order matters - first added = last executed)
    _setup_middleware(app, settings)

    _setup_routers(app, settings)

    # After routes are mounted
    setup_metrics(app, settings)

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Order from request perspective:
    1. SecurityHeadersMiddleware (security headers, Vary: Authorization)
    2. RequestIDMiddleware (request ID for tracing)
    3. TimingMiddleware (measures request time, warns past query_timeout)
    4. LoggingMiddleware (logs requests/responses)
    5. CORSMiddleware (handles CORS)
    6. SlowAPIMiddleware (default rate limit, added by setup_rate_limiting)
    """
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Expected-Version"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    prefix = settings.api.v1_prefix
    app.add_middleware(
        LoggingMiddleware,
        exclude_paths={f"{prefix}/health", f"{prefix}/ready", f"{prefix}/metrics"},
    )
    app.add_middleware(
        TimingMiddleware, slow_threshold=settings.database.query_timeout
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)


def _setup_routers(app: FastAPI, settings: Settings) -> None:
    app.include_router(v1_router, prefix=settings.api.v1_prefix)
