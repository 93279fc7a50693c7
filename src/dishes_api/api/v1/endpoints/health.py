"""Health check endpoints.

Provides liveness and readiness checks for orchestrators and load balancers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import ORJSONResponse

from dishes_api.core.config import Settings, get_settings
from dishes_api.database.connection import check_database_health
from dishes_api.schemas.health import HealthResponse, ReadinessResponse


router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Basic health check to verify the service is running.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Check if the service is alive; external dependencies are not checked."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check verifying the database is reachable.",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
async def readiness_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReadinessResponse | ORJSONResponse:
    """Report ``ready`` only when the database answers; 503 otherwise."""
    dependencies = await check_database_health()
    ready = all(value == "healthy" for value in dependencies.values())

    body = ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
    if ready:
        return body
    return ORJSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )
