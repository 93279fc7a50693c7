"""Application lifespan event handlers.

Startup configures logging and opens the database pool; shutdown closes it.
The database is critical, so a failed connection aborts startup.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from dishes_api.core.config import Settings, get_settings
from dishes_api.database.connection import close_database_pool, init_database_pool
from dishes_api.observability.logging import get_logger, setup_logging


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


async def _startup(settings: Settings) -> None:
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    try:
        await init_database_pool()
    except Exception:
        logger.exception("Failed to initialize database pool")
        raise

    logger.info("Application startup complete")


async def _shutdown(settings: Settings) -> None:
    logger.info("Shutting down application", app_name=settings.app.name)
    await close_database_pool()
    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    await _startup(settings)
    try:
        yield
    finally:
        await _shutdown(settings)
