"""PostgreSQL connection pool management.

This module provides:
- Async connection pool management via asyncpg
- ``store_operation``: the bounded-timeout / error-translation wrapper every
  repository call runs under
- Health check utilities
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import asyncpg

from dishes_api.core.config import get_settings
from dishes_api.database.exceptions import StoreTimeoutError, StoreUnavailableError
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from asyncpg import Pool

logger = get_logger(__name__)

_CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.InterfaceError,
    asyncpg.exceptions.CannotConnectNowError,
)

# Global connection pool
_pool: Pool | None = None


async def init_database_pool() -> None:
    """Create the pool and verify one round trip.

    Should be called during application startup (lifespan).
    """
    global _pool  # noqa: PLW0603

    settings = get_settings()
    logger.info(
        "Initializing database connection pool",
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
    )

    _pool = await asyncpg.create_pool(
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        user=settings.database.user,
        password=settings.DATABASE_PASSWORD or None,
        min_size=settings.database.min_pool_size,
        max_size=settings.database.max_pool_size,
        command_timeout=settings.database.command_timeout,
        ssl=True if settings.database.ssl else None,
    )

    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        logger.info("Database connection established")
    except asyncpg.PostgresError:
        logger.exception("Failed to connect to database")
        raise


async def close_database_pool() -> None:
    """Close the pool; safe to call when it was never opened."""
    global _pool  # noqa: PLW0603

    if _pool is not None:
        logger.info("Closing database connection pool")
        await _pool.close()
        _pool = None


def get_database_pool() -> Pool:
    """Return the global pool.

    Raises:
        StoreUnavailableError: If the pool has not been initialized.
    """
    if _pool is None:
        raise StoreUnavailableError("database.pool", "pool not initialized")
    return _pool


@asynccontextmanager
async def store_operation(operation: str, timeout: float) -> AsyncIterator[None]:
    """Bound a store call in time and translate driver failures.

    The timeout covers connection acquisition as well as the statements. If
    the surrounding task is cancelled (client went away) asyncpg cancels the
    in-flight statement and any open transaction is rolled back.

    Raises:
        StoreTimeoutError: The block ran longer than ``timeout`` seconds.
        StoreUnavailableError: The connection failed or was refused.
    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as exc:
        logger.warning("Store operation timed out", operation=operation)
        raise StoreTimeoutError(operation, timeout) from exc
    except _CONNECTION_ERRORS as exc:
        logger.warning(
            "Store operation failed to reach database",
            operation=operation,
            error=type(exc).__name__,
        )
        raise StoreUnavailableError(operation, type(exc).__name__) from exc


async def check_database_health() -> dict[str, str]:
    """Report database status for the readiness check."""
    if _pool is None:
        return {"database": "not_initialized"}
    try:
        async with asyncio.timeout(get_settings().database.query_timeout):
            async with _pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
    except (TimeoutError, asyncpg.PostgresError, *_CONNECTION_ERRORS):
        return {"database": "unhealthy"}
    return {"database": "healthy"}
