"""Integration test fixtures.

Provides a real PostgreSQL via testcontainers with ``db/schema.sql`` applied,
and repositories bound to it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from testcontainers.postgres import PostgresContainer

import dishes_api.database.connection as db_module
from dishes_api.database.connection import (
    close_database_pool,
    get_database_pool,
    init_database_pool,
)
from dishes_api.database.repositories import (
    CategoryRepository,
    DishRepository,
    DrinkRepository,
    IngredientRepository,
    MemberRepository,
    PermissionRepository,
    ReviewRepository,
    TokenRepository,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from asyncpg import Pool


pytestmark = pytest.mark.integration

STORE_TIMEOUT = 5.0
SCHEMA = Path(__file__).resolve().parents[2] / "db" / "schema.sql"

# Every table with rows; permissions keeps its seeded codes
_TRUNCATE = (
    "TRUNCATE members, tokens, members_permissions, dishes, drinks, categories, "
    "ingredients, reviews RESTART IDENTITY"
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """Start a PostgreSQL container for the test session."""
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_config(postgres_container: PostgresContainer) -> dict[str, str | int]:
    """Get PostgreSQL connection config from container."""
    return {
        "host": postgres_container.get_container_host_ip(),
        "port": int(postgres_container.get_exposed_port(5432)),
        "user": "test",
        "password": "test",
        "database": "test",
    }


def _database_settings(postgres_config: dict[str, str | int]) -> MagicMock:
    mock_settings = MagicMock()
    mock_settings.database.host = postgres_config["host"]
    mock_settings.database.port = postgres_config["port"]
    mock_settings.database.name = postgres_config["database"]
    mock_settings.database.user = postgres_config["user"]
    mock_settings.database.min_pool_size = 2
    mock_settings.database.max_pool_size = 5
    mock_settings.database.command_timeout = 30.0
    mock_settings.database.ssl = False
    mock_settings.DATABASE_PASSWORD = postgres_config["password"]
    return mock_settings


@pytest.fixture
async def pool(postgres_config: dict[str, str | int]) -> AsyncGenerator[Pool]:
    """Global pool on the container, with the schema applied and tables empty."""
    db_module._pool = None
    with patch(
        "dishes_api.database.connection.get_settings",
        return_value=_database_settings(postgres_config),
    ):
        await init_database_pool()

    database_pool = get_database_pool()
    async with database_pool.acquire() as conn:
        await conn.execute(SCHEMA.read_text())
        await conn.execute(_TRUNCATE)

    yield database_pool

    await close_database_pool()


@pytest.fixture
def members(pool: Pool) -> MemberRepository:
    return MemberRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def permissions(pool: Pool) -> PermissionRepository:
    return PermissionRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def tokens(pool: Pool) -> TokenRepository:
    return TokenRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def dishes(pool: Pool) -> DishRepository:
    return DishRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def drinks(pool: Pool) -> DrinkRepository:
    return DrinkRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def categories(pool: Pool) -> CategoryRepository:
    return CategoryRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def ingredients(pool: Pool) -> IngredientRepository:
    return IngredientRepository(pool=pool, query_timeout=STORE_TIMEOUT)


@pytest.fixture
def reviews(pool: Pool) -> ReviewRepository:
    return ReviewRepository(pool=pool, query_timeout=STORE_TIMEOUT)
