"""Shared test fixtures for the Dishes API tests.

``APP_ENV`` is forced to ``test`` before the package is imported so the
cached settings pick up ``config/environments/test`` (cheap bcrypt cost,
metrics and rate limiting off).
"""

from __future__ import annotations

import os


os.environ.setdefault("APP_ENV", "test")

from typing import TYPE_CHECKING  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from dishes_api.core.config import Settings, get_settings  # noqa: E402
from dishes_api.factory import create_app  # noqa: E402
from tests.factories.members import MemberFactory  # noqa: E402


if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from fastapi import FastAPI

    from dishes_api.database.repositories.members import Member


VALID_TOKEN = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@pytest.fixture
def settings() -> Settings:
    """Settings for the test environment."""
    return get_settings()


@pytest.fixture
def make_member() -> Callable[..., Member]:
    """Build Member instances via MemberFactory; keyword overrides win."""
    return MemberFactory.build


@pytest.fixture
def app(settings: Settings) -> Generator[FastAPI]:
    """Application without lifespan (no database pool)."""
    application = create_app(settings)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """HTTP client; not used as a context manager so lifespan never runs."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def valid_token() -> str:
    """A well-formed token plaintext (26 base32 characters)."""
    return VALID_TOKEN


@pytest.fixture
def auth_headers(valid_token: str) -> dict[str, str]:
    """Authorization header carrying ``valid_token``."""
    return {"Authorization": f"Bearer {valid_token}"}
