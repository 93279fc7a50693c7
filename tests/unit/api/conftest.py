"""HTTP-level fixtures: dependency overrides for repositories and services."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

from dishes_api.api.dependencies import (
    get_category_repository,
    get_dish_repository,
    get_drink_repository,
    get_ingredient_repository,
    get_member_service,
    get_permission_repository,
    get_review_repository,
    get_token_authority,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import FastAPI

    from dishes_api.database.repositories.members import Member


def _override_repository(app: FastAPI, provider: Callable[[], object]) -> MagicMock:
    repo = MagicMock()
    for name in ("list", "get", "insert", "update", "delete"):
        setattr(repo, name, AsyncMock())
    app.dependency_overrides[provider] = lambda: repo
    return repo


@pytest.fixture
def authority(app: FastAPI) -> MagicMock:
    """Token authority whose ``resolve`` tests configure per case."""
    mock = MagicMock()
    mock.resolve = AsyncMock()
    app.dependency_overrides[get_token_authority] = lambda: mock
    return mock


@pytest.fixture
def permissions(app: FastAPI) -> MagicMock:
    """Permission repository granting ``dishes:read`` by default."""
    repo = MagicMock()
    repo.get_all_for_member = AsyncMock(return_value=frozenset({"dishes:read"}))
    app.dependency_overrides[get_permission_repository] = lambda: repo
    return repo


@pytest.fixture
def reader(
    authority: MagicMock,
    permissions: MagicMock,
    make_member: Callable[..., Member],
) -> Member:
    """Activated member holding ``dishes:read`` only."""
    member = make_member()
    authority.resolve.return_value = member
    return member


@pytest.fixture
def writer(reader: Member, permissions: MagicMock) -> Member:
    """Activated member holding both dish permissions."""
    permissions.get_all_for_member.return_value = frozenset(
        {"dishes:read", "dishes:write"}
    )
    return reader


@pytest.fixture
def member_service(app: FastAPI) -> MagicMock:
    service = MagicMock()
    for name in ("register", "activate", "authenticate", "update_member", "logout"):
        setattr(service, name, AsyncMock())
    app.dependency_overrides[get_member_service] = lambda: service
    return service


@pytest.fixture
def dish_repository(app: FastAPI) -> MagicMock:
    return _override_repository(app, get_dish_repository)


@pytest.fixture
def drink_repository(app: FastAPI) -> MagicMock:
    return _override_repository(app, get_drink_repository)


@pytest.fixture
def category_repository(app: FastAPI) -> MagicMock:
    return _override_repository(app, get_category_repository)


@pytest.fixture
def ingredient_repository(app: FastAPI) -> MagicMock:
    return _override_repository(app, get_ingredient_repository)


@pytest.fixture
def review_repository(app: FastAPI) -> MagicMock:
    return _override_repository(app, get_review_repository)
