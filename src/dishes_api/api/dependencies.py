"""FastAPI dependencies for repository and service access.

Repositories are cheap wrappers around the global asyncpg pool, so a fresh
instance per request is fine. Tests replace these providers through
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Query

from dishes_api.auth.tokens import TokenAuthority
from dishes_api.core.config import get_settings
from dishes_api.core.exceptions import ValidationFailedError
from dishes_api.database.repositories import (
    CATEGORY_SORT_SAFELIST,
    DISH_SORT_SAFELIST,
    DRINK_SORT_SAFELIST,
    INGREDIENT_SORT_SAFELIST,
    REVIEW_SORT_SAFELIST,
    CategoryRepository,
    DishRepository,
    DrinkRepository,
    IngredientRepository,
    MemberRepository,
    PermissionRepository,
    ReviewRepository,
    TokenRepository,
)
from dishes_api.query.filters import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT,
    FilterValidationError,
    PageQuery,
    compile_filters,
)
from dishes_api.services.members import MemberService


if TYPE_CHECKING:
    from collections.abc import Callable


def get_member_repository() -> MemberRepository:
    return MemberRepository()


def get_token_repository() -> TokenRepository:
    return TokenRepository()


def get_permission_repository() -> PermissionRepository:
    return PermissionRepository()


def get_dish_repository() -> DishRepository:
    return DishRepository()


def get_drink_repository() -> DrinkRepository:
    return DrinkRepository()


def get_category_repository() -> CategoryRepository:
    return CategoryRepository()


def get_ingredient_repository() -> IngredientRepository:
    return IngredientRepository()


def get_review_repository() -> ReviewRepository:
    return ReviewRepository()


def get_token_authority(
    members: Annotated[MemberRepository, Depends(get_member_repository)],
    tokens: Annotated[TokenRepository, Depends(get_token_repository)],
) -> TokenAuthority:
    return TokenAuthority(members, tokens)


def get_member_service(
    members: Annotated[MemberRepository, Depends(get_member_repository)],
    permissions: Annotated[PermissionRepository, Depends(get_permission_repository)],
    authority: Annotated[TokenAuthority, Depends(get_token_authority)],
) -> MemberService:
    return MemberService(members, permissions, authority, get_settings().auth)


def page_query_for(safelist: frozenset[str]) -> Callable[..., PageQuery]:
    """Build a dependency compiling list parameters against ``safelist``.

    The returned dependency reads ``page``, ``page_size`` and ``sort`` from
    the query string.

    Raises:
        ValidationFailedError: One entry per rejected parameter.
    """

    def dependency(
        page: Annotated[int, Query()] = DEFAULT_PAGE,
        page_size: Annotated[int, Query()] = DEFAULT_PAGE_SIZE,
        sort: Annotated[str, Query()] = DEFAULT_SORT,
    ) -> PageQuery:
        try:
            return compile_filters(page, page_size, sort, safelist)
        except FilterValidationError as e:
            raise ValidationFailedError(e.errors) from e

    return dependency


get_dish_page_query = page_query_for(DISH_SORT_SAFELIST)
get_drink_page_query = page_query_for(DRINK_SORT_SAFELIST)
get_category_page_query = page_query_for(CATEGORY_SORT_SAFELIST)
get_ingredient_page_query = page_query_for(INGREDIENT_SORT_SAFELIST)
get_review_page_query = page_query_for(REVIEW_SORT_SAFELIST)
