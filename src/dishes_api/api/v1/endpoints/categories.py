"""Menu category endpoints, guarded by the dish permissions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from dishes_api.api.dependencies import get_category_page_query, get_category_repository
from dishes_api.auth.dependencies import (
    RequireDishesRead,
    RequireDishesWrite,
    get_identity,
)
from dishes_api.core.exceptions import NotFoundError
from dishes_api.database.exceptions import RecordNotFoundError
from dishes_api.database.repositories import Category, CategoryRepository, Member
from dishes_api.query.filters import PageQuery
from dishes_api.schemas.categories import (
    CategoryEnvelope,
    CategoryListResponse,
    CategoryRequest,
    CategoryResponse,
)


router = APIRouter(
    prefix="/categories",
    tags=["categories"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    _member: Annotated[Member, Depends(RequireDishesRead)],
    page_query: Annotated[PageQuery, Depends(get_category_page_query)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
    name: Annotated[str, Query(max_length=500)] = "",
) -> CategoryListResponse:
    """List categories whose name contains ``name``, ignoring case."""
    rows, metadata = await categories.list(name, page_query)
    return CategoryListResponse(
        categories=[CategoryResponse.from_record(c) for c in rows],
        metadata=metadata,
    )


@router.get("/{category_id}", response_model=CategoryEnvelope, summary="Get a category")
async def get_category(
    category_id: int,
    _member: Annotated[Member, Depends(RequireDishesRead)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryEnvelope:
    try:
        category = await categories.get(category_id)
    except RecordNotFoundError:
        raise NotFoundError("category", category_id) from None
    return CategoryEnvelope(category=CategoryResponse.from_record(category))


@router.post(
    "",
    response_model=CategoryEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    body: CategoryRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryEnvelope:
    category = await categories.insert(
        Category(name=body.name, description=body.description)
    )
    return CategoryEnvelope(category=CategoryResponse.from_record(category))


@router.put(
    "/{category_id}", response_model=CategoryEnvelope, summary="Replace a category"
)
async def update_category(
    category_id: int,
    body: CategoryRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryEnvelope:
    try:
        category = await categories.update(
            Category(id=category_id, name=body.name, description=body.description)
        )
    except RecordNotFoundError:
        raise NotFoundError("category", category_id) from None
    return CategoryEnvelope(category=CategoryResponse.from_record(category))


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a category",
)
async def delete_category(
    category_id: int,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    categories: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> Response:
    try:
        await categories.delete(category_id)
    except RecordNotFoundError:
        raise NotFoundError("category", category_id) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
