"""Dish endpoints.

Reads need ``dishes:read``, writes need ``dishes:write``. Listing goes
through the shared filter engine with the dish sort safelist.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from dishes_api.api.dependencies import get_dish_page_query, get_dish_repository
from dishes_api.auth.dependencies import (
    RequireDishesRead,
    RequireDishesWrite,
    get_identity,
)
from dishes_api.core.exceptions import NotFoundError
from dishes_api.database.exceptions import RecordNotFoundError
from dishes_api.database.repositories import Dish, DishRepository, Member
from dishes_api.query.filters import PageQuery
from dishes_api.schemas.dishes import (
    DishEnvelope,
    DishListResponse,
    DishRequest,
    DishResponse,
)


router = APIRouter(
    prefix="/dishes",
    tags=["dishes"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=DishListResponse, summary="List dishes")
async def list_dishes(
    _member: Annotated[Member, Depends(RequireDishesRead)],
    page_query: Annotated[PageQuery, Depends(get_dish_page_query)],
    dishes: Annotated[DishRepository, Depends(get_dish_repository)],
    name: Annotated[str, Query(max_length=500)] = "",
    price: Annotated[float, Query(ge=0)] = 0,
) -> DishListResponse:
    """List dishes filtered by exact name and minimum price.

    Sort by ``id``, ``name`` or ``price``; prefix with ``-`` for descending.
    """
    rows, metadata = await dishes.list(name, price, page_query)
    return DishListResponse(
        dishes=[DishResponse.from_record(d) for d in rows],
        metadata=metadata,
    )


@router.get("/{dish_id}", response_model=DishEnvelope, summary="Get a dish")
async def get_dish(
    dish_id: int,
    _member: Annotated[Member, Depends(RequireDishesRead)],
    dishes: Annotated[DishRepository, Depends(get_dish_repository)],
) -> DishEnvelope:
    try:
        dish = await dishes.get(dish_id)
    except RecordNotFoundError:
        raise NotFoundError("dish", dish_id) from None
    return DishEnvelope(dish=DishResponse.from_record(dish))


@router.post(
    "",
    response_model=DishEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a dish",
)
async def create_dish(
    body: DishRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    dishes: Annotated[DishRepository, Depends(get_dish_repository)],
) -> DishEnvelope:
    dish = await dishes.insert(
        Dish(name=body.name, description=body.description, price=body.price)
    )
    return DishEnvelope(dish=DishResponse.from_record(dish))


@router.put("/{dish_id}", response_model=DishEnvelope, summary="Replace a dish")
async def update_dish(
    dish_id: int,
    body: DishRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    dishes: Annotated[DishRepository, Depends(get_dish_repository)],
) -> DishEnvelope:
    try:
        dish = await dishes.update(
            Dish(
                id=dish_id,
                name=body.name,
                description=body.description,
                price=body.price,
            )
        )
    except RecordNotFoundError:
        raise NotFoundError("dish", dish_id) from None
    return DishEnvelope(dish=DishResponse.from_record(dish))


@router.delete(
    "/{dish_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a dish",
)
async def delete_dish(
    dish_id: int,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    dishes: Annotated[DishRepository, Depends(get_dish_repository)],
) -> Response:
    try:
        await dishes.delete(dish_id)
    except RecordNotFoundError:
        raise NotFoundError("dish", dish_id) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
