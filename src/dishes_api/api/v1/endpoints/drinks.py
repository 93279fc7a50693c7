"""Drink endpoints.

Drinks share the dish permissions: reads need ``dishes:read``, writes need
``dishes:write``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from dishes_api.api.dependencies import get_drink_page_query, get_drink_repository
from dishes_api.auth.dependencies import (
    RequireDishesRead,
    RequireDishesWrite,
    get_identity,
)
from dishes_api.core.exceptions import NotFoundError
from dishes_api.database.exceptions import RecordNotFoundError
from dishes_api.database.repositories import Drink, DrinkRepository, Member
from dishes_api.query.filters import PageQuery
from dishes_api.schemas.drinks import (
    DrinkEnvelope,
    DrinkListResponse,
    DrinkRequest,
    DrinkResponse,
)


router = APIRouter(
    prefix="/drinks",
    tags=["drinks"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=DrinkListResponse, summary="List drinks")
async def list_drinks(
    _member: Annotated[Member, Depends(RequireDishesRead)],
    page_query: Annotated[PageQuery, Depends(get_drink_page_query)],
    drinks: Annotated[DrinkRepository, Depends(get_drink_repository)],
    name: Annotated[str, Query(max_length=500)] = "",
    price: Annotated[float, Query(ge=0)] = 0,
) -> DrinkListResponse:
    """List drinks filtered by exact name and minimum price."""
    rows, metadata = await drinks.list(name, price, page_query)
    return DrinkListResponse(
        drinks=[DrinkResponse.from_record(d) for d in rows],
        metadata=metadata,
    )


@router.get("/{drink_id}", response_model=DrinkEnvelope, summary="Get a drink")
async def get_drink(
    drink_id: int,
    _member: Annotated[Member, Depends(RequireDishesRead)],
    drinks: Annotated[DrinkRepository, Depends(get_drink_repository)],
) -> DrinkEnvelope:
    try:
        drink = await drinks.get(drink_id)
    except RecordNotFoundError:
        raise NotFoundError("drink", drink_id) from None
    return DrinkEnvelope(drink=DrinkResponse.from_record(drink))


@router.post(
    "",
    response_model=DrinkEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a drink",
)
async def create_drink(
    body: DrinkRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    drinks: Annotated[DrinkRepository, Depends(get_drink_repository)],
) -> DrinkEnvelope:
    drink = await drinks.insert(
        Drink(name=body.name, description=body.description, price=body.price)
    )
    return DrinkEnvelope(drink=DrinkResponse.from_record(drink))


@router.put("/{drink_id}", response_model=DrinkEnvelope, summary="Replace a drink")
async def update_drink(
    drink_id: int,
    body: DrinkRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    drinks: Annotated[DrinkRepository, Depends(get_drink_repository)],
) -> DrinkEnvelope:
    try:
        drink = await drinks.update(
            Drink(
                id=drink_id,
                name=body.name,
                description=body.description,
                price=body.price,
            )
        )
    except RecordNotFoundError:
        raise NotFoundError("drink", drink_id) from None
    return DrinkEnvelope(drink=DrinkResponse.from_record(drink))


@router.delete(
    "/{drink_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a drink",
)
async def delete_drink(
    drink_id: int,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    drinks: Annotated[DrinkRepository, Depends(get_drink_repository)],
) -> Response:
    try:
        await drinks.delete(drink_id)
    except RecordNotFoundError:
        raise NotFoundError("drink", drink_id) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
