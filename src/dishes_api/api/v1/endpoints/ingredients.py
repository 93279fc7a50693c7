"""Ingredient endpoints, guarded by the dish permissions.

An ingredient naming a dish that does not exist is a validation error on
``dishId``, not a 404.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from dishes_api.api.dependencies import (
    get_ingredient_page_query,
    get_ingredient_repository,
)
from dishes_api.auth.dependencies import (
    RequireDishesRead,
    RequireDishesWrite,
    get_identity,
)
from dishes_api.core.exceptions import NotFoundError, ValidationFailedError
from dishes_api.database.exceptions import RecordNotFoundError, ReferenceNotFoundError
from dishes_api.database.repositories import Ingredient, IngredientRepository, Member
from dishes_api.query.filters import PageQuery
from dishes_api.schemas.ingredients import (
    IngredientEnvelope,
    IngredientListResponse,
    IngredientRequest,
    IngredientResponse,
)


router = APIRouter(
    prefix="/ingredients",
    tags=["ingredients"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=IngredientListResponse, summary="List ingredients")
async def list_ingredients(
    _member: Annotated[Member, Depends(RequireDishesRead)],
    page_query: Annotated[PageQuery, Depends(get_ingredient_page_query)],
    ingredients: Annotated[IngredientRepository, Depends(get_ingredient_repository)],
    dish_id: Annotated[int, Query(ge=0)] = 0,
) -> IngredientListResponse:
    """List ingredients, optionally only those of ``dish_id``."""
    rows, metadata = await ingredients.list(dish_id, page_query)
    return IngredientListResponse(
        ingredients=[IngredientResponse.from_record(i) for i in rows],
        metadata=metadata,
    )


@router.get(
    "/{ingredient_id}", response_model=IngredientEnvelope, summary="Get an ingredient"
)
async def get_ingredient(
    ingredient_id: int,
    _member: Annotated[Member, Depends(RequireDishesRead)],
    ingredients: Annotated[IngredientRepository, Depends(get_ingredient_repository)],
) -> IngredientEnvelope:
    try:
        ingredient = await ingredients.get(ingredient_id)
    except RecordNotFoundError:
        raise NotFoundError("ingredient", ingredient_id) from None
    return IngredientEnvelope(ingredient=IngredientResponse.from_record(ingredient))


@router.post(
    "",
    response_model=IngredientEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an ingredient",
)
async def create_ingredient(
    body: IngredientRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    ingredients: Annotated[IngredientRepository, Depends(get_ingredient_repository)],
) -> IngredientEnvelope:
    try:
        ingredient = await ingredients.insert(
            Ingredient(name=body.name, quantity=body.quantity, dish_id=body.dish_id)
        )
    except ReferenceNotFoundError as e:
        raise ValidationFailedError({e.field: "does not exist"}) from None
    return IngredientEnvelope(ingredient=IngredientResponse.from_record(ingredient))


@router.put(
    "/{ingredient_id}",
    response_model=IngredientEnvelope,
    summary="Replace an ingredient",
)
async def update_ingredient(
    ingredient_id: int,
    body: IngredientRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    ingredients: Annotated[IngredientRepository, Depends(get_ingredient_repository)],
) -> IngredientEnvelope:
    try:
        ingredient = await ingredients.update(
            Ingredient(
                id=ingredient_id,
                name=body.name,
                quantity=body.quantity,
                dish_id=body.dish_id,
            )
        )
    except RecordNotFoundError:
        raise NotFoundError("ingredient", ingredient_id) from None
    except ReferenceNotFoundError as e:
        raise ValidationFailedError({e.field: "does not exist"}) from None
    return IngredientEnvelope(ingredient=IngredientResponse.from_record(ingredient))


@router.delete(
    "/{ingredient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an ingredient",
)
async def delete_ingredient(
    ingredient_id: int,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    ingredients: Annotated[IngredientRepository, Depends(get_ingredient_repository)],
) -> Response:
    try:
        await ingredients.delete(ingredient_id)
    except RecordNotFoundError:
        raise NotFoundError("ingredient", ingredient_id) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
