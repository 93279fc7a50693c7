"""Ingredient request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from dishes_api.query.filters import Metadata
from dishes_api.schemas.base import APIRequest, APIResponse


class IngredientRequest(APIRequest):
    """Body of ``POST /ingredients`` and ``PUT /ingredients/{id}``."""

    name: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., ge=0)
    dish_id: int = Field(..., ge=1)


class IngredientResponse(APIResponse):
    id: int
    created_at: datetime | None
    updated_at: datetime | None
    name: str
    quantity: int
    dish_id: int


class IngredientEnvelope(APIResponse):
    ingredient: IngredientResponse


class IngredientListResponse(APIResponse):
    ingredients: list[IngredientResponse]
    metadata: Metadata
