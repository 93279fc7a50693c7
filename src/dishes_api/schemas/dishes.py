"""Dish request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from dishes_api.query.filters import Metadata
from dishes_api.schemas.base import APIRequest, APIResponse


class DishRequest(APIRequest):
    """Body of ``POST /dishes`` and ``PUT /dishes/{id}``."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=1000)
    price: float = Field(..., ge=0)


class DishResponse(APIResponse):
    """Public view of a dish."""

    id: int
    created_at: datetime | None
    updated_at: datetime | None
    name: str
    description: str
    price: float


class DishEnvelope(APIResponse):
    """``{"dish": {...}}``."""

    dish: DishResponse


class DishListResponse(APIResponse):
    """One page of dishes plus pagination metadata."""

    dishes: list[DishResponse]
    metadata: Metadata
