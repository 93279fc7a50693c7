"""Drink request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from dishes_api.query.filters import Metadata
from dishes_api.schemas.base import APIRequest, APIResponse


class DrinkRequest(APIRequest):
    """Body of ``POST /drinks`` and ``PUT /drinks/{id}``."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=1000)
    price: float = Field(..., ge=0)


class DrinkResponse(APIResponse):
    id: int
    created_at: datetime | None
    updated_at: datetime | None
    name: str
    description: str
    price: float


class DrinkEnvelope(APIResponse):
    drink: DrinkResponse


class DrinkListResponse(APIResponse):
    drinks: list[DrinkResponse]
    metadata: Metadata
