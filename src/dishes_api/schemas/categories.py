"""Category request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from dishes_api.query.filters import Metadata
from dishes_api.schemas.base import APIRequest, APIResponse


class CategoryRequest(APIRequest):
    """Body of ``POST /categories`` and ``PUT /categories/{id}``."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=1000)


class CategoryResponse(APIResponse):
    id: int
    created_at: datetime | None
    updated_at: datetime | None
    name: str
    description: str


class CategoryEnvelope(APIResponse):
    category: CategoryResponse


class CategoryListResponse(APIResponse):
    categories: list[CategoryResponse]
    metadata: Metadata
