"""Review request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from dishes_api.query.filters import Metadata
from dishes_api.schemas.base import APIRequest, APIResponse


class ReviewRequest(APIRequest):
    """Body of ``POST /reviews`` and ``PUT /reviews/{id}``.

    Exactly one of ``dishId`` and ``drinkId`` must be given.
    """

    dish_id: int | None = Field(default=None, ge=1)
    drink_id: int | None = Field(default=None, ge=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=1000)

    @model_validator(mode="after")
    def _one_target(self) -> ReviewRequest:
        if (self.dish_id is None) == (self.drink_id is None):
            msg = "exactly one of dishId and drinkId must be provided"
            raise ValueError(msg)
        return self


class ReviewResponse(APIResponse):
    id: int
    created_at: datetime | None
    updated_at: datetime | None
    dish_id: int | None
    drink_id: int | None
    rating: int
    comment: str


class ReviewEnvelope(APIResponse):
    review: ReviewResponse


class ReviewListResponse(APIResponse):
    reviews: list[ReviewResponse]
    metadata: Metadata
