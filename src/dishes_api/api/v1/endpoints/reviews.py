"""Review endpoints, guarded by the dish permissions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from dishes_api.api.dependencies import get_review_page_query, get_review_repository
from dishes_api.auth.dependencies import (
    RequireDishesRead,
    RequireDishesWrite,
    get_identity,
)
from dishes_api.core.exceptions import NotFoundError, ValidationFailedError
from dishes_api.database.exceptions import RecordNotFoundError, ReferenceNotFoundError
from dishes_api.database.repositories import Member, Review, ReviewRepository
from dishes_api.query.filters import PageQuery
from dishes_api.schemas.reviews import (
    ReviewEnvelope,
    ReviewListResponse,
    ReviewRequest,
    ReviewResponse,
)


router = APIRouter(
    prefix="/reviews",
    tags=["reviews"],
    dependencies=[Depends(get_identity)],
)


def _review_from(body: ReviewRequest, review_id: int = 0) -> Review:
    return Review(
        id=review_id,
        dish_id=body.dish_id,
        drink_id=body.drink_id,
        rating=body.rating,
        comment=body.comment,
    )


@router.get("", response_model=ReviewListResponse, summary="List reviews")
async def list_reviews(
    _member: Annotated[Member, Depends(RequireDishesRead)],
    page_query: Annotated[PageQuery, Depends(get_review_page_query)],
    reviews: Annotated[ReviewRepository, Depends(get_review_repository)],
    dish_id: Annotated[int | None, Query(ge=1)] = None,
    drink_id: Annotated[int | None, Query(ge=1)] = None,
) -> ReviewListResponse:
    """List reviews, optionally of one dish and/or one drink.

    Sort by ``id``, ``rating`` or ``created_at``; prefix with ``-`` for
    descending.
    """
    rows, metadata = await reviews.list(dish_id, drink_id, page_query)
    return ReviewListResponse(
        reviews=[ReviewResponse.from_record(r) for r in rows],
        metadata=metadata,
    )


@router.get("/{review_id}", response_model=ReviewEnvelope, summary="Get a review")
async def get_review(
    review_id: int,
    _member: Annotated[Member, Depends(RequireDishesRead)],
    reviews: Annotated[ReviewRepository, Depends(get_review_repository)],
) -> ReviewEnvelope:
    try:
        review = await reviews.get(review_id)
    except RecordNotFoundError:
        raise NotFoundError("review", review_id) from None
    return ReviewEnvelope(review=ReviewResponse.from_record(review))


@router.post(
    "",
    response_model=ReviewEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
)
async def create_review(
    body: ReviewRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    reviews: Annotated[ReviewRepository, Depends(get_review_repository)],
) -> ReviewEnvelope:
    try:
        review = await reviews.insert(_review_from(body))
    except ReferenceNotFoundError as e:
        raise ValidationFailedError({e.field: "does not exist"}) from None
    return ReviewEnvelope(review=ReviewResponse.from_record(review))


@router.put("/{review_id}", response_model=ReviewEnvelope, summary="Replace a review")
async def update_review(
    review_id: int,
    body: ReviewRequest,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    reviews: Annotated[ReviewRepository, Depends(get_review_repository)],
) -> ReviewEnvelope:
    try:
        review = await reviews.update(_review_from(body, review_id))
    except RecordNotFoundError:
        raise NotFoundError("review", review_id) from None
    except ReferenceNotFoundError as e:
        raise ValidationFailedError({e.field: "does not exist"}) from None
    return ReviewEnvelope(review=ReviewResponse.from_record(review))


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
)
async def delete_review(
    review_id: int,
    _member: Annotated[Member, Depends(RequireDishesWrite)],
    reviews: Annotated[ReviewRepository, Depends(get_review_repository)],
) -> Response:
    try:
        await reviews.delete(review_id)
    except RecordNotFoundError:
        raise NotFoundError("review", review_id) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
