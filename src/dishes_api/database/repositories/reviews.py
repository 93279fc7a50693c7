"""Review data repository.

A review rates exactly one dish or one drink; the table enforces this with
a check constraint and the request schema rejects it earlier.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import asyncpg
from pydantic import BaseModel, Field

from dishes_api.database.exceptions import RecordNotFoundError, ReferenceNotFoundError
from dishes_api.database.repositories.base import BaseRepository
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Record

    from dishes_api.query.filters import Metadata, PageQuery

logger = get_logger(__name__)

REVIEW_SORT_SAFELIST = frozenset(
    {"id", "rating", "created_at", "-id", "-rating", "-created_at"}
)

# Foreign key constraint name -> request field it guards
_REFERENCE_FIELDS = {
    "reviews_dish_id_fkey": "dishId",
    "reviews_drink_id_fkey": "drinkId",
}


class Review(BaseModel):
    """A review row."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    dish_id: int | None = None
    drink_id: int | None = None
    rating: int = Field(ge=1, le=5)
    comment: str = ""


_REVIEW_COLUMNS = "id, created_at, updated_at, dish_id, drink_id, rating, comment"

_INSERT = """
    INSERT INTO reviews (dish_id, drink_id, rating, comment)
    VALUES ($1, $2, $3, $4)
    RETURNING id, created_at, updated_at
"""

_SELECT_BY_ID = f"SELECT {_REVIEW_COLUMNS} FROM reviews WHERE id = $1"

_UPDATE = """
    UPDATE reviews
    SET dish_id = $1, drink_id = $2, rating = $3, comment = $4, updated_at = now()
    WHERE id = $5
    RETURNING updated_at
"""

_DELETE = "DELETE FROM reviews WHERE id = $1"

_LIST_TEMPLATE = """
    SELECT count(*) OVER() AS total_records, {columns}
    FROM reviews
    WHERE ($1::bigint IS NULL OR dish_id = $1)
    AND ($2::bigint IS NULL OR drink_id = $2)
    {order_by}
    LIMIT $3 OFFSET $4
"""


def _reference_error(exc: asyncpg.ForeignKeyViolationError) -> ReferenceNotFoundError:
    constraint = getattr(exc, "constraint_name", None)
    return ReferenceNotFoundError(_REFERENCE_FIELDS.get(constraint or "", "dishId"))


class ReviewRepository(BaseRepository):
    """Repository for dish and drink reviews."""

    async def list(
        self,
        dish_id: int | None,
        drink_id: int | None,
        page_query: PageQuery,
    ) -> tuple[list[Review], Metadata]:
        """Return one page of reviews.

        Args:
            dish_id: Only reviews of this dish, or None for any.
            drink_id: Only reviews of this drink, or None for any.
            page_query: Compiled page/sort parameters.
        """
        rows, metadata = await self.fetch_page(
            "reviews.list",
            _LIST_TEMPLATE,
            _REVIEW_COLUMNS,
            dish_id,
            drink_id,
            page_query=page_query,
        )
        return [self._row_to_review(row) for row in rows], metadata

    async def get(self, review_id: int) -> Review:
        async with self.operation("reviews.get"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, review_id)
        if row is None:
            raise RecordNotFoundError(f"review {review_id}")
        return self._row_to_review(row)

    async def insert(self, review: Review) -> Review:
        """Insert a review.

        Raises:
            ReferenceNotFoundError: The dish or drink does not exist.
        """
        async with self.operation("reviews.insert"):
            try:
                async with self.pool.acquire() as conn:
                    row = await conn.fetchrow(
                        _INSERT,
                        review.dish_id,
                        review.drink_id,
                        review.rating,
                        review.comment,
                    )
            except asyncpg.ForeignKeyViolationError as exc:
                raise _reference_error(exc) from exc
        logger.info("Review created", review_id=row["id"], rating=review.rating)
        return review.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    async def update(self, review: Review) -> Review:
        async with self.operation("reviews.update"):
            try:
                async with self.pool.acquire() as conn:
                    updated_at = await conn.fetchval(
                        _UPDATE,
                        review.dish_id,
                        review.drink_id,
                        review.rating,
                        review.comment,
                        review.id,
                    )
            except asyncpg.ForeignKeyViolationError as exc:
                raise _reference_error(exc) from exc
        if updated_at is None:
            raise RecordNotFoundError(f"review {review.id}")
        return review.model_copy(update={"updated_at": updated_at})

    async def delete(self, review_id: int) -> None:
        async with self.operation("reviews.delete"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE, review_id)
        if status == "DELETE 0":
            raise RecordNotFoundError(f"review {review_id}")
        logger.info("Review deleted", review_id=review_id)

    @staticmethod
    def _row_to_review(row: Record) -> Review:
        return Review(
            id=row["id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            dish_id=row["dish_id"],
            drink_id=row["drink_id"],
            rating=row["rating"],
            comment=row["comment"],
        )
