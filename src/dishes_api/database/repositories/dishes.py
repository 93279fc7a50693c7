"""Dish data repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from dishes_api.database.exceptions import RecordNotFoundError
from dishes_api.database.repositories.base import BaseRepository
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Record

    from dishes_api.query.filters import Metadata, PageQuery

logger = get_logger(__name__)

DISH_SORT_SAFELIST = frozenset({"id", "name", "price", "-id", "-name", "-price"})


class Dish(BaseModel):
    """A dish row."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    description: str = ""
    price: float


_DISH_COLUMNS = "id, created_at, updated_at, name, description, price"

_INSERT = """
    INSERT INTO dishes (name, description, price)
    VALUES ($1, $2, $3)
    RETURNING id, created_at, updated_at
"""

_SELECT_BY_ID = f"SELECT {_DISH_COLUMNS} FROM dishes WHERE id = $1"

_UPDATE = """
    UPDATE dishes
    SET name = $1, description = $2, price = $3, updated_at = now()
    WHERE id = $4
    RETURNING updated_at
"""

_DELETE = "DELETE FROM dishes WHERE id = $1"

# The ORDER BY clause comes from a validated SortOrder, never from raw input.
_LIST_TEMPLATE = """
    SELECT count(*) OVER() AS total_records, {columns}
    FROM dishes
    WHERE (LOWER(name) = LOWER($1) OR $1 = '')
    AND (price >= $2 OR $2 = 0)
    {order_by}
    LIMIT $3 OFFSET $4
"""


class DishRepository(BaseRepository):
    """Repository for dishes."""

    async def list(
        self,
        name: str,
        min_price: float,
        page_query: PageQuery,
    ) -> tuple[list[Dish], Metadata]:
        """Return one page of dishes and its pagination metadata.

        Args:
            name: Case-insensitive exact name, or "" for any.
            min_price: Minimum price, or 0 for any.
            page_query: Compiled page/sort parameters.
        """
        rows, metadata = await self.fetch_page(
            "dishes.list",
            _LIST_TEMPLATE,
            _DISH_COLUMNS,
            name,
            min_price,
            page_query=page_query,
        )
        return [self._row_to_dish(row) for row in rows], metadata

    async def get(self, dish_id: int) -> Dish:
        """Fetch one dish.

        Raises:
            RecordNotFoundError: No dish has ``dish_id``.
        """
        async with self.operation("dishes.get"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, dish_id)
        if row is None:
            raise RecordNotFoundError(f"dish {dish_id}")
        return self._row_to_dish(row)

    async def insert(self, dish: Dish) -> Dish:
        async with self.operation("dishes.insert"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_INSERT, dish.name, dish.description, dish.price)
        logger.info("Dish created", dish_id=row["id"])
        return dish.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    async def update(self, dish: Dish) -> Dish:
        """Overwrite a dish.

        Raises:
            RecordNotFoundError: No dish has ``dish.id``.
        """
        async with self.operation("dishes.update"):
            async with self.pool.acquire() as conn:
                updated_at = await conn.fetchval(
                    _UPDATE, dish.name, dish.description, dish.price, dish.id
                )
        if updated_at is None:
            raise RecordNotFoundError(f"dish {dish.id}")
        return dish.model_copy(update={"updated_at": updated_at})

    async def delete(self, dish_id: int) -> None:
        """Delete a dish.

        Raises:
            RecordNotFoundError: No dish has ``dish_id``.
        """
        async with self.operation("dishes.delete"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE, dish_id)
        if status == "DELETE 0":
            raise RecordNotFoundError(f"dish {dish_id}")
        logger.info("Dish deleted", dish_id=dish_id)

    @staticmethod
    def _row_to_dish(row: Record) -> Dish:
        return Dish(
            id=row["id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            name=row["name"],
            description=row["description"],
            price=row["price"],
        )
