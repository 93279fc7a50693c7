"""Drink data repository."""

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

DRINK_SORT_SAFELIST = frozenset({"id", "name", "price", "-id", "-name", "-price"})


class Drink(BaseModel):
    """A drink row."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    description: str = ""
    price: float


_DRINK_COLUMNS = "id, created_at, updated_at, name, description, price"

_INSERT = """
    INSERT INTO drinks (name, description, price)
    VALUES ($1, $2, $3)
    RETURNING id, created_at, updated_at
"""

_SELECT_BY_ID = f"SELECT {_DRINK_COLUMNS} FROM drinks WHERE id = $1"

_UPDATE = """
    UPDATE drinks
    SET name = $1, description = $2, price = $3, updated_at = now()
    WHERE id = $4
    RETURNING updated_at
"""

_DELETE = "DELETE FROM drinks WHERE id = $1"

_LIST_TEMPLATE = """
    SELECT count(*) OVER() AS total_records, {columns}
    FROM drinks
    WHERE (LOWER(name) = LOWER($1) OR $1 = '')
    AND (price >= $2 OR $2 = 0)
    {order_by}
    LIMIT $3 OFFSET $4
"""


class DrinkRepository(BaseRepository):
    """Repository for drinks. Same filters as dishes."""

    async def list(
        self,
        name: str,
        min_price: float,
        page_query: PageQuery,
    ) -> tuple[list[Drink], Metadata]:
        rows, metadata = await self.fetch_page(
            "drinks.list",
            _LIST_TEMPLATE,
            _DRINK_COLUMNS,
            name,
            min_price,
            page_query=page_query,
        )
        return [self._row_to_drink(row) for row in rows], metadata

    async def get(self, drink_id: int) -> Drink:
        async with self.operation("drinks.get"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, drink_id)
        if row is None:
            raise RecordNotFoundError(f"drink {drink_id}")
        return self._row_to_drink(row)

    async def insert(self, drink: Drink) -> Drink:
        async with self.operation("drinks.insert"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    _INSERT, drink.name, drink.description, drink.price
                )
        logger.info("Drink created", drink_id=row["id"])
        return drink.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    async def update(self, drink: Drink) -> Drink:
        async with self.operation("drinks.update"):
            async with self.pool.acquire() as conn:
                updated_at = await conn.fetchval(
                    _UPDATE, drink.name, drink.description, drink.price, drink.id
                )
        if updated_at is None:
            raise RecordNotFoundError(f"drink {drink.id}")
        return drink.model_copy(update={"updated_at": updated_at})

    async def delete(self, drink_id: int) -> None:
        async with self.operation("drinks.delete"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE, drink_id)
        if status == "DELETE 0":
            raise RecordNotFoundError(f"drink {drink_id}")
        logger.info("Drink deleted", drink_id=drink_id)

    @staticmethod
    def _row_to_drink(row: Record) -> Drink:
        return Drink(
            id=row["id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            name=row["name"],
            description=row["description"],
            price=row["price"],
        )
