"""Ingredient data repository.

Every ingredient belongs to one dish and is deleted with it.
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

INGREDIENT_SORT_SAFELIST = frozenset(
    {"id", "name", "quantity", "-id", "-name", "-quantity"}
)


class Ingredient(BaseModel):
    """An ingredient row."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    quantity: int = Field(ge=0)
    dish_id: int


_INGREDIENT_COLUMNS = "id, created_at, updated_at, name, quantity, dish_id"

_INSERT = """
    INSERT INTO ingredients (name, quantity, dish_id)
    VALUES ($1, $2, $3)
    RETURNING id, created_at, updated_at
"""

_SELECT_BY_ID = f"SELECT {_INGREDIENT_COLUMNS} FROM ingredients WHERE id = $1"

_UPDATE = """
    UPDATE ingredients
    SET name = $1, quantity = $2, dish_id = $3, updated_at = now()
    WHERE id = $4
    RETURNING updated_at
"""

_DELETE = "DELETE FROM ingredients WHERE id = $1"

_LIST_TEMPLATE = """
    SELECT count(*) OVER() AS total_records, {columns}
    FROM ingredients
    WHERE (dish_id = $1 OR $1 = 0)
    {order_by}
    LIMIT $2 OFFSET $3
"""


class IngredientRepository(BaseRepository):
    """Repository for dish ingredients."""

    async def list(
        self, dish_id: int, page_query: PageQuery
    ) -> tuple[list[Ingredient], Metadata]:
        """Return one page of ingredients, optionally of a single dish (0 = all)."""
        rows, metadata = await self.fetch_page(
            "ingredients.list",
            _LIST_TEMPLATE,
            _INGREDIENT_COLUMNS,
            dish_id,
            page_query=page_query,
        )
        return [self._row_to_ingredient(row) for row in rows], metadata

    async def get(self, ingredient_id: int) -> Ingredient:
        async with self.operation("ingredients.get"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, ingredient_id)
        if row is None:
            raise RecordNotFoundError(f"ingredient {ingredient_id}")
        return self._row_to_ingredient(row)

    async def insert(self, ingredient: Ingredient) -> Ingredient:
        """Insert an ingredient.

        Raises:
            ReferenceNotFoundError: ``dish_id`` names no dish.
        """
        async with self.operation("ingredients.insert"):
            try:
                async with self.pool.acquire() as conn:
                    row = await conn.fetchrow(
                        _INSERT, ingredient.name, ingredient.quantity, ingredient.dish_id
                    )
            except asyncpg.ForeignKeyViolationError as exc:
                raise ReferenceNotFoundError("dishId") from exc
        logger.info(
            "Ingredient created", ingredient_id=row["id"], dish_id=ingredient.dish_id
        )
        return ingredient.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    async def update(self, ingredient: Ingredient) -> Ingredient:
        """Overwrite an ingredient.

        Raises:
            RecordNotFoundError: No ingredient has ``ingredient.id``.
            ReferenceNotFoundError: ``dish_id`` names no dish.
        """
        async with self.operation("ingredients.update"):
            try:
                async with self.pool.acquire() as conn:
                    updated_at = await conn.fetchval(
                        _UPDATE,
                        ingredient.name,
                        ingredient.quantity,
                        ingredient.dish_id,
                        ingredient.id,
                    )
            except asyncpg.ForeignKeyViolationError as exc:
                raise ReferenceNotFoundError("dishId") from exc
        if updated_at is None:
            raise RecordNotFoundError(f"ingredient {ingredient.id}")
        return ingredient.model_copy(update={"updated_at": updated_at})

    async def delete(self, ingredient_id: int) -> None:
        async with self.operation("ingredients.delete"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE, ingredient_id)
        if status == "DELETE 0":
            raise RecordNotFoundError(f"ingredient {ingredient_id}")
        logger.info("Ingredient deleted", ingredient_id=ingredient_id)

    @staticmethod
    def _row_to_ingredient(row: Record) -> Ingredient:
        return Ingredient(
            id=row["id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            name=row["name"],
            quantity=row["quantity"],
            dish_id=row["dish_id"],
        )
