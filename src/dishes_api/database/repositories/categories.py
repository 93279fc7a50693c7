"""Menu category data repository.

Categories are listed with a case-insensitive substring match on the name,
unlike dishes and drinks which match the whole name.
"""

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

CATEGORY_SORT_SAFELIST = frozenset({"id", "name", "-id", "-name"})


class Category(BaseModel):
    """A category row."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    name: str
    description: str = ""


_CATEGORY_COLUMNS = "id, created_at, updated_at, name, description"

_INSERT = """
    INSERT INTO categories (name, description)
    VALUES ($1, $2)
    RETURNING id, created_at, updated_at
"""

_SELECT_BY_ID = f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE id = $1"

_UPDATE = """
    UPDATE categories
    SET name = $1, description = $2, updated_at = now()
    WHERE id = $3
    RETURNING updated_at
"""

_DELETE = "DELETE FROM categories WHERE id = $1"

# strpos keeps % and _ in the filter literal
_LIST_TEMPLATE = """
    SELECT count(*) OVER() AS total_records, {columns}
    FROM categories
    WHERE (strpos(LOWER(name), LOWER($1)) > 0 OR $1 = '')
    {order_by}
    LIMIT $2 OFFSET $3
"""


class CategoryRepository(BaseRepository):
    """Repository for menu categories."""

    async def list(
        self, name: str, page_query: PageQuery
    ) -> tuple[list[Category], Metadata]:
        """Return one page of categories whose name contains ``name``."""
        rows, metadata = await self.fetch_page(
            "categories.list",
            _LIST_TEMPLATE,
            _CATEGORY_COLUMNS,
            name,
            page_query=page_query,
        )
        return [self._row_to_category(row) for row in rows], metadata

    async def get(self, category_id: int) -> Category:
        async with self.operation("categories.get"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, category_id)
        if row is None:
            raise RecordNotFoundError(f"category {category_id}")
        return self._row_to_category(row)

    async def insert(self, category: Category) -> Category:
        async with self.operation("categories.insert"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_INSERT, category.name, category.description)
        logger.info("Category created", category_id=row["id"])
        return category.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    async def update(self, category: Category) -> Category:
        async with self.operation("categories.update"):
            async with self.pool.acquire() as conn:
                updated_at = await conn.fetchval(
                    _UPDATE, category.name, category.description, category.id
                )
        if updated_at is None:
            raise RecordNotFoundError(f"category {category.id}")
        return category.model_copy(update={"updated_at": updated_at})

    async def delete(self, category_id: int) -> None:
        async with self.operation("categories.delete"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE, category_id)
        if status == "DELETE 0":
            raise RecordNotFoundError(f"category {category_id}")
        logger.info("Category deleted", category_id=category_id)

    @staticmethod
    def _row_to_category(row: Record) -> Category:
        return Category(
            id=row["id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            name=row["name"],
            description=row["description"],
        )
