"""Shared repository plumbing: pool lookup and bounded store operations."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from dishes_api.core.config import get_settings
from dishes_api.database.connection import get_database_pool, store_operation
from dishes_api.query.filters import calculate_metadata


if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager

    from asyncpg import Connection, Pool, Record

    from dishes_api.query.filters import Metadata, PageQuery


class BaseRepository:
    """Base class for asyncpg repositories.

    Subclasses wrap every statement in ``self.operation("<table>.<verb>")`` so
    that it is bounded by ``database.query_timeout`` and driver failures come
    out as store errors.

    Write methods accept an optional ``conn``. Passing the connection yielded
    by :meth:`transaction` makes several writes, possibly across
    repositories, commit or roll back together.
    """

    def __init__(self, pool: Pool | None = None, query_timeout: float | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
            query_timeout: Seconds per operation. If None, uses settings.
        """
        self._pool = pool
        self._query_timeout = query_timeout

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    @property
    def query_timeout(self) -> float:
        if self._query_timeout is not None:
            return self._query_timeout
        return get_settings().database.query_timeout

    def operation(self, name: str) -> AbstractAsyncContextManager[None]:
        return store_operation(name, self.query_timeout)

    @asynccontextmanager
    async def connection(
        self, conn: Connection | None = None
    ) -> AsyncIterator[Connection]:
        """Yield ``conn`` when given, otherwise a connection from the pool."""
        if conn is not None:
            yield conn
            return
        async with self.pool.acquire() as acquired:
            yield acquired

    @asynccontextmanager
    async def transaction(self, name: str) -> AsyncIterator[Connection]:
        """Open a transaction and yield its connection.

        The whole block is one bounded store operation. It commits when the
        block exits normally and rolls back on any exception, which is then
        re-raised.
        """
        async with self.operation(name), self.pool.acquire() as conn, conn.transaction():
            yield conn

    async def fetch_page(
        self,
        name: str,
        template: str,
        columns: str,
        *args: object,
        page_query: PageQuery,
    ) -> tuple[list[Record], Metadata]:
        """Run a list query and compute its pagination metadata.

        ``template`` must select ``count(*) OVER() AS total_records`` and end
        with ``{order_by} LIMIT $n OFFSET $n+1``, where ``n`` is one past the
        filter arguments in ``args``.
        """
        query = template.format(columns=columns, order_by=page_query.order_by_clause())
        async with self.operation(name):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *args, page_query.limit, page_query.offset)

        total = rows[0]["total_records"] if rows else 0
        return rows, calculate_metadata(total, page_query.page, page_query.page_size)
