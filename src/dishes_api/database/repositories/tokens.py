"""Token data repository.

Only the SHA-256 digest of a token is ever stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from dishes_api.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Connection


class TokenRecord(BaseModel):
    """A stored token row."""

    hash: bytes
    member_id: int
    scope: str
    expiry: datetime


_INSERT = """
    INSERT INTO tokens (hash, member_id, expiry, scope)
    VALUES ($1, $2, $3, $4)
"""

_DELETE_ALL_FOR_MEMBER = """
    DELETE FROM tokens
    WHERE scope = $1 AND member_id = $2
"""


class TokenRepository(BaseRepository):
    """Repository for scoped bearer tokens."""

    async def insert(self, token: TokenRecord, conn: Connection | None = None) -> None:
        async with self.operation("tokens.insert"):
            async with self.connection(conn) as c:
                await c.execute(
                    _INSERT, token.hash, token.member_id, token.expiry, token.scope
                )

    async def delete_all_for_member(self, scope: str, member_id: int) -> int:
        """Delete every token of ``scope`` owned by ``member_id``.

        Returns:
            Number of rows removed.
        """
        async with self.operation("tokens.delete_all_for_member"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(_DELETE_ALL_FOR_MEMBER, scope, member_id)
        # asyncpg returns the command tag, e.g. "DELETE 3"
        return int(status.rsplit(" ", 1)[-1])
