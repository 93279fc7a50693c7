"""Permission data repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dishes_api.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Connection


_SELECT_FOR_MEMBER = """
    SELECT p.code
    FROM permissions p
    INNER JOIN members_permissions mp ON mp.permission_id = p.id
    WHERE mp.member_id = $1
"""

_GRANT = """
    INSERT INTO members_permissions (member_id, permission_id)
    SELECT $1, p.id FROM permissions p WHERE p.code = ANY($2::text[])
    ON CONFLICT DO NOTHING
"""


class PermissionRepository(BaseRepository):
    """Repository for the member/permission association."""

    async def get_all_for_member(self, member_id: int) -> frozenset[str]:
        async with self.operation("permissions.get_all_for_member"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(_SELECT_FOR_MEMBER, member_id)
        return frozenset(row["code"] for row in rows)

    async def add_for_member(
        self, member_id: int, *codes: str, conn: Connection | None = None
    ) -> None:
        """Grant ``codes`` to a member; unknown codes are ignored."""
        if not codes:
            return
        async with self.operation("permissions.add_for_member"):
            async with self.connection(conn) as c:
                await c.execute(_GRANT, member_id, list(codes))
