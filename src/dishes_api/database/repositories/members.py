"""Member data repository.

Member rows are updated with an optimistic-concurrency protocol: every
update names the version the caller read and the row is only written if that
version is still current. The version is bumped in the same statement.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import asyncpg
from pydantic import BaseModel, Field

from dishes_api.database.exceptions import DuplicateEmailError, EditConflictError
from dishes_api.database.repositories.base import BaseRepository
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Connection, Record

logger = get_logger(__name__)

EMAIL_UNIQUE_CONSTRAINT = "members_email_key"


# =============================================================================
# Data Transfer Objects
# =============================================================================


class Member(BaseModel):
    """A member row.

    ``password_hash`` is excluded from every dump and repr.
    """

    id: int = 0
    created_at: datetime | None = None
    name: str
    email: str
    password_hash: bytes = Field(default=b"", exclude=True, repr=False)
    activated: bool = False
    version: int = 1


# =============================================================================
# Repository
# =============================================================================

_MEMBER_COLUMNS = "id, created_at, name, email, password_hash, activated, version"

_INSERT = """
    INSERT INTO members (name, email, password_hash, activated)
    VALUES ($1, $2, $3, $4)
    RETURNING id, created_at, version
"""

_SELECT_BY_EMAIL = f"SELECT {_MEMBER_COLUMNS} FROM members WHERE email = $1"

_SELECT_BY_ID = f"SELECT {_MEMBER_COLUMNS} FROM members WHERE id = $1"

_SELECT_FOR_TOKEN = """
    SELECT m.id, m.created_at, m.name, m.email, m.password_hash, m.activated, m.version
    FROM members m
    INNER JOIN tokens t ON m.id = t.member_id
    WHERE t.hash = $1
    AND t.scope = $2
    AND t.expiry > $3
"""

_UPDATE = """
    UPDATE members
    SET name = $1, email = $2, password_hash = $3, activated = $4, version = version + 1
    WHERE id = $5 AND version = $6
    RETURNING version
"""


def _is_email_violation(exc: asyncpg.UniqueViolationError) -> bool:
    return getattr(exc, "constraint_name", None) == EMAIL_UNIQUE_CONSTRAINT


class MemberRepository(BaseRepository):
    """Repository for member records."""

    async def insert(self, member: Member, conn: Connection | None = None) -> Member:
        """Insert a new member, on ``conn`` when one is given.

        Returns:
            A copy of ``member`` with ``id``, ``created_at`` and ``version``
            filled in from the database.

        Raises:
            DuplicateEmailError: The email address is already registered.
        """
        async with self.operation("members.insert"):
            try:
                async with self.connection(conn) as c:
                    row = await c.fetchrow(
                        _INSERT,
                        member.name,
                        member.email,
                        member.password_hash,
                        member.activated,
                    )
            except asyncpg.UniqueViolationError as exc:
                if _is_email_violation(exc):
                    raise DuplicateEmailError(member.email) from exc
                raise

        logger.info("Member created", member_id=row["id"])
        return member.model_copy(
            update={
                "id": row["id"],
                "created_at": row["created_at"],
                "version": row["version"],
            }
        )

    async def get_by_email(self, email: str) -> Member | None:
        async with self.operation("members.get_by_email"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_EMAIL, email)
        return self._row_to_member(row) if row is not None else None

    async def get_by_id(self, member_id: int) -> Member | None:
        async with self.operation("members.get_by_id"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BY_ID, member_id)
        return self._row_to_member(row) if row is not None else None

    async def get_for_token(
        self,
        token_hash: bytes,
        scope: str,
        now: datetime,
    ) -> Member | None:
        """Find the member owning an unexpired token of ``scope``.

        Args:
            token_hash: SHA-256 digest of the token plaintext.
            scope: Token scope the caller requires.
            now: Reference time; tokens with ``expiry <= now`` never match.

        Returns:
            The member, or None for an unknown, expired or wrong-scope token.
        """
        async with self.operation("members.get_for_token"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(_SELECT_FOR_TOKEN, token_hash, scope, now)
        return self._row_to_member(row) if row is not None else None

    async def update(self, member: Member) -> Member:
        """Write ``member`` if its ``version`` is still the stored one.

        The compare and the write are a single statement, run in its own
        transaction. Nothing is retried here; a conflict goes back to the
        caller, who must re-read and decide.

        Returns:
            A copy of ``member`` carrying the new version.

        Raises:
            EditConflictError: The version moved on or the row is gone.
            DuplicateEmailError: The new email belongs to another member.
        """
        async with self.operation("members.update"):
            try:
                async with self.pool.acquire() as conn, conn.transaction():
                    new_version = await conn.fetchval(
                        _UPDATE,
                        member.name,
                        member.email,
                        member.password_hash,
                        member.activated,
                        member.id,
                        member.version,
                    )
            except asyncpg.UniqueViolationError as exc:
                if _is_email_violation(exc):
                    raise DuplicateEmailError(member.email) from exc
                raise

        if new_version is None:
            logger.info(
                "Member update lost a version race",
                member_id=member.id,
                expected_version=member.version,
            )
            raise EditConflictError(f"member {member.id} version {member.version}")

        return member.model_copy(update={"version": new_version})

    @staticmethod
    def _row_to_member(row: Record) -> Member:
        return Member(
            id=row["id"],
            created_at=row["created_at"],
            name=row["name"],
            email=row["email"],
            password_hash=bytes(row["password_hash"]),
            activated=row["activated"],
            version=row["version"],
        )
