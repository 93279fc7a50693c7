"""Scoped, hashed, expiring bearer tokens.

A token is 16 random bytes encoded as unpadded base32 (26 characters from
``A-Z2-7``). The plaintext is handed to the client exactly once; the store
only ever sees its SHA-256 digest.
"""

from __future__ import annotations

import base64
import hashlib
import re
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from dishes_api.auth.exceptions import TokenNotFoundError
from dishes_api.database.repositories.tokens import TokenRecord
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from asyncpg import Connection

    from dishes_api.database.repositories.members import Member, MemberRepository
    from dishes_api.database.repositories.tokens import TokenRepository

logger = get_logger(__name__)

TOKEN_ENTROPY_BYTES = 16
TOKEN_PLAINTEXT_LENGTH = 26

_TOKEN_FORMAT = re.compile(r"^[A-Z2-7]{26}$")


class TokenScope(StrEnum):
    """What a token may be used for."""

    ACTIVATION = "activation"
    AUTHENTICATION = "authentication"


@dataclass(frozen=True)
class IssuedToken:
    """A freshly issued token. ``plaintext`` must not be logged or stored."""

    plaintext: str = field(repr=False)
    member_id: int
    scope: TokenScope
    expiry: datetime


def generate_token() -> str:
    """Return a new random token plaintext."""
    raw = secrets.token_bytes(TOKEN_ENTROPY_BYTES)
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def hash_token(plaintext: str) -> bytes:
    """SHA-256 digest of a token plaintext."""
    return hashlib.sha256(plaintext.encode("ascii")).digest()


def validate_token_plaintext(plaintext: str) -> str | None:
    """Check the shape of a presented token without touching the store.

    Returns:
        An error message, or None when the token is well formed.
    """
    if not plaintext:
        return "must be provided"
    if len(plaintext) != TOKEN_PLAINTEXT_LENGTH:
        return f"must be {TOKEN_PLAINTEXT_LENGTH} bytes long"
    if not _TOKEN_FORMAT.match(plaintext):
        return "must contain only base32 characters"
    return None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenAuthority:
    """Issues, resolves and revokes tokens.

    Args:
        members: Member repository (for resolution).
        tokens: Token repository.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        members: MemberRepository,
        tokens: TokenRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._members = members
        self._tokens = tokens
        self._clock = clock

    async def issue(
        self,
        member_id: int,
        ttl: timedelta,
        scope: TokenScope,
        conn: Connection | None = None,
    ) -> IssuedToken:
        """Create and persist a token of ``scope`` for ``member_id``.

        ``conn`` lets the insert join a transaction the caller already holds.
        """
        plaintext = generate_token()
        expiry = self._clock() + ttl
        await self._tokens.insert(
            TokenRecord(
                hash=hash_token(plaintext),
                member_id=member_id,
                scope=scope,
                expiry=expiry,
            ),
            conn=conn,
        )
        logger.info("Token issued", member_id=member_id, scope=str(scope))
        return IssuedToken(
            plaintext=plaintext,
            member_id=member_id,
            scope=scope,
            expiry=expiry,
        )

    async def resolve(self, scope: TokenScope, plaintext: str) -> Member:
        """Return the member owning an unexpired ``scope`` token.

        Raises:
            TokenNotFoundError: Unknown, expired or wrong-scope token.
        """
        member = await self._members.get_for_token(
            hash_token(plaintext), scope, self._clock()
        )
        if member is None:
            raise TokenNotFoundError(scope)
        return member

    async def revoke_all(self, scope: TokenScope, member_id: int) -> int:
        """Delete every ``scope`` token of the member; returns the count."""
        removed = await self._tokens.delete_all_for_member(scope, member_id)
        logger.info(
            "Tokens revoked", member_id=member_id, scope=str(scope), count=removed
        )
        return removed
