"""Member lifecycle: registration, activation, login, profile updates.

bcrypt is CPU bound, so hashing and verification run in a worker thread to
keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from dishes_api.auth.exceptions import TokenNotFoundError
from dishes_api.auth.passwords import (
    dummy_digest,
    hash_password,
    validate_password_plaintext,
    verify_password,
)
from dishes_api.auth.tokens import TokenScope, validate_token_plaintext
from dishes_api.database.exceptions import EditConflictError
from dishes_api.database.repositories.members import Member
from dishes_api.observability.logging import get_logger
from dishes_api.services.members.exceptions import (
    InvalidActivationTokenError,
    InvalidLoginError,
    PasswordPolicyError,
)


if TYPE_CHECKING:
    from dishes_api.auth.tokens import IssuedToken, TokenAuthority
    from dishes_api.core.config.settings import AuthSettings
    from dishes_api.database.repositories.members import MemberRepository
    from dishes_api.database.repositories.permissions import PermissionRepository

logger = get_logger(__name__)


class MemberService:
    """Coordinates member persistence, credentials and tokens."""

    def __init__(
        self,
        members: MemberRepository,
        permissions: PermissionRepository,
        authority: TokenAuthority,
        settings: AuthSettings,
    ) -> None:
        self._members = members
        self._permissions = permissions
        self._authority = authority
        self._settings = settings

    async def _hash(self, password: str) -> bytes:
        error = validate_password_plaintext(password)
        if error is not None:
            raise PasswordPolicyError(error)
        return await asyncio.to_thread(
            hash_password, password, self._settings.bcrypt_rounds
        )

    async def register(
        self,
        name: str,
        email: str,
        password: str,
    ) -> tuple[Member, IssuedToken]:
        """Create an inactive member and issue its activation token.

        The member receives the configured default permissions. The member
        row, its grants and the token are written in one transaction, so a
        failure at any step leaves nothing behind.

        Raises:
            PasswordPolicyError: Password shorter than 8 or longer than 72 bytes.
            DuplicateEmailError: The email address is taken.
        """
        password_hash = await self._hash(password)
        async with self._members.transaction("members.register") as conn:
            member = await self._members.insert(
                Member(
                    name=name, email=email, password_hash=password_hash, activated=False
                ),
                conn=conn,
            )
            await self._permissions.add_for_member(
                member.id, *self._settings.default_permissions, conn=conn
            )
            token = await self._authority.issue(
                member.id,
                self._settings.activation_token_ttl,
                TokenScope.ACTIVATION,
                conn=conn,
            )
        logger.info("Member registered", member_id=member.id)
        return member, token

    async def activate(self, token: str) -> Member:
        """Activate the member owning ``token`` and burn its activation tokens.

        Raises:
            InvalidActivationTokenError: Malformed, unknown or expired token.
            EditConflictError: The member changed while being activated.
        """
        error = validate_token_plaintext(token)
        if error is not None:
            raise InvalidActivationTokenError(error)
        try:
            member = await self._authority.resolve(TokenScope.ACTIVATION, token)
        except TokenNotFoundError:
            raise InvalidActivationTokenError(
                "invalid or expired activation token"
            ) from None

        member = await self._members.update(member.model_copy(update={"activated": True}))
        await self._authority.revoke_all(TokenScope.ACTIVATION, member.id)
        logger.info("Member activated", member_id=member.id)
        return member

    async def authenticate(self, email: str, password: str) -> IssuedToken:
        """Exchange email and password for an authentication token.

        Raises:
            InvalidLoginError: Unknown email or wrong password.
        """
        member = await self._members.get_by_email(email)
        if member is None:
            # Same bcrypt cost as a real mismatch
            await asyncio.to_thread(
                verify_password, dummy_digest(self._settings.bcrypt_rounds), password
            )
            raise InvalidLoginError

        matches = await asyncio.to_thread(
            verify_password, member.password_hash, password
        )
        if not matches:
            logger.info("Password mismatch on login", member_id=member.id)
            raise InvalidLoginError

        return await self._authority.issue(
            member.id,
            self._settings.authentication_token_ttl,
            TokenScope.AUTHENTICATION,
        )

    async def update_member(
        self,
        member: Member,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        expected_version: int | None = None,
    ) -> Member:
        """Apply a partial update using the version the caller observed.

        When ``expected_version`` is given it must match ``member.version``.
        A password change revokes every authentication token of the member.

        Raises:
            PasswordPolicyError: New password violates the length policy.
            EditConflictError: Version mismatch or a concurrent write.
            DuplicateEmailError: New email belongs to another member.
        """
        if expected_version is not None and expected_version != member.version:
            raise EditConflictError(f"member {member.id} version {member.version}")

        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = name
        if email is not None:
            changes["email"] = email
        if password is not None:
            changes["password_hash"] = await self._hash(password)

        updated = await self._members.update(member.model_copy(update=changes))
        if password is not None:
            await self._authority.revoke_all(TokenScope.AUTHENTICATION, member.id)
        logger.info("Member updated", member_id=member.id, version=updated.version)
        return updated

    async def logout(self, member: Member) -> int:
        """Revoke every authentication token of ``member``."""
        return await self._authority.revoke_all(TokenScope.AUTHENTICATION, member.id)
