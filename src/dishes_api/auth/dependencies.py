"""FastAPI security dependencies.

The authorization chain, each step building on the previous one:

1. ``get_identity``: parse the ``Authorization`` header and resolve it to an
   ``Identity``. A malformed header is rejected before any store access.
2. ``require_authenticated_member``: reject ``Anonymous``.
3. ``require_activated_member``: reject members that are not activated.
4. ``RequirePermission(code)``: reject members lacking ``code``.

The resolved identity flows from step to step as a dependency value;
FastAPI caches it per request so the token is looked up once.
"""

from typing import Annotated

from fastapi import Depends, Header

from dishes_api.api.dependencies import get_permission_repository, get_token_authority
from dishes_api.auth.exceptions import TokenNotFoundError
from dishes_api.auth.identity import ANONYMOUS, Authenticated, Identity
from dishes_api.auth.permissions import Permission, has_permission
from dishes_api.auth.tokens import TokenAuthority, TokenScope, validate_token_plaintext
from dishes_api.core.exceptions import (
    AuthenticationRequiredError,
    InactiveAccountError,
    InvalidCredentialError,
    NotPermittedError,
)
from dishes_api.database.repositories import Member, PermissionRepository
from dishes_api.observability.logging import bind_context, get_logger


logger = get_logger(__name__)

BEARER_SCHEME = "Bearer"


def parse_bearer_token(authorization: str) -> str:
    """Extract the token from ``Bearer <token>``.

    Raises:
        InvalidCredentialError: Wrong scheme, wrong shape or bad token format.
    """
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        raise InvalidCredentialError
    token = parts[1]
    if validate_token_plaintext(token) is not None:
        raise InvalidCredentialError
    return token


async def get_identity(
    authority: Annotated[TokenAuthority, Depends(get_token_authority)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Resolve the request identity from the ``Authorization`` header.

    Returns:
        ``ANONYMOUS`` when no header was sent, ``Authenticated`` otherwise.

    Raises:
        InvalidCredentialError: The header is malformed or the token is
            unknown, expired or not an authentication token.
    """
    if authorization is None:
        return ANONYMOUS

    token = parse_bearer_token(authorization)
    try:
        member = await authority.resolve(TokenScope.AUTHENTICATION, token)
    except TokenNotFoundError:
        raise InvalidCredentialError from None

    bind_context(member_id=member.id)
    return Authenticated(member)


async def require_authenticated_member(
    identity: Annotated[Identity, Depends(get_identity)],
) -> Member:
    """Get the authenticated member or fail with 401."""
    if not isinstance(identity, Authenticated):
        raise AuthenticationRequiredError
    return identity.member


async def require_activated_member(
    member: Annotated[Member, Depends(require_authenticated_member)],
) -> Member:
    """Get the authenticated, activated member or fail with 403."""
    if not member.activated:
        raise InactiveAccountError
    return member


class RequirePermission:
    """Dependency class for requiring a permission code.

    Usage:
        @router.get("/dishes")
        async def list_dishes(
            member: Annotated[Member, Depends(RequirePermission(Permission.DISHES_READ))]
        ):
            ...
    """

    def __init__(self, code: Permission | str) -> None:
        self.code = str(code)

    async def __call__(
        self,
        member: Annotated[Member, Depends(require_activated_member)],
        permissions: Annotated[PermissionRepository, Depends(get_permission_repository)],
    ) -> Member:
        """Check the member's permission set.

        Raises:
            NotPermittedError: 403 if the code was not granted.
        """
        granted = await permissions.get_all_for_member(member.id)
        if not has_permission(granted, self.code):
            logger.info("Permission denied", member_id=member.id, permission=self.code)
            raise NotPermittedError(self.code)
        return member


RequireDishesRead = RequirePermission(Permission.DISHES_READ)
RequireDishesWrite = RequirePermission(Permission.DISHES_WRITE)
