"""Authentication token endpoints (login and logout)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from dishes_api.api.dependencies import get_member_service
from dishes_api.auth.dependencies import get_identity, require_authenticated_member
from dishes_api.core.exceptions import InvalidCredentialsError
from dishes_api.core.rate_limit import rate_limit_auth
from dishes_api.database.repositories import Member
from dishes_api.schemas.tokens import (
    AuthenticationTokenResponse,
    CreateAuthenticationTokenRequest,
    TokenResponse,
)
from dishes_api.services.members import InvalidLoginError, MemberService


router = APIRouter(
    prefix="/tokens",
    tags=["tokens"],
    dependencies=[Depends(get_identity)],
)


@router.post(
    "/authentication",
    response_model=AuthenticationTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log in",
    description="Exchange email and password for a short-lived bearer token.",
)
@rate_limit_auth()
async def create_authentication_token(
    request: Request,
    body: CreateAuthenticationTokenRequest,
    service: Annotated[MemberService, Depends(get_member_service)],
) -> AuthenticationTokenResponse:
    try:
        token = await service.authenticate(
            str(body.email), body.password.get_secret_value()
        )
    except InvalidLoginError:
        raise InvalidCredentialsError from None

    return AuthenticationTokenResponse(
        authentication_token=TokenResponse(token=token.plaintext, expiry=token.expiry)
    )


@router.delete(
    "/authentication",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
    description="Revoke every authentication token of the current member.",
)
async def delete_authentication_tokens(
    member: Annotated[Member, Depends(require_authenticated_member)],
    service: Annotated[MemberService, Depends(get_member_service)],
) -> Response:
    await service.logout(member)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
