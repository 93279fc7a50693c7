"""Member endpoints: registration, activation and the current member."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status

from dishes_api.api.dependencies import get_member_service
from dishes_api.auth.dependencies import (
    get_identity,
    require_activated_member,
    require_authenticated_member,
)
from dishes_api.core.exceptions import (
    ConflictError,
    DuplicateIdentityError,
    ValidationFailedError,
)
from dishes_api.core.rate_limit import rate_limit_auth
from dishes_api.database.exceptions import DuplicateEmailError, EditConflictError
from dishes_api.database.repositories import Member
from dishes_api.observability.logging import get_logger
from dishes_api.schemas.members import (
    ActivateMemberRequest,
    MemberEnvelope,
    MemberResponse,
    RegisterMemberRequest,
    RegisterMemberResponse,
    UpdateMemberRequest,
)
from dishes_api.services.members import (
    InvalidActivationTokenError,
    MemberService,
    PasswordPolicyError,
)


logger = get_logger(__name__)

router = APIRouter(
    prefix="/members",
    tags=["members"],
    dependencies=[Depends(get_identity)],
)


@router.post(
    "",
    response_model=RegisterMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a member",
    description="Create an inactive member and return its one-time activation token.",
)
@rate_limit_auth()
async def register_member(
    request: Request,
    body: RegisterMemberRequest,
    service: Annotated[MemberService, Depends(get_member_service)],
) -> RegisterMemberResponse:
    try:
        member, token = await service.register(
            body.name, str(body.email), body.password.get_secret_value()
        )
    except PasswordPolicyError as e:
        raise ValidationFailedError({"password": str(e)}) from e
    except DuplicateEmailError:
        raise DuplicateIdentityError from None

    return RegisterMemberResponse(
        activation_token=token.plaintext,
        member=MemberResponse.from_record(member),
    )


@router.put(
    "/activated",
    response_model=MemberEnvelope,
    summary="Activate a member",
)
async def activate_member(
    body: ActivateMemberRequest,
    service: Annotated[MemberService, Depends(get_member_service)],
) -> MemberEnvelope:
    """Consume an activation token. All activation tokens of the member are burnt."""
    try:
        member = await service.activate(body.token)
    except InvalidActivationTokenError as e:
        raise ValidationFailedError({"token": str(e)}) from e
    except EditConflictError:
        raise ConflictError from None

    return MemberEnvelope(member=MemberResponse.from_record(member))


@router.get("/me", response_model=MemberEnvelope, summary="Current member")
async def get_current_member(
    member: Annotated[Member, Depends(require_authenticated_member)],
) -> MemberEnvelope:
    return MemberEnvelope(member=MemberResponse.from_record(member))


@router.patch(
    "/me",
    response_model=MemberEnvelope,
    summary="Update the current member",
    description=(
        "Partial update. Send X-Expected-Version to make the update conditional "
        "on the version you last read; a mismatch yields 409."
    ),
)
async def update_current_member(
    body: UpdateMemberRequest,
    member: Annotated[Member, Depends(require_activated_member)],
    service: Annotated[MemberService, Depends(get_member_service)],
    expected_version: Annotated[int | None, Header(alias="X-Expected-Version")] = None,
) -> MemberEnvelope:
    try:
        updated = await service.update_member(
            member,
            name=body.name,
            email=str(body.email) if body.email is not None else None,
            password=body.password.get_secret_value() if body.password else None,
            expected_version=expected_version,
        )
    except PasswordPolicyError as e:
        raise ValidationFailedError({"password": str(e)}) from e
    except DuplicateEmailError:
        raise DuplicateIdentityError from None
    except EditConflictError:
        raise ConflictError from None

    return MemberEnvelope(member=MemberResponse.from_record(updated))
