"""Member request and response schemas.

Passwords arrive as ``SecretStr`` so they never show up in reprs or logs.
The member's ``version`` and password hash are never returned.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, SecretStr

from dishes_api.schemas.base import APIRequest, APIResponse


class RegisterMemberRequest(APIRequest):
    """Body of ``POST /members``."""

    name: str = Field(..., min_length=1, max_length=500)
    email: EmailStr
    password: SecretStr


class ActivateMemberRequest(APIRequest):
    """Body of ``PUT /members/activated``."""

    token: str


class UpdateMemberRequest(APIRequest):
    """Body of ``PATCH /members/me``; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=500)
    email: EmailStr | None = None
    password: SecretStr | None = None


class MemberResponse(APIResponse):
    """Public view of a member."""

    id: int
    created_at: datetime | None
    name: str
    email: str
    activated: bool


class MemberEnvelope(APIResponse):
    """``{"member": {...}}``."""

    member: MemberResponse


class RegisterMemberResponse(APIResponse):
    """Registration result carrying the one-time activation token."""

    activation_token: str
    member: MemberResponse
