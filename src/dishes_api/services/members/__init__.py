"""Member lifecycle service."""

from dishes_api.services.members.exceptions import (
    InvalidActivationTokenError,
    InvalidLoginError,
    MemberServiceError,
    PasswordPolicyError,
)
from dishes_api.services.members.service import MemberService


__all__ = [
    "InvalidActivationTokenError",
    "InvalidLoginError",
    "MemberService",
    "MemberServiceError",
    "PasswordPolicyError",
]
