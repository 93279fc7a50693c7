"""Token request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, SecretStr

from dishes_api.schemas.base import APIRequest, APIResponse


class CreateAuthenticationTokenRequest(APIRequest):
    """Body of ``POST /tokens/authentication``."""

    email: EmailStr
    password: SecretStr


class TokenResponse(APIResponse):
    """A token plaintext and its expiry; shown to the client once."""

    token: str
    expiry: datetime


class AuthenticationTokenResponse(APIResponse):
    """``{"authenticationToken": {...}}``."""

    authentication_token: TokenResponse
