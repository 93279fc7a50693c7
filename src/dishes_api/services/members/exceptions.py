"""Member service exceptions.

These exceptions are caught by the endpoint layer and converted to
appropriate HTTP responses. Persistence conflicts
(``DuplicateEmailError``, ``EditConflictError``) pass through unchanged.
"""

from __future__ import annotations


class MemberServiceError(Exception):
    """Base exception for member service errors."""


class PasswordPolicyError(MemberServiceError):
    """The new password does not meet the length policy."""


class InvalidLoginError(MemberServiceError):
    """Email unknown or password wrong; the two are indistinguishable."""


class InvalidActivationTokenError(MemberServiceError):
    """Activation token malformed, unknown or expired."""
