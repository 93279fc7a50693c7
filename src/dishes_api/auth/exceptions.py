"""Authentication layer exceptions."""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for authentication errors."""


class PasswordHashingError(AuthError):
    """The hashing primitive rejected the plaintext (too long, NUL bytes)."""


class PasswordVerificationError(AuthError):
    """A stored digest could not be parsed; mismatches never raise this."""


class TokenNotFoundError(AuthError):
    """No unexpired token of the requested scope matches the plaintext.

    Raised identically for unknown, expired and wrong-scope tokens.
    """
