"""Password hashing with bcrypt.

The plaintext is only ever validated, hashed or verified; callers should
drop their reference to it as soon as one of these returns.
"""

from __future__ import annotations

import functools
import secrets

import bcrypt

from dishes_api.auth.exceptions import PasswordHashingError, PasswordVerificationError


DEFAULT_ROUNDS = 12
MIN_PASSWORD_BYTES = 8
# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def validate_password_plaintext(plaintext: str) -> str | None:
    """Check plaintext length in UTF-8 bytes.

    Returns:
        An error message, or None when the password is acceptable.
    """
    size = len(plaintext.encode("utf-8"))
    if size < MIN_PASSWORD_BYTES:
        return f"must be at least {MIN_PASSWORD_BYTES} bytes long"
    if size > MAX_PASSWORD_BYTES:
        return f"must not be more than {MAX_PASSWORD_BYTES} bytes long"
    return None


def hash_password(plaintext: str, rounds: int = DEFAULT_ROUNDS) -> bytes:
    """Hash ``plaintext`` with a fresh salt.

    Raises:
        PasswordHashingError: The plaintext is over 72 bytes or holds a NUL.
    """
    encoded = plaintext.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        msg = f"password exceeds {MAX_PASSWORD_BYTES} bytes"
        raise PasswordHashingError(msg)
    if b"\x00" in encoded:
        msg = "password contains a NUL byte"
        raise PasswordHashingError(msg)
    try:
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds))
    except ValueError as e:
        raise PasswordHashingError(str(e)) from e


@functools.lru_cache(maxsize=4)
def dummy_digest(rounds: int = DEFAULT_ROUNDS) -> bytes:
    """A bcrypt digest of a random secret at ``rounds`` cost.

    Verifying against it costs as much as verifying a real member's password
    and never matches, so unknown emails take as long as wrong passwords.
    """
    return hash_password(secrets.token_hex(32), rounds)


def verify_password(digest: bytes, plaintext: str) -> bool:
    """Compare ``plaintext`` against a stored digest in constant time.

    Plaintexts bcrypt cannot hash can never have been stored, so they are
    reported as a mismatch.

    Raises:
        PasswordVerificationError: ``digest`` is not a bcrypt hash.
    """
    encoded = plaintext.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES or b"\x00" in encoded:
        return False
    try:
        return bcrypt.checkpw(encoded, digest)
    except ValueError as e:
        raise PasswordVerificationError(str(e)) from e
