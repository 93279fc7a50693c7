"""Authentication and authorization module.

This module provides:
- bcrypt password hashing
- Scoped, hashed, expiring bearer tokens
- Per-member permission codes
- FastAPI security dependencies (``dishes_api.auth.dependencies``)
"""

from dishes_api.auth.identity import ANONYMOUS, Anonymous, Authenticated, Identity
from dishes_api.auth.passwords import hash_password, verify_password
from dishes_api.auth.permissions import Permission
from dishes_api.auth.tokens import IssuedToken, TokenAuthority, TokenScope


__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "Authenticated",
    "Identity",
    "IssuedToken",
    "Permission",
    "TokenAuthority",
    "TokenScope",
    "hash_password",
    "verify_password",
]
