"""Request identity: either nobody or a resolved member."""

from __future__ import annotations

from dataclasses import dataclass

from dishes_api.database.repositories.members import Member


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No credential was presented."""


@dataclass(frozen=True, slots=True)
class Authenticated:
    """A valid authentication token resolved to ``member``."""

    member: Member


Identity = Anonymous | Authenticated

ANONYMOUS = Anonymous()
