"""Permission codes.

Permissions follow the pattern ``resource:action`` and are granted to members
individually through the ``members_permissions`` table.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Collection


class Permission(StrEnum):
    """Application permissions."""

    DISHES_READ = "dishes:read"
    DISHES_WRITE = "dishes:write"


def has_permission(granted: Collection[str], required: Permission | str) -> bool:
    """Check whether ``required`` is among the member's ``granted`` codes."""
    return str(required) in granted
