"""Filter, sort and paginate engine shared by every list endpoint.

A list request carries ``page``, ``page_size`` and a ``sort`` token. The
token is only ever turned into SQL through ``SortOrder.from_token``, which
checks it against a per-endpoint safelist, so the ``ORDER BY`` clause a
repository interpolates can never contain caller-controlled text.

Example:
    >>> query = compile_filters(2, 20, "-name", frozenset({"id", "name", "-name"}))
    >>> query.order.to_sql()
    'name DESC, id ASC'
    >>> (query.limit, query.offset)
    (20, 20)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
DEFAULT_SORT = "id"

TIEBREAKER_COLUMN = "id"

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


class FilterValidationError(ValueError):
    """One or more list parameters were rejected.

    Attributes:
        errors: Mapping of parameter name to message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))


class SortDirection(StrEnum):
    """SQL sort direction."""

    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class SortOrder:
    """A validated ``(column, direction)`` pair.

    Build instances with ``from_token``; the constructor only re-checks that
    the column is a plain lowercase identifier.
    """

    column: str
    direction: SortDirection

    def __post_init__(self) -> None:
        if not _IDENTIFIER.match(self.column):
            msg = f"not a sortable column: {self.column!r}"
            raise ValueError(msg)

    @classmethod
    def from_token(cls, token: str, safelist: frozenset[str]) -> SortOrder:
        """Parse ``name`` / ``-name`` after checking it against ``safelist``.

        Raises:
            FilterValidationError: ``token`` is not in the safelist.
        """
        if token not in safelist:
            raise FilterValidationError({"sort": "invalid sort value"})
        if token.startswith("-"):
            return cls(token.removeprefix("-"), SortDirection.DESC)
        return cls(token, SortDirection.ASC)

    def to_sql(self) -> str:
        """Render the ordering with the ``id`` tiebreaker appended."""
        return f"{self.column} {self.direction}, {TIEBREAKER_COLUMN} ASC"


@dataclass(frozen=True, slots=True)
class PageQuery:
    """Compiled list parameters ready for a repository."""

    order: SortOrder
    page: int
    page_size: int

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def order_by_clause(self) -> str:
        return f"ORDER BY {self.order.to_sql()}"


class Metadata(BaseModel):
    """Pagination metadata returned next to every list."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def validate_page(page: int, page_size: int) -> dict[str, str]:
    """Return one message per invalid parameter; empty when both are valid."""
    errors: dict[str, str] = {}
    if page <= 0:
        errors["page"] = "must be greater than zero"
    elif page > MAX_PAGE:
        errors["page"] = "must be a maximum of 10 million"
    if page_size <= 0:
        errors["page_size"] = "must be greater than zero"
    elif page_size > MAX_PAGE_SIZE:
        errors["page_size"] = "must be a maximum of 100"
    return errors


def compile_filters(
    page: int,
    page_size: int,
    sort: str,
    safelist: frozenset[str],
) -> PageQuery:
    """Validate list parameters and compile them into a ``PageQuery``.

    All three parameters are checked before raising so the caller sees every
    problem at once.

    Raises:
        FilterValidationError: Keyed by ``page``, ``page_size`` and/or ``sort``.
    """
    errors = validate_page(page, page_size)
    order: SortOrder | None = None
    try:
        order = SortOrder.from_token(sort, safelist)
    except FilterValidationError as exc:
        errors.update(exc.errors)

    if errors or order is None:
        raise FilterValidationError(errors)
    return PageQuery(order=order, page=page, page_size=page_size)


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    """Build pagination metadata; all fields are zero for an empty result."""
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT",
    "MAX_PAGE",
    "MAX_PAGE_SIZE",
    "FilterValidationError",
    "Metadata",
    "PageQuery",
    "SortDirection",
    "SortOrder",
    "calculate_metadata",
    "compile_filters",
    "validate_page",
]
