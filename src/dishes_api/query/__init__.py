"""List query compilation (filtering, sorting, pagination)."""

from dishes_api.query.filters import (
    FilterValidationError,
    Metadata,
    PageQuery,
    SortDirection,
    SortOrder,
    calculate_metadata,
    compile_filters,
)


__all__ = [
    "FilterValidationError",
    "Metadata",
    "PageQuery",
    "SortDirection",
    "SortOrder",
    "calculate_metadata",
    "compile_filters",
]
