"""PostgreSQL database layer.

This module provides:
- Connection pool management
- Repository classes for data access
- Health check utilities
"""

from dishes_api.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
    store_operation,
)
from dishes_api.database.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    EditConflictError,
    RecordNotFoundError,
    StoreTimeoutError,
    StoreUnavailableError,
)


__all__ = [
    "DatabaseError",
    "DuplicateEmailError",
    "EditConflictError",
    "RecordNotFoundError",
    "StoreTimeoutError",
    "StoreUnavailableError",
    "check_database_health",
    "close_database_pool",
    "get_database_pool",
    "init_database_pool",
    "store_operation",
]
