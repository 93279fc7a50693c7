"""Persistence layer exceptions.

These exceptions are raised by repositories and translated by the API layer
(or the registered exception handlers) into HTTP responses.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base exception for persistence errors."""


class StoreUnavailableError(DatabaseError):
    """The database could not be reached or rejected the connection.

    Attributes:
        operation: Repository operation that failed, e.g. ``members.update``.
        reason: Short description of the underlying failure.
    """

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}" if reason else operation)


class StoreTimeoutError(StoreUnavailableError):
    """A database operation did not finish within the configured timeout."""

    def __init__(self, operation: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(operation, f"timed out after {timeout:g}s")


class RecordNotFoundError(DatabaseError):
    """No row matched the lookup."""


class EditConflictError(DatabaseError):
    """A version-guarded update matched no row.

    Another writer advanced the version since the caller read the record
    (or the record was deleted). The caller must re-fetch and retry.
    """


class DuplicateEmailError(DatabaseError):
    """Insert or update violated the unique constraint on members.email."""


class ReferenceNotFoundError(DatabaseError):
    """A foreign key pointed at a row that does not exist.

    Attributes:
        field: Request field carrying the dangling id, e.g. ``dishId``.
    """

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(field)
