"""Application exceptions and FastAPI exception handlers.

Every error response has the same shape::

    {"error": "<CODE>", "message": "...", "details": [...], "request_id": "..."}

Layer exceptions (``dishes_api.database.exceptions``,
``dishes_api.auth.exceptions``) are translated into ``AppError`` subclasses at
the API seam. Store failures that escape a handler are still mapped here so
they surface as 503/504 rather than a generic 500.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from dishes_api.database.exceptions import StoreTimeoutError, StoreUnavailableError
from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class ErrorDetail(BaseModel):
    """Field-level error detail."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Structured error response body."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    request_id: str | None = None


class AppError(Exception):
    """Base application exception carrying its HTTP rendering."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message)


class ValidationFailedError(AppError):
    """Input failed validation; one detail per offending field."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error="VALIDATION_ERROR",
            message="Request validation failed",
            details=[
                ErrorDetail(code="VALIDATION_ERROR", message=message, field=field)
                for field, message in errors.items()
            ],
        )


class DuplicateIdentityError(AppError):
    """A unique member attribute is already taken."""

    def __init__(
        self,
        field: str = "email",
        message: str = "a member with this email address already exists",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error="VALIDATION_ERROR",
            message="Request validation failed",
            details=[ErrorDetail(code="DUPLICATE_EMAIL", message=message, field=field)],
        )


class InvalidCredentialError(AppError):
    """Bearer token is malformed, unknown, expired or of the wrong scope.

    The message is deliberately identical for every cause.
    """

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="INVALID_CREDENTIAL",
            message="invalid or missing authentication token",
            headers=_BEARER_CHALLENGE,
        )


class InvalidCredentialsError(AppError):
    """Email/password pair did not match a member."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="INVALID_CREDENTIALS",
            message="invalid authentication credentials",
        )


class AuthenticationRequiredError(AppError):
    """Route needs an authenticated member and none was presented."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="AUTHENTICATION_REQUIRED",
            message="you must be authenticated to access this resource",
            headers=_BEARER_CHALLENGE,
        )


class InactiveAccountError(AppError):
    """Member exists but has not been activated yet."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="INACTIVE_ACCOUNT",
            message="your member account must be activated to access this resource",
        )


class NotPermittedError(AppError):
    """Activated member lacks the permission code the route requires."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="NOT_PERMITTED",
            message="your member account doesn't have the necessary permissions "
            "to access this resource",
        )


class ConflictError(AppError):
    """Optimistic-concurrency conflict; the client must re-fetch and retry."""

    def __init__(
        self,
        message: str = "unable to update the record due to an edit conflict, "
        "please try again",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="EDIT_CONFLICT",
            message=message,
        )


class NotFoundError(AppError):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: Any) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="NOT_FOUND",
            message=f"{resource} with identifier '{identifier}' not found",
        )


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state."""
    return getattr(request.state, "request_id", None)


def _render(
    request: Request,
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    body.request_id = _get_request_id(request)
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> ORJSONResponse:
        return _render(
            request,
            exc.status_code,
            ErrorResponse(error=exc.error, message=exc.message, details=exc.details),
            exc.headers,
        )

    @app.exception_handler(StoreTimeoutError)
    async def store_timeout_handler(
        request: Request,
        exc: StoreTimeoutError,
    ) -> ORJSONResponse:
        logger.error("Store operation timed out", operation=exc.operation)
        return _render(
            request,
            status.HTTP_504_GATEWAY_TIMEOUT,
            ErrorResponse(
                error="STORE_TIMEOUT",
                message="the data store did not respond in time",
            ),
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(
        request: Request,
        exc: StoreUnavailableError,
    ) -> ORJSONResponse:
        logger.error(
            "Store unavailable", operation=exc.operation, reason=exc.reason
        )
        return _render(
            request,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorResponse(
                error="STORE_UNAVAILABLE",
                message="the data store is temporarily unavailable",
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        return _render(
            request,
            exc.status_code,
            ErrorResponse(error="HTTP_ERROR", message=str(exc.detail)),
            getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=error["msg"],
                field=".".join(str(loc) for loc in error["loc"]),
            )
            for error in exc.errors()
        ]
        return _render(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorResponse(
                error="VALIDATION_ERROR",
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        logger.opt(exception=exc).error("Unhandled exception")
        return _render(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(
                error="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred",
            ),
        )
