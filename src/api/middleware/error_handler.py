"""Global error handling middleware for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

PROFILE_WRITE_FAILED_MESSAGE = "Your role/profile could not be updated, please try again"


class APIError(Exception):
    """Base exception for API errors.

    Use this class to raise application-specific errors that should
    be returned to the client with a specific status code and message.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code to return.
            error_type: Error category/type for client handling.
            details: Optional additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class ValidationError(APIError):
    """Request validation error.

    Missing required input is a 400; schema-level problems stay 422.
    """

    def __init__(
        self,
        message: str = "Validation error",
        details: list[dict[str, Any]] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type="validation_error",
            details=details,
        )


class AuthenticationError(APIError):
    """Authentication failure error."""

    def __init__(self, message: str = "Not authenticated", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_type="authentication_error",
            details=details,
        )


class AuthorizationError(APIError):
    """Authorization failure error."""

    def __init__(self, message: str = "Access denied", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type="authorization_error",
            details=details,
        )


class CollaboratorError(APIError):
    """A backing store failed for a reason other than "not found"."""

    def __init__(self, message: str = "Backing store unavailable", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="collaborator_error",
            details=details,
        )


class ProfileWriteError(APIError):
    """The profile row insert/update was rejected.

    The client only ever sees the generic retry message; the store's own
    error text travels in ``cause`` for logging.
    """

    def __init__(self, cause: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=PROFILE_WRITE_FAILED_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="profile_write_failed",
            details=details,
        )
        self.cause = cause


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        details: Optional error details.
        request_id: Optional request ID for tracing.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


def _api_error_response(e: APIError, request_id: str | None) -> JSONResponse:
    logger.warning(
        "API error: %s - %s",
        e.error_type,
        e.message,
        extra={"request_id": request_id, "status_code": e.status_code},
    )
    return create_error_response(
        error_type=e.error_type,
        message=e.message,
        status_code=e.status_code,
        details=e.details,
        request_id=request_id,
    )


def _http_error_response(e: StarletteHTTPException, request_id: str | None) -> JSONResponse:
    logger.warning(
        "HTTP exception: %s - %s",
        e.status_code,
        e.detail,
        extra={"request_id": request_id},
    )
    response = create_error_response(
        error_type="http_error",
        message=str(e.detail),
        status_code=e.status_code,
        request_id=request_id,
    )
    if e.headers:
        response.headers.update(e.headers)
    return response


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Ensures consistent error response format across the application.
    Logs full stack traces for debugging while returning safe messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        response = await call_next(request)
        return response

    except APIError as e:
        return _api_error_response(e, request_id)

    except HTTPException as e:
        return _http_error_response(e, request_id)

    except Exception as e:
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )


def register_exception_handlers(app: FastAPI) -> None:
    """Format errors raised by routes and dependencies the same way as the middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
        return _api_error_response(exc, request.headers.get("X-Request-ID"))

    # Starlette raises its own HTTPException for unknown routes and methods
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _http_error_response(exc, request.headers.get("X-Request-ID"))
