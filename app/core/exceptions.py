from typing import Any

from fastapi import Request, status
from fastapi.responses import ORJSONResponse


class AppError(Exception):
    """Base application error with consistent schema.

    ``field`` is the response key that carries the message: order creation
    reports under ``error``, payment verification under ``message``.
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Any = None,
        field: str = "error",
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.field = field
        super().__init__(message)


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid request", details: Any = None, field: str = "error"):
        super().__init__(
            message, code="VALIDATION_ERROR", status_code=status.HTTP_400_BAD_REQUEST, details=details, field=field
        )


class AuthenticityError(AppError):
    def __init__(self, message: str = "Signature verification failed", field: str = "message"):
        super().__init__(message, code="AUTHENTICITY_ERROR", status_code=status.HTTP_400_BAD_REQUEST, field=field)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found", field: str = "error"):
        super().__init__(message, code="NOT_FOUND", status_code=status.HTTP_404_NOT_FOUND, field=field)


class UpstreamError(AppError):
    def __init__(self, message: str = "Upstream service failed", details: Any = None, code: str | None = None):
        super().__init__(message, code=code or "UPSTREAM_ERROR", details=details)


class PersistenceError(AppError):
    def __init__(self, message: str = "Failed to persist changes", details: Any = None, field: str = "error"):
        super().__init__(message, code="PERSISTENCE_ERROR", details=details, field=field)


class ConfigurationError(AppError):
    def __init__(self, message: str = "Server configuration error", field: str = "error"):
        super().__init__(message, code="CONFIGURATION_ERROR", field=field)


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body: dict[str, Any] = {"success": False, exc.field: exc.message, "code": exc.code}
    if exc.details:
        body["details"] = exc.details
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(status_code=exc.status_code, content=body)


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    return error_response(request, exc)


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    from app.core.logging import get_logger
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    body = {
        "success": False,
        "error": "Internal server error",
        "code": "INTERNAL_ERROR",
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body,
    )
