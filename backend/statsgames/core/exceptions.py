"""Application error classes and exception handlers.

Services never raise these across their public boundary: they return them
inside result objects. The HTTP layer raises them so the handlers below can
render a uniform error body.
"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from statsgames.core.logging import get_logger

logger = get_logger(__name__)


def _get_cors_headers(request: Request) -> dict[str, str]:
    """Get CORS headers for error responses."""
    origin = request.headers.get("origin", "")
    # Import here to avoid circular imports
    from statsgames.core.config import get_settings
    settings = get_settings()

    if origin and (origin in settings.cors_origins or "*" in settings.cors_origins):
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS, PATCH",
            "Access-Control-Allow-Headers": "Authorization, Content-Type, X-Request-ID",
        }
    return {}


class AppError(Exception):
    """Base application error."""

    code = "app_error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the error body shape used by the API."""
        return {"message": self.message, "code": self.code, "details": self.details}


class ValidationError(AppError):
    """Missing or blank required input, detected before any I/O."""

    code = "validation_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class UpstreamHTTPError(AppError):
    """Non-2xx response from the upstream stats API."""

    code = "upstream_http_error"

    def __init__(self, status_code: int, message: str, details: Any = None):
        # A 2xx with an unusable body is still a bad gateway for our callers
        http_status = status_code if status_code >= 400 else status.HTTP_502_BAD_GATEWAY
        super().__init__(
            message,
            http_status,
            {"upstream": details} if details is not None else None,
        )
        self.status = status_code
        self.upstream_details = details


class NetworkError(AppError):
    """The upstream request could not complete."""

    code = "network_error"

    def __init__(self, message: str = "Network error"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class NotFoundError(AppError):
    """Resource not found."""

    code = "not_found"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """Uniqueness violation (e.g. game already linked)."""

    code = "duplicate"

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class TokenNotFoundError(NotFoundError):
    """Share token does not exist."""

    code = "token_not_found"

    def __init__(self) -> None:
        super().__init__("Token")


class TokenExpiredError(AppError):
    """Share token exists but is past its expiry."""

    code = "token_expired"

    def __init__(self) -> None:
        super().__init__("Token expired", status.HTTP_410_GONE)


class DatabaseError(AppError):
    """Record store operation error."""

    code = "backend_error"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class CacheError(AppError):
    """Key-value store operation error (non-fatal, logged only)."""

    code = "cache_error"

    def __init__(self, message: str = "Cache operation failed"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors."""
    logger.warning(
        "Application error",
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_dict()},
        headers=_get_cors_headers(request),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.detail,
            }
        },
        headers=_get_cors_headers(request),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(
        "Unhandled exception",
        exc_info=exc,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "message": "An internal error occurred. Please try again later.",
            }
        },
        headers=_get_cors_headers(request),
    )
