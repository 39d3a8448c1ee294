"""
FastAPI exception handlers for structured error responses.

Maps domain exceptions to appropriate HTTP status codes and formats.
"""

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from rate_limit_fallback.api.models import ErrorResponse
from rate_limit_fallback.fallback.exceptions import SessionNotTrackedError

logger = structlog.get_logger(__name__)


async def session_not_tracked_handler(request: Request, exc: SessionNotTrackedError) -> JSONResponse:
    """
    Handle lookups of sessions without retry state.

    Maps to 404 Not Found.
    """
    error = ErrorResponse(
        error="session_not_tracked",
        message=str(exc),
        details={"session_id": exc.session_id},
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error.model_dump(mode="json"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception(
        "Unexpected error",
        error_type=type(exc).__name__,
    )

    error = ErrorResponse(
        error="internal_error",
        message="An unexpected error occurred",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.model_dump(mode="json"),
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    SessionNotTrackedError: session_not_tracked_handler,
    Exception: generic_error_handler,
}
