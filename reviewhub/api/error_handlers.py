"""Error Handlers — global exception handlers for the ReviewHub API.

Invariants:
    - ReviewHubError → structured JSON with error code, message, severity
    - RequestValidationError → 400 with field-level details
    - Critical errors (storage) and unhandled exceptions never leak internal details

Design Decisions:
    - Three-layer handler: domain (ReviewHubError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py to keep the app module small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from reviewhub.core.errors import ReviewHubError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_reviewhub_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_reviewhub_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(ReviewHubError)
    async def reviewhub_error_handler(request: Request, exc: ReviewHubError):
        """Handle all ReviewHub domain/infrastructure errors."""
        if exc.severity == ErrorSeverity.CRITICAL:
            logger.error(
                f"ReviewHubError: {exc.message}",
                extra={"error_code": exc.code, "path": request.url.path},
            )
            return JSONResponse(
                status_code=exc.http_status,
                content=_build_internal_error_response(exc.code),
            )
        logger.warning(
            f"ReviewHubError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_build_internal_error_response("INTERNAL_ERROR"),
        )


def _build_internal_error_response(code: str) -> dict:
    return {
        "error": {
            "code": code,
            "message": "An unexpected error occurred",
            "category": ErrorCategory.INTERNAL.value,
            "severity": ErrorSeverity.CRITICAL.value,
        },
    }


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
