"""
Error boundary for the HTTP surface.

Every failure leaves the API in the same JSON shape:

    {statusCode, timestamp, path, method, message, errors?}

`errors` is only present for validation failures and lists one message
per rejected field. Unexpected exceptions are logged with their
traceback and reported as a generic internal error, unless the app runs
in development mode, where the exception message is returned.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config.settings import Settings
from ..core.objects.errors import ObjectServiceError

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = "Internal server error"


def error_envelope(
    request: Request,
    status_code: int,
    message: str,
    errors: Optional[list[str]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


def _format_validation_error(error: dict[str, Any]) -> str:
    # loc is e.g. ("body", "title"); the first element names the source
    location = ".".join(str(part) for part in error.get("loc", ())[1:])
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Install the handlers that render every failure as the envelope."""

    @app.exception_handler(ObjectServiceError)
    async def object_service_error_handler(request: Request, exc: ObjectServiceError):
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": exc.message,
                },
                exc_info=exc,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(request, exc.status_code, exc.message, exc.errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(request, exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [_format_validation_error(error) for error in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_envelope(
                request,
                status.HTTP_400_BAD_REQUEST,
                "Validation failed",
                errors,
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        In production, this prevents internals from leaking to clients.
        We log the full error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        message = str(exc) if settings.is_development and str(exc) else INTERNAL_SERVER_ERROR

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                message,
            ),
        )
