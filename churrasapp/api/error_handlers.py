"""
Global exception handlers.

Validation and not-found are handled in the route handlers; what reaches
this module is either a request the router could not match or parse, or
an unexpected failure, which is logged and reported generically.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from churrasapp.core.errors import ChurrasError, ValidationFailed
from churrasapp.schemas.common import collect_errors
from churrasapp.utils.responses import error_response, internal_error, validation_error
from churrasapp.utils.security import apply_security_headers

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return error_response(
                "Rota não encontrada",
                status_code=status.HTTP_404_NOT_FOUND,
                path=request.url.path,
                method=request.method,
            )
        return error_response(
            str(exc.detail),
            status_code=exc.status_code,
            path=request.url.path,
            method=request.method,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = collect_errors(exc.errors(), skip=("body", "query", "path"))
        logger.warning("Invalid request on %s: %s", request.url.path, errors)
        return validation_error(ValidationFailed(errors), path=request.url.path)

    @app.exception_handler(ChurrasError)
    async def churras_error_handler(request: Request, exc: ChurrasError):
        logger.error("%s: %s", exc.code, exc.message, extra={"path": request.url.path})
        if isinstance(exc, ValidationFailed):
            return validation_error(exc, path=request.url.path)
        return error_response(exc.message, status_code=exc.http_status, path=request.url.path)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return apply_security_headers(internal_error(path=request.url.path))
