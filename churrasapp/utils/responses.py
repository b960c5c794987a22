"""
Standardized response utilities - every JSON body is {data, error, meta}
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from churrasapp.core.errors import ValidationFailed
from churrasapp.schemas.common import Envelope


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def envelope_response(
    data: Any = None,
    error: Any = None,
    status_code: int = status.HTTP_200_OK,
    **meta: Any,
) -> JSONResponse:
    """Build the envelope; ``meta`` always carries a timestamp"""
    body = Envelope(data=data, error=error, meta={"timestamp": _timestamp(), **meta})
    return JSONResponse(content=jsonable_encoder(body.model_dump()), status_code=status_code)


def success_response(data: Any = None, status_code: int = status.HTTP_200_OK, **meta: Any) -> JSONResponse:
    """Create standardized success response"""
    return envelope_response(data=data, status_code=status_code, **meta)


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST, **meta: Any) -> JSONResponse:
    """Create standardized error response"""
    return envelope_response(error=message, status_code=status_code, **meta)


def validation_error(exc: ValidationFailed, **meta: Any) -> JSONResponse:
    """400 naming the first failed field and listing all of them"""
    return error_response(
        exc.message,
        status_code=status.HTTP_400_BAD_REQUEST,
        field=exc.first_field,
        validationErrors=exc.errors,
        **meta,
    )


def not_found_error(message: str = "Evento não encontrado", **meta: Any) -> JSONResponse:
    """Create not found response"""
    return error_response(message, status_code=status.HTTP_404_NOT_FOUND, **meta)


def internal_error(message: str = "Erro interno do servidor", **meta: Any) -> JSONResponse:
    """Generic 500; the cause is only ever logged"""
    return error_response(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, **meta)
