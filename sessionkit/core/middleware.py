from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sessionkit.core.exceptions import ServerError, SessionKitError, ValidationError
from sessionkit.core.logging import get_logger
from sessionkit.schemas.responses import ErrorResponse

logger = get_logger(__name__)


def _error_response(exc: SessionKitError) -> JSONResponse:
    body = ErrorResponse(error_code=exc.error_code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def sessionkit_exception_handler(request: Request, exc: SessionKitError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed",
        error_code=exc.error_code,
        message=exc.message,
        detail=exc.detail,
        path=request.url.path,
    )
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("request_payload_invalid", errors=exc.errors(), path=request.url.path)
    return _error_response(ValidationError(message="Invalid request payload"))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    return _error_response(ServerError(message="Internal server error"))
