"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). All error responses share
the {"error", "message", "details"} envelope. Downstream failures reach
the client through these handlers; the query cache never adds its own
errors here (it contains them).
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from querymemo.core.config import get_settings
from querymemo.domain.exceptions import QueryMemoException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status; unknown codes map to 400
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "EXECUTOR_NOT_CONFIGURED": 503,
}


def _error_response(status: int, error: str, message: Any, details: Any = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content)


def _querymemo_exception_handler(
    request: Request, exc: QueryMemoException
) -> JSONResponse:
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    return _error_response(status, exc.error_code, exc.message, exc.details)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return _error_response(
        422, "VALIDATION_ERROR", "Request validation failed", jsonable_encoder(exc.errors())
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(500, "INTERNAL_ERROR", detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: QueryMemoException (and subclasses), RequestValidationError,
    generic Exception.
    """
    app.add_exception_handler(QueryMemoException, _querymemo_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
