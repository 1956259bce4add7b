"""
API error taxonomy and its mapping to HTTP responses.

Every failure that reaches a client is one of three kinds, each with a fixed
status code and message. Internal details (SQL errors, tracebacks) are only
ever logged, never returned.
"""

import logging
from enum import Enum
from typing import Any, Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .models import ErrorResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    INTERNAL_SERVER_ERROR = "internal_server_error"


_RESPONSES: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.BAD_REQUEST: (400, "Bad Request"),
    ErrorKind.NOT_FOUND: (404, "Not Found"),
    ErrorKind.INTERNAL_SERVER_ERROR: (500, "Internal Server Error"),
}


class ApiError(Exception):
    """Raised by the repository to abort a request with a given error kind."""

    def __init__(self, kind: ErrorKind):
        super().__init__(kind.value)
        self.kind = kind


def error_response(kind: ErrorKind) -> Tuple[int, Dict[str, Any]]:
    """Return the (status code, JSON body) pair for an error kind."""
    status_code, message = _RESPONSES[kind]
    return status_code, {"error": message}


def to_json_response(kind: ErrorKind) -> JSONResponse:
    status_code, body = error_response(kind)
    return JSONResponse(status_code=status_code, content=body)


# OpenAPI "responses" entries for route decorators
OPENAPI_ERRORS: Dict[int, Dict[str, Any]] = {
    status_code: {"model": ErrorResponse, "description": message}
    for status_code, message in _RESPONSES.values()
}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return to_json_response(exc.kind)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and unparsable path parameters are caller errors."""
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return to_json_response(ErrorKind.BAD_REQUEST)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return to_json_response(ErrorKind.INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
