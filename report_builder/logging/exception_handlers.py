# report_builder/logging/exception_handlers.py
"""Exception handlers that record failures in the log table and answer with the API envelope."""

import http
import json
import logging
import traceback

from fastapi import Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from report_builder.logging.middleware import resolve_hostname, resolve_username, write_log

logger = logging.getLogger(__name__)

USERNAME = resolve_username()
HOSTNAME = resolve_hostname()


def safe_json_dumps(obj) -> str:
    return json.dumps(obj, indent=2, default=str)


def _request_body(request: Request) -> str:
    # Stored by LoggingMiddleware; request.state is shared across Request objects
    return getattr(request.state, "body", "Request body already consumed")


def _record(request: Request, status_code: int, payload) -> None:
    write_log(
        request,
        status_code=status_code,
        request_body=_request_body(request),
        response_body=safe_json_dumps(payload),
        processing_time=None,
        username=USERNAME,
        hostname=HOSTNAME,
    )


def status_phrase(status_code: int) -> str:
    try:
        return http.HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_response(status_code: int, detail, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "detail": detail},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Log 4xx/5xx HTTP errors and return them in the envelope."""
    headers = getattr(exc, "headers", None)
    if exc.status_code >= 400:
        _record(request, exc.status_code, {"detail": exc.detail, "headers": headers})
    message = exc.detail if isinstance(exc.detail, str) else status_phrase(exc.status_code)
    return error_response(exc.status_code, exc.detail, message, headers=headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    # Convert errors to a JSON-safe structure
    def convert_error(error):
        if isinstance(error, dict):
            return {k: convert_error(v) for k, v in error.items()}
        if isinstance(error, (list, tuple)):
            return [convert_error(item) for item in error]
        if isinstance(error, (int, float, bool)) or error is None:
            return error
        return str(error)

    safe_errors = convert_error(exc.errors())
    _record(request, 422, safe_errors)
    return error_response(422, safe_errors, "Request validation failed.")


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    _record(request, 500, exc.errors())
    message = "Internal Server Error: Response validation failed."
    return error_response(500, message, message)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and log them to the database."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    _record(
        request,
        500,
        {"error": str(exc), "type": type(exc).__name__, "traceback": traceback.format_exc()},
    )
    return error_response(500, "Internal Server Error", "Internal Server Error")
