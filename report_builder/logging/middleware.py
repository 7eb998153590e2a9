# report_builder/logging/middleware.py
"""Request/response logging middleware that stores every API call in the log table."""

import getpass
import json
import logging
import os
import platform
import socket
import time
from typing import Callable

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from report_builder.logging.dao import LogDAO

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = ("/api/logs", "/static", "/assets", "/logs")


def resolve_username() -> str:
    try:
        return os.environ.get("USER") or os.environ.get("USERNAME") or getpass.getuser() or "unknown_user"
    except (KeyError, OSError):
        return "unknown_user"


def resolve_hostname() -> str:
    try:
        return socket.gethostname() or platform.node() or "unknown_host"
    except OSError:
        return "unknown_host"


def request_log_fields(request: Request) -> dict:
    """Columns shared by every log row written for ``request``."""
    return {
        "method": request.method,
        "path": str(request.url.path),
        "client_ip": request.client.host if request.client else None,
        "request_headers": json.dumps(dict(request.headers)),
        "user_agent": request.headers.get("user-agent"),
        "application_id": request.app.state.settings.application_id,
    }


def write_log(request: Request, **fields) -> None:
    """Persist one log row using the session factory of the running app."""
    try:
        with request.app.state.session_factory() as session:
            LogDAO(session).create_log(**request_log_fields(request), **fields)
    except SQLAlchemyError:
        logger.exception("Failed to write request log for %s %s", request.method, request.url.path)


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.username = resolve_username()
        self.hostname = resolve_hostname()
        logger.info("Logging middleware initialized for %s on host %s", self.username, self.hostname)

    async def dispatch(self, request: Request, call_next: Callable):
        if any(request.url.path.startswith(path) for path in EXCLUDED_PATHS):
            return await call_next(request)

        start_time = time.time()

        # The body is cached on the request and replayed to the endpoint
        body_bytes = await request.body()
        request_body = body_bytes.decode("utf-8", errors="ignore")
        request.state.body = request_body

        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        status_code = response.status_code
        content_type = response.headers.get("content-type", "")
        chunks = []

        if hasattr(response, "body_iterator"):
            original_iterator = response.body_iterator

            async def buffer_iterator():
                async for chunk in original_iterator:
                    chunks.append(chunk)
                    yield chunk

            response.body_iterator = buffer_iterator()
        elif getattr(response, "body", None):
            chunks.append(response.body)

        def log_to_db():
            response_body = b"".join(chunks)
            if "text/html" in content_type and status_code < 400:
                body_to_log = "[HTML content not logged for successful response]"
            elif response_body:
                body_to_log = response_body.decode("utf-8", errors="ignore")
            else:
                body_to_log = "[Response body not available]"

            write_log(
                request,
                status_code=status_code,
                request_body=request_body,
                response_body=body_to_log,
                processing_time=duration_ms,
                username=self.username,
                hostname=self.hostname,
            )

        response.background = getattr(response, "background", None) or BackgroundTask(log_to_db)
        return response
