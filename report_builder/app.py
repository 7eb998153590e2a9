"""FastAPI application factory for the report builder service."""

import logging
import os
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from report_builder import __version__
from report_builder.core.config import Settings, get_settings
from report_builder.core.database import create_db_engine, create_session_factory, init_db
from report_builder.core.router import register_routes
from report_builder.logging.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
)
from report_builder.logging.middleware import LoggingMiddleware
from report_builder.metadata.resolver import TableColumnCache

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, session_factory: Optional[sessionmaker] = None) -> FastAPI:
    """Build the API. Settings and the session factory default to the environment's."""
    settings = settings or get_settings()
    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(settings.database_url))

    app = FastAPI(
        title="Report Builder",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.column_cache = TableColumnCache()

    init_db(session_factory.kw["bind"], session_factory, seed_sample_data=settings.seed_sample_data)

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware)

    # Response validation errors are not seen by the middleware
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers go before the catch-all route
    register_routes(app)
    _mount_frontend(app, settings.static_dir)

    return app


def _mount_frontend(app: FastAPI, static_dir: str) -> None:
    """Serve the built frontend, if there is one, with index.html as the SPA fallback."""
    index_file = os.path.join(static_dir, "index.html")
    if not os.path.isfile(index_file):
        logger.info("No frontend build found in %s; serving the API only", static_dir)
        return

    assets_dir = os.path.join(static_dir, "assets")
    if os.path.isdir(assets_dir):
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    # MUST be registered last
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(request: Request, full_path: str) -> Any:
        # Unknown API routes return 404 instead of the frontend
        if full_path.startswith("api"):
            raise HTTPException(status_code=404, detail="API endpoint not found")
        if full_path.startswith("assets/"):
            raise HTTPException(status_code=404, detail="Asset not found")
        return FileResponse(index_file)
