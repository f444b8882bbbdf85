"""
Main entrypoint for the Conference Registration API.

This module assembles the FastAPI application, sets up logging, creates
the shared database handle and file store, and includes versioned
routers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``.  Run it
with uvicorn or another ASGI server, e.g.::

    uvicorn conference_api.app.main:app --reload
"""

import logging
import sqlite3

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.logging_config import setup_logging
from .services.file_store import LocalFileStore


logger = logging.getLogger(__name__)


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    config : Settings | None
        Settings to use instead of the module‑level ``settings``; tests
        pass one pointing at a temporary database.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    config = config or default_settings
    # Initialise logging before anything else so that startup can log.
    setup_logging(config.log_level, config.log_file or None)

    app = FastAPI(title=config.project_name, version=config.api_version, debug=config.debug)

    # One handle per process, shared read‑only by all request handlers.
    app.state.settings = config
    app.state.db = Database.from_settings(config)
    app.state.file_store = LocalFileStore(config.upload_dir)

    app.include_router(v1_router, prefix="/api/v1")

    @app.exception_handler(sqlite3.Error)
    @app.exception_handler(OSError)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # Store and filesystem failures are reported without internal detail.
        logger.error(
            "Unhandled %s during %s %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies migrations.
        app.state.db.init_db()
        logger.info("Database ready at %s", app.state.db.path)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
