"""Main FastAPI application module.

This module builds the FastAPI application and registers all route handlers.
The database handle is created here, by the process entry point, and shared
with request handlers through ``app.state``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from api.routes import assignment, auth, class_route, library, parent, user
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.database import Database
from core.exceptions import StoreUnavailableError
from core.logging_config import setup_logging
from utils.session_manager import SessionManager

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        database: Database handle to serve from. Defaults to one built from
            ``DATABASE_URL``.

    Returns:
        Configured FastAPI application.
    """
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init_db()
        db = database.session()
        try:
            SessionManager(db).purge_expired()
        finally:
            db.close()
        yield
        database.dispose()

    app = FastAPI(
        title="LitPlatform API",
        description="Accounts, classes, assignments, reading progress and parent links for LitPlatform.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route handlers
    app.include_router(auth.router)
    app.include_router(user.router)
    app.include_router(class_route.router)
    app.include_router(assignment.router)
    app.include_router(parent.router)
    app.include_router(library.router)

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
        logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Service temporarily unavailable"},
        )

    @app.exception_handler(OperationalError)
    async def operational_error_handler(request: Request, exc: OperationalError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Service temporarily unavailable"},
        )

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """Return API information and documentation links."""
        return {
            "name": "LitPlatform API",
            "version": "1.0.0",
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    setup_logging()
    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Starting LitPlatform API at %s (docs: %s/docs)", server_url, server_url)
    uvicorn.run("app:create_app", factory=True, host=API_HOST, port=API_PORT)
