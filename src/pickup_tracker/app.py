"""Main FastAPI application module.

This module builds the FastAPI application, owns the database lifecycle and
renders every error as an ``{"error": message}`` body.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pickup_tracker import __version__
from pickup_tracker.api.routes import auth, health, requests, users
from pickup_tracker.config import API_HOST, API_PORT, ServiceSettings
from pickup_tracker.core.database import Database
from pickup_tracker.core.exceptions import PickupTrackerError
from pickup_tracker.core.logging_config import setup_logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store on startup and release it on shutdown."""
    settings: ServiceSettings = app.state.settings
    database = Database(settings.database_url)
    database.init_db()
    app.state.database = database
    logger.info(
        "Pickup tracker started (require_auth=%s, enforce_status_order=%s, "
        "delete_requires_ownership=%s)",
        settings.require_auth,
        settings.enforce_status_order,
        settings.delete_requires_ownership,
    )
    try:
        yield
    finally:
        database.dispose()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PickupTrackerError)
    async def tracker_error_handler(request: Request, exc: PickupTrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, _format_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Store error on %s %s", request.method, request.url.path)
        return _error(500, "Internal error")


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings; read from the environment when omitted.

    Returns:
        The configured application. The database opens when it starts.
    """
    settings = settings or ServiceSettings()

    app = FastAPI(
        title="Pickup Tracker API",
        description="Recycling pickup request tracker.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials="*" not in settings.cors_allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register route handlers
    app.include_router(health.router)
    app.include_router(requests.router)
    if settings.require_auth:
        app.include_router(auth.router)
        app.include_router(users.router)

    return app


app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"Backend running at {server_url}")
    print(f"API docs: {server_url}/docs")
    uvicorn.run("pickup_tracker.app:app", host=API_HOST, port=API_PORT)
