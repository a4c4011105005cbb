"""
Habit Tracker Backend - FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn habit_tracker.main:app) or `python -m habit_tracker`.
When:  Once at server startup; the returned app handles all later requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ Logging  │→│  CORS           │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌──────────────────────┐  │
    │  │ /habits (CRUD)       │ │ / and /health        │  │
    │  └──────────────────────┘ └──────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Storage→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the data directory, log the paths
    Shutdown: log shutdown (nothing is held open between requests)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from habit_tracker import __version__
from habit_tracker.config import settings
from habit_tracker.exceptions import (
    CorruptDataError,
    HabitTrackerError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from habit_tracker.middleware.logging import RequestLoggingMiddleware
from habit_tracker.middleware.request_id import RequestIDMiddleware, request_id_var
from habit_tracker.routes import habits, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Level:  settings.log_level
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # Our own access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Habit Tracker Backend %s starting up...", __version__)

    data_file = Path(settings.data_file)
    data_file.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Habit document: %s", data_file.resolve())

    logger.info(
        "Daily Habit Tracker API running at http://%s:%d",
        settings.backend_host,
        settings.backend_port,
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Habit Tracker Backend shut down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Every failure leaves the API in this one shape (see ErrorResponse)."""
    return JSONResponse(
        status_code=status,
        content={
            "error": error,
            "status": status,
            "message": message,
            "details": details or None,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the error body.

    Handler table:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (body/path failed the schema)
        NotFoundError           → 404 Not Found
        StorageIOError          → 500 (generic message, details logged)
        CorruptDataError        → 500 (generic message, details logged)
        HabitTrackerError       → 500 (catch-all for custom errors)
        Exception               → 500 (unexpected errors, traceback logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.error_code, exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request: %s", request_id_var.get(""), errors)
        return _error_response(
            400, "validation_error", "Request is invalid", {"errors": errors}
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.error_code, exc.message, exc.context)

    @app.exception_handler(StorageIOError)
    async def handle_storage_error(request: Request, exc: StorageIOError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, exc.error_code, exc.message)

    @app.exception_handler(CorruptDataError)
    async def handle_corrupt_data(request: Request, exc: CorruptDataError):
        logger.error(
            "[%s] Corrupt habit data: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, exc.error_code, exc.message)

    @app.exception_handler(HabitTrackerError)
    async def handle_app_error(request: Request, exc: HabitTrackerError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        details = exc.context if exc.is_client_error else None
        return _error_response(exc.status_code, exc.error_code, exc.message, details)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(500, "internal_server_error", "Internal Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Daily Habit Tracker API",
        description=(
            "Track habits with nested sub-habits, completion flags and streaks. "
            "All habits are stored together in a single JSON document."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(habits.router)
    app.include_router(health.router)

    return app


# uvicorn expects `habit_tracker.main:app` to be importable
app = create_app()
