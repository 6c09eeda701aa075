"""
Survey Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       mapping and connection lifecycle in one place.
How:   Factory pattern: create_app(settings) returns a configured FastAPI
       instance. Tests build their own app with their own settings.
Who:   app.server.run() for production; `uvicorn app.main:app` also works.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌────────┐   │
    │  │  Req ID  │→│  Logging    │→│ GZip │→│  CORS  │   │
    │  └──────────┘ └─────────────┘ └──────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────┐ ┌──────────────┐ ┌───────────────┐  │
    │  │ /api/health│ │/api/respuestas│ │/api/login ... │  │
    │  └────────────┘ └──────────────┘ └───────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ 400 │ 401 │ 403 │ 404 │ 409 │ 500 (policy)   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  open the Database, create tables, build the gateway
    Shutdown: dispose the pool (uvicorn has already closed the socket)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database, PersistenceGateway
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClientValidationError,
    ConflictError,
    FatalStartupError,
    NotFoundError,
    PersistenceError,
    SurveyAppError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import admin, frontend, health, surveys
from app.schemas.common import field_errors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] app.services.survey_service: Survey stored: ...

    Called by the server entrypoint before anything else, and again by the
    lifespan so `uvicorn app.main:app` gets the same format.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Error Detail Policy
# ══════════════════════════════════════════════════════════════════════════

class ErrorDetailPolicy:
    """
    Decides how much of an internal failure a 500 response may reveal.

    Outside production the root cause message is returned as `details` to
    help debugging. In production a fixed generic message is returned and
    the real error only goes to the server log. Every 500 handler asks this
    object; nothing else decides.
    """

    GENERIC_MESSAGE = "Error interno del servidor"

    def __init__(self, expose_details: bool):
        self.expose_details = expose_details

    @classmethod
    def for_settings(cls, settings: Settings) -> "ErrorDetailPolicy":
        return cls(expose_details=not settings.is_production)

    def details_for(self, exc: BaseException) -> str:
        if not self.expose_details:
            return self.GENERIC_MESSAGE
        root = exc
        while root.__cause__ is not None:
            root = root.__cause__
        return str(root) or type(root).__name__


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the persistence connection on startup, close it on shutdown.

    Startup failures raise FatalStartupError, which aborts uvicorn's startup;
    the server entrypoint then exits with code 1. A failure while closing is
    logged and recorded on app.state.shutdown_failed for the same reason.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Survey backend starting up (environment=%s)", settings.environment)

    try:
        database = Database.from_settings(settings)
        await database.connect()
    except FatalStartupError as e:
        logger.critical("Startup aborted: %s", e.message)
        raise

    app.state.database = database
    app.state.gateway = PersistenceGateway(database)
    app.state.shutdown_failed = False

    logger.info("Server ready on %s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Survey backend shutting down...")
    try:
        await database.disconnect()
    except Exception:
        app.state.shutdown_failed = True
        logger.exception("Error while closing the database connection")
    else:
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, policy: ErrorDetailPolicy) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ClientValidationError   → 400 (flat message, or per-field details)
        RequestValidationError  → 400 (malformed body, per-field details)
        AuthenticationError     → 401
        AuthorizationError      → 403
        NotFoundError           → 404
        ConflictError           → 409 (details.field names the collision)
        PersistenceError        → 500 (details per ErrorDetailPolicy)
        SurveyAppError (base)   → 500
        Exception (fallback)    → 500, logged with stack trace
    """

    def error_body(error: str, message: str, details=None) -> dict:
        body = {"error": error, "message": message, "request_id": request_id_var.get("")}
        if details is not None:
            body["details"] = details
        return body

    @app.exception_handler(ClientValidationError)
    async def handle_client_validation(request: Request, exc: ClientValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = field_errors(exc.errors())
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), details)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Error de validación", details),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=error_body("invalid_credentials", exc.message),
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization(request: Request, exc: AuthorizationError):
        return JSONResponse(
            status_code=403,
            content=error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body("not_found", exc.message),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=409,
            content=error_body("conflict", exc.message, {"field": exc.field}),
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Persistence error: %s | Context: %s | Cause: %r",
            rid, exc.message, exc.context, exc.__cause__,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message, policy.details_for(exc)),
        )

    @app.exception_handler(SurveyAppError)
    async def handle_app_error(request: Request, exc: SurveyAppError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message, policy.details_for(exc)),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        The process keeps serving; the stack trace goes to the log only.
        """
        logger.error(
            "[%s] Unexpected error on %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                ErrorDetailPolicy.GENERIC_MESSAGE,
                policy.details_for(exc),
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration for this instance; defaults to the values
                  read from the environment.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Survey Backend API",
        description=(
            "Collects market security survey responses, reports simple counts "
            "and provides admin login/registration."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, ErrorDetailPolicy.for_settings(settings))

    # ── Register Routes ───────────────────────────────────────────────────
    # frontend.router holds the catch-alls and must stay last
    app.include_router(health.router)
    app.include_router(surveys.router)
    app.include_router(admin.router)
    app.include_router(frontend.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()
