"""
unMute Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan sets up logging and disposes the engine on shutdown.
Who:   uvicorn (uvicorn unmute.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Access Log → CORS│
    │                                                          │
    │  Routes:  /auth (+ /api/auth)  /posts  /posts/{id}/comments
    │           /journal  /moodcheckins  /resources  /user     │
    │           /admin  /files  /health                        │
    │                                                          │
    │  Exception handlers → {"status": "error", "error": ...}  │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from unmute import __version__
from unmute.config import settings
from unmute.database import dispose_engine
from unmute.exceptions import RateLimitExceededError, UnmuteError
from unmute.middleware.logging import RequestLoggingMiddleware
from unmute.middleware.rate_limit import RateLimitMiddleware
from unmute.middleware.request_id import RequestIDMiddleware, request_id_var
from unmute.routes import (
    admin,
    auth,
    comments,
    files,
    health,
    journal,
    moodcheckins,
    posts,
    resources,
    users,
)

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An unexpected error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] unmute.access: GET /posts/public 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "passlib", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("unMute backend %s starting up", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report; the operator sees this line
        logger.error("Configuration error: %s", str(e))

    logger.info("Storage directory: %s", settings.storage_root)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("unMute backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"status": "error", "error": message}
    if details:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    Handler hierarchy:
        UnmuteError subclasses   → their status_code; details only for 4xx
        RequestValidationError   → 400 (malformed JSON / wrong types)
        HTTPException            → its status code (404 for unknown routes)
        SQLAlchemyError          → 500, generic message
        Exception (fallback)     → 500, generic message, stack trace logged
    """

    @app.exception_handler(UnmuteError)
    async def handle_unmute_error(request: Request, exc: UnmuteError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return error_response(exc.status_code, exc.message)

        logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        return error_response(exc.status_code, exc.message, exc.context, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        in_body = any(err.get("loc", ("",))[0] == "body" for err in errors)
        return error_response(
            400,
            "Invalid request body" if in_body else "Invalid request parameters",
            {"errors": jsonable_encoder(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(
            exc.status_code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.error("[%s] Database error: %s", request_id_var.get(""), str(exc))
        return error_response(500, "A database error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(500, GENERIC_SERVER_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="unMute API",
        description=(
            "Backend for unMute: community posts, private journals with mood "
            "check-ins, curated resources and admin moderation."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    # The older client build posts to /api/auth/*
    app.include_router(auth.router, prefix="/api")
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(journal.router)
    app.include_router(moodcheckins.router)
    app.include_router(resources.router)
    app.include_router(users.router)
    app.include_router(admin.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
