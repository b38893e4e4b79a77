"""
Shareable URLs Backend - FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       wired to a record store (built from settings unless one is injected).
Who:   Called by uvicorn to start the server (uvicorn shareable_urls.main:app)
       and by the test-suite with an in-memory store.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │  Req ID  │→│  Logging     │→│  CORS headers   │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────┐ ┌───────────┐ ┌───────┐  │
    │  │ /health  │ │ POST /   │ │ /metadata │ │ /{key}│  │
    │  └──────────┘ └──────────┘ └───────────┘ └───────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ BadRequest→400 │ NotFound→404 │ Method→405    │  │
    │  │ Duplicate→400  │ Store→500    │ other→500     │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, optionally create the kv table, log ready
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shareable_urls import __version__
from shareable_urls.config import settings
from shareable_urls.database import create_tables, dispose_engine
from shareable_urls.exceptions import (
    BadRequestBody,
    DuplicateContent,
    InvalidIdentifier,
    MethodNotAllowedError,
    NotFoundError,
    ShareableURLError,
    StoreError,
)
from shareable_urls.middleware.cors_headers import CORSHeadersMiddleware, cors_headers
from shareable_urls.middleware.logging import RequestLoggingMiddleware
from shareable_urls.middleware.request_id import RequestIDMiddleware, request_id_var
from shareable_urls.routes import health, records
from shareable_urls.store import RecordStore, SQLRecordStore, build_record_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    What:    Root logger with a timestamped single-line format on stdout.
    When:    Called once during app startup (before any other initialization).

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party libraries that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Startup sequence:
        1. Setup logging
        2. Create the kv_entries table when DB_CREATE_TABLES is set
        3. Log successful startup

    Shutdown sequence:
        1. Dispose database engine (close all pooled connections)
        2. Log shutdown
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Shareable URLs Backend starting up...")

    store: RecordStore = app.state.record_store
    logger.info("Record store: %s", store.backend_name)

    if isinstance(store, SQLRecordStore) and settings.db_create_tables:
        await create_tables()
        logger.info("kv_entries table ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shareable URLs Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        BadRequestBody          → 400 {"error": message}
        InvalidIdentifier       → 400 {"error": message}
        DuplicateContent        → 400 {"error": message, "existing-document": key}
        NotFoundError           → 404 {"error": message}
        MethodNotAllowedError   → 405 {"error": message}
        StoreError              → 500 generic message, context logged
        ShareableURLError       → 500 catch-all for custom errors
        Exception (fallback)    → 500 generic message, stack trace logged

    Client error bodies carry exactly the `error` field (plus
    `existing-document`); the request ID travels in the X-Request-ID header.
    """

    @app.exception_handler(BadRequestBody)
    @app.exception_handler(InvalidIdentifier)
    async def handle_bad_request(request: Request, exc: ShareableURLError):
        """Client sent a body or identifier we cannot accept."""
        rid = request_id_var.get("")
        logger.warning("[%s] Bad request: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(DuplicateContent)
    async def handle_duplicate_content(request: Request, exc: DuplicateContent):
        """Content hash already claimed; point the client at the owning record."""
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.message,
                "existing-document": exc.existing_document,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        """Requested record doesn't exist."""
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        """Verb has no branch for this path."""
        return JSONResponse(status_code=405, content={"error": exc.message})

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        """Record store failed; generic message to user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(ShareableURLError)
    async def handle_application_error(request: Request, exc: ShareableURLError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Security: Stack trace is logged server-side ONLY (never in response).

        Starlette runs this handler in ServerErrorMiddleware, outside the user
        middleware stack, so the CORS header table is stamped here directly.
        """
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred."},
            headers=cors_headers(settings.cors_allow_origin, settings.cors_max_age),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(store: Optional[RecordStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Record store to serve from. Defaults to the one selected by
               STORE_BACKEND; tests pass an InMemoryRecordStore.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Shareable URLs API",
        description=(
            "Create, read and update shareable URL records with content-hash "
            "deduplication and per-record view counting."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.record_store = store if store is not None else build_record_store(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS headers → routes
    app.add_middleware(
        CORSHeadersMiddleware,
        allow_origin=settings.cors_allow_origin,
        max_age=settings.cors_max_age,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # health first: the record router ends in a /{key:path} catch-all
    app.include_router(health.router)
    app.include_router(records.router)

    return app


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "shareable_urls.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `shareable_urls.main:app` to be importable
app = create_app()
