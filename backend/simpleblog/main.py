"""
SimpleBlog Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the engine, session factory, upload service and
       templates, stores them on app.state, registers middleware, exception
       handlers, routes and the static mount.
Who:   uvicorn (`simpleblog.main:app`), `python -m simpleblog serve`, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────┐ ┌──────────┐ ┌─────┐ ┌──────┐ ┌───────┐ │
    │  │ Req ID │→│ _method  │→│ Log │→│ GZip │→│Session│ │
    │  └────────┘ └──────────┘ └─────┘ └──────┘ └───────┘ │
    │                                                     │
    │  Routes:                                            │
    │  /, /posts/*, /health, [/seeds], static "/"         │
    │                                                     │
    │  Exception Handlers (HTML):                         │
    │  NotFound→404 │ Validation→400 │ Store→503 │ →500   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate security-sensitive settings (logged, not fatal)
    3. Ensure the public and images directories exist
    4. Ping the store with retries (logged, not fatal)

    Shutdown (after uvicorn stops accepting connections and in-flight
    requests have finished):
    1. Dispose the engine (close the store connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from simpleblog import __version__
from simpleblog.config import Settings, settings as default_settings
from simpleblog.database import (
    create_engine,
    create_session_factory,
    describe_url,
    dispose_engine,
    ping_with_retry,
)
from simpleblog.exceptions import (
    InvalidIdentifier,
    NotFoundError,
    StoreError,
    UploadError,
    ValidationError,
)
from simpleblog.middleware.logging import RequestLoggingMiddleware
from simpleblog.middleware.method_override import MethodOverrideMiddleware
from simpleblog.middleware.request_id import RequestIDMiddleware, request_id_var
from simpleblog.routes import health, posts, seeds
from simpleblog.services.upload_service import UploadService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2021-08-14T06:02:52 [INFO] simpleblog.access: GET / 200 3.1ms ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level == "DEBUG" else logging.WARNING
    )
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Template Helpers
# ══════════════════════════════════════════════════════════════════════════

def display_date(value: Optional[datetime]) -> str:
    """Format as "August 14, 2021" for post bylines."""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def datetime_local(value: Optional[datetime]) -> str:
    """
    Value for <input type="datetime-local" step="0.001">, in UTC.

    Keeps seconds and milliseconds so an edit form saved unchanged
    resubmits the stored instant.
    """
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds")


def create_templates(templates_dir: str) -> Jinja2Templates:
    templates = Jinja2Templates(directory=templates_dir)
    templates.env.filters["display_date"] = display_date
    templates.env.filters["datetime_local"] = datetime_local
    return templates


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown of the process-wide resources on app.state.

    uvicorn runs the shutdown half only after it has closed the listening
    socket and drained in-flight requests, so no handler can reach a
    disposed engine.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("SimpleBlog %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    Path(app_settings.public_root).mkdir(parents=True, exist_ok=True)
    app_settings.images_root.mkdir(parents=True, exist_ok=True)
    logger.info("Public root: %s", Path(app_settings.public_root).resolve())

    store_url = describe_url(app_settings.database_url)
    if await ping_with_retry(app.state.engine, app_settings):
        logger.info("Store connected: %s", store_url)
    else:
        logger.error("Starting without a store connection; requests will retry it.")

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SimpleBlog is exiting...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def render_error(request: Request, template: str, status_code: int, message: str):
    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        template,
        {"message": message, "request_id": request_id_var.get("")},
        status_code=status_code,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto rendered HTML pages.

        InvalidIdentifier → 404 not_found.html  (an id that cannot resolve)
        NotFoundError     → 404 not_found.html
        ValidationError   → 400 error.html
        StoreError        → 503 error.html      (generic message)
        UploadError       → 500 error.html
        Exception         → 500 error.html      (traceback logged)

    Pages never include driver errors, SQL or file system paths; those are
    logged with the request id.
    """

    @app.exception_handler(InvalidIdentifier)
    async def handle_invalid_identifier(request: Request, exc: InvalidIdentifier):
        logger.warning("[%s] Invalid post id: %s", request_id_var.get(""), exc.raw_id)
        return render_error(request, "not_found.html", 404, "That post does not exist.")

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return render_error(request, "not_found.html", 404, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return render_error(request, "error.html", 400, exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] Store error: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.context,
        )
        return render_error(request, "error.html", 503, exc.message)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        logger.error(
            "[%s] Upload error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return render_error(request, "error.html", 500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return render_error(
            request,
            "error.html",
            500,
            "An unexpected error occurred. Please try again.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Configuration to build against. Defaults to the
                      environment-loaded singleton; tests pass their own.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="SimpleBlog",
        description="A minimal server-rendered blog.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # ── Process-wide resources ────────────────────────────────────────────
    engine = create_engine(app_settings)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.upload_service = UploadService(app_settings)
    app.state.templates = create_templates(app_settings.templates_dir)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(SessionMiddleware, secret_key=app_settings.session_secret)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(MethodOverrideMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(posts.router)
    app.include_router(health.router)
    if app_settings.seed_route_enabled:
        app.include_router(seeds.router)
        logger.warning("Development seed route /seeds is enabled")

    # Static assets last: the "/" mount matches every path, so the routes
    # above must be tried first.
    Path(app_settings.public_root).mkdir(parents=True, exist_ok=True)
    app.mount("/", StaticFiles(directory=app_settings.public_root), name="public")

    return app


app = create_app()
