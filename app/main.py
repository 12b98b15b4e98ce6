"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import api_router
from app.config import settings
from app.core.exceptions import InvalidArgument, MarketplaceError
from app.core.logging import setup_logging
from app.core.scheduler import get_scheduler_status, start_scheduler, stop_scheduler
from app.core.security import JWTIdentityProvider
from app.repositories import EntityStore, get_store
from app.schemas.common import failure
from app.services.blob_storage import LocalBlobStore
from app.services.notifier import Notifier, get_notifier
from app.services.workflow import MarketplaceWorkflow

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking (only if DSN is properly configured)
if settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://"):
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=None,  # Capture all logs as breadcrumbs
                event_level="ERROR",  # Only send ERROR and above as events
            ),
        ],
        release=settings.APP_VERSION,
        attach_stacktrace=True,
        send_default_pii=False,
    )
else:
    logger.info("Sentry DSN not configured - error tracking disabled")

_HTTP_ERROR_CODES = {
    401: "unauthenticated",
    403: "permission_denied",
    404: "not_found",
    405: "method_not_allowed",
}


def _first_validation_error(exc: RequestValidationError) -> InvalidArgument:
    """Report only the first failing field."""
    errors = exc.errors()
    if not errors:
        return InvalidArgument()
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[-1] if loc else None
    message = first.get("msg", "Invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return InvalidArgument(f"{field}: {message}" if field else message, field=field)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error in the response envelope."""

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=failure(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = _first_validation_error(exc)
        return JSONResponse(status_code=error.status_code, content=failure(error.code, error.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=failure(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=failure("internal", str(exc) if settings.DEBUG else "An error occurred"),
        )


def create_app(
    store: Optional[EntityStore] = None,
    notifier: Optional[Notifier] = None,
    blob_store: Optional[LocalBlobStore] = None,
    identity_provider=None,
    enable_scheduler: Optional[bool] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators default to the configured implementations; tests pass an
    in-memory store and a recording notifier.
    """
    owns_store = store is None
    store = store or get_store()
    notifier = notifier or get_notifier()
    blob_store = blob_store or LocalBlobStore()
    identity_provider = identity_provider or JWTIdentityProvider()
    enable_scheduler = settings.SCHEDULER_ENABLED if enable_scheduler is None else enable_scheduler

    workflow = MarketplaceWorkflow(store, notifier, blob_store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        if owns_store and settings.STORE_BACKEND == "sql" and settings.DEBUG:
            from app.db.session import init_db

            await init_db()
        if enable_scheduler:
            start_scheduler(workflow)
        yield
        # Shutdown
        if enable_scheduler:
            stop_scheduler()
        if owns_store:
            await store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Academic job marketplace with institution and job moderation",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        swagger_ui_parameters={
            "persistAuthorization": True,
        },
    )

    app.state.store = store
    app.state.workflow = workflow
    app.state.blob_store = blob_store
    app.state.identity_provider = identity_provider

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint."""
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint with scheduler status."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "scheduler": get_scheduler_status(),
        }

    return app


app = create_app()
