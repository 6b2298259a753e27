import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.dal import Database
from .db.migrate import apply_migrations
from .core import errors
from .routers import health, budgets, categories, expenses, rates, analytics
from .services.rates.cache_service import RateCacheService
from .services.rates.providers import make_rate_provider
from .services.tracker import TrackerService

logger = logging.getLogger("expense_tracker")


def build_tracker(settings: Settings) -> TrackerService:
    db = Database(settings.db_path)  # type: ignore[arg-type]
    provider = make_rate_provider(
        settings.exchange_rate_provider,
        base_url=settings.exchange_api_base_url,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        base_currency=settings.base_currency,
    )
    cache = RateCacheService(provider, db=db, ttl_seconds=settings.rates_cache_ttl_seconds)
    tracker = TrackerService(db, cache)
    tracker.load()
    return tracker


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug, service=settings.app_name)

    # Schema is idempotent so test-injected fresh DBs get their tables
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logger.exception("failed to apply migrations on startup")
        raise

    tracker = build_tracker(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.refresh_rates_on_startup:
            # skipped while the cached table is within its ttl
            await asyncio.to_thread(tracker.rates.refresh_if_stale)
        yield

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tracker = tracker

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(expenses.router)
    app.include_router(budgets.router)
    app.include_router(categories.router)
    app.include_router(rates.router)
    app.include_router(analytics.router)

    @app.get("/")
    async def root():
        return {"message": "Expense Tracker API", "version": settings.version}

    return app
