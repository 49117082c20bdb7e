"""ReviewHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ReviewHubError → structured JSON responses
    - Migrations reach head before the app accepts traffic
    - The connection pool and engine live on app.state for the app's lifetime
      and the pool is disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reviewhub.api.error_handlers import register_error_handlers
from reviewhub.api.middleware import register_middleware
from reviewhub.api.routes import health, team, users, pull_request
from reviewhub.config import Settings, get_settings
from reviewhub.infrastructure.database import create_db_manager
from reviewhub.infrastructure.migrations import run_migrations
from reviewhub.infrastructure.observability import setup_logging
from reviewhub.services.assignment_engine import build_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    if settings.run_migrations:
        await run_migrations(settings.database_url)
    db_manager = create_db_manager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.db_manager = db_manager
    app.state.engine = build_engine(db_manager, settings)
    logger.info("ReviewHub API started")
    try:
        yield
    finally:
        logger.info("ReviewHub API shutting down")
        await db_manager.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="ReviewHub API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middleware(app, settings.request_timeout_seconds)

    app.include_router(health.router)
    app.include_router(team.router)
    app.include_router(users.router)
    app.include_router(pull_request.router)

    register_error_handlers(app)
    return app


app = create_app()
