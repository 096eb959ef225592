"""PoR Gate API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery: ExMA anti-pattern)
    - Global error handlers map PorGateError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and the shared feed HTTP client initialized on startup via lifespan
    - Feed HTTP client closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Feed factory stored on app.state and resolved through a dependency,
      so tests swap it with dependency_overrides
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from porgate.api.error_handlers import register_error_handlers
from porgate.api.routes import gates, health, issuance
from porgate.config import get_settings
from porgate.infrastructure.database import close_db, init_db
from porgate.infrastructure.feed_client import HttpFeedAdapterFactory
from porgate.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    async with httpx.AsyncClient(
        timeout=settings.feed_timeout_seconds,
        headers={"Accept": "application/json"},
    ) as client:
        app.state.feed_factory = HttpFeedAdapterFactory(
            client,
            max_retries=settings.feed_max_retries,
            base_delay_ms=settings.feed_base_delay_ms,
            max_delay_ms=settings.feed_max_delay_ms,
        )
        logger.info("PoR Gate API started")
        yield
    await close_db()
    logger.info("PoR Gate API shutting down")


app = FastAPI(
    title="PoR Gate API", version="1.0.0", lifespan=lifespan,
)

# CORS: configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(gates.router)
app.include_router(issuance.router)

register_error_handlers(app)
