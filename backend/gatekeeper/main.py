"""Gatekeeper API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map GatekeeperError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Settings are read here and nowhere else; components get values via constructors
    - The reaper handle is owned by the lifespan and stopped on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - One shared httpx.AsyncClient for the access-status authority, closed on shutdown
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gatekeeper.api.error_handlers import register_error_handlers
from gatekeeper.api.routes import access, card_registrations, health
from gatekeeper.config import Settings, get_settings
from gatekeeper.infrastructure.access_status_client import AccessStatusClient
from gatekeeper.infrastructure.database import init_db
from gatekeeper.infrastructure.observability import setup_logging
from gatekeeper.services.access_resolver import AccessResolver
from gatekeeper.services.card_binding import SqlResourceBinder
from gatekeeper.services.guest_reaper import GuestLifecycleReaper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    http_client = httpx.AsyncClient()

    app.state.access_resolver = AccessResolver(
        AccessStatusClient(
            settings.access_status_base_url,
            http_client,
            status_path=settings.access_status_path,
        ),
    )
    app.state.resource_binder = SqlResourceBinder(db)

    reaper_handle = None
    if settings.reaper_enabled:
        reaper = GuestLifecycleReaper(
            db, app.state.resource_binder,
            interval_seconds=settings.reaper_interval_seconds,
        )
        reaper_handle = reaper.start()
    else:
        logger.info("Guest reaper disabled by configuration")

    logger.info("Gatekeeper API started")
    yield
    logger.info("Gatekeeper API shutting down")

    if reaper_handle is not None:
        await reaper_handle.stop()
    await http_client.aclose()
    await db.dispose()


app = FastAPI(
    title="Gatekeeper API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(access.router)
app.include_router(card_registrations.router)

register_error_handlers(app)
