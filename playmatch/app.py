"""FastAPI application factory."""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI

from playmatch import __version__
from playmatch.api.routes import availability, districts, games, matching, notifications, proposals
from playmatch.bootstrap import build_services
from playmatch.consumers.scheduler import MatchingScheduler
from playmatch.core.interfaces import EventSource
from playmatch.database import db_factory, init_db
from playmatch.utilities.tz import now_utc

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(
    db_path: Path | str | None = None,
    start_scheduler: bool = True,
    event_store: EventSource | None = None,
    clock: Callable[[], datetime] = now_utc,
) -> FastAPI:
    """Create the application.

    Args:
        db_path: SQLite database file (defaults to PLAYMATCH_DB_PATH)
        start_scheduler: Start the background matching scheduler when enabled
            in settings
        event_store: Event store override; built from settings when omitted
        clock: Source of "now" for every service
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(db_path)
        services = build_services(db_factory(db_path), event_store=event_store, clock=clock)
        app.state.services = services

        scheduler = None
        scheduler_settings = services.settings.scheduler
        if start_scheduler and scheduler_settings.enabled:
            scheduler = MatchingScheduler(
                services.runner,
                services.availability,
                interval_minutes=scheduler_settings.interval_minutes,
            )
            scheduler.start()

        logger.info("[STARTUP] playmatch %s ready", __version__)
        yield

        if scheduler is not None:
            scheduler.stop()
        logger.info("[SHUTDOWN] playmatch stopped")

    app = FastAPI(title="Playmatch", version=__version__, lifespan=lifespan)

    app.include_router(districts.router, prefix=API_PREFIX, tags=["Districts"])
    app.include_router(availability.router, prefix=API_PREFIX, tags=["Availability"])
    app.include_router(proposals.router, prefix=API_PREFIX, tags=["Proposals"])
    app.include_router(games.router, prefix=API_PREFIX, tags=["Games"])
    app.include_router(matching.router, prefix=API_PREFIX, tags=["Matching"])
    app.include_router(notifications.router, prefix=API_PREFIX, tags=["Notifications"])

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    return app
