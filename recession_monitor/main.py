from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recession_monitor.api.health import router as health_router
from recession_monitor.api.routes_countries import init_roster_store, router as countries_router
from recession_monitor.api.routes_stream import router as stream_router
from recession_monitor.config import configure_logging, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: publish the simulated baseline, then start the live refresh
    settings = get_settings()
    configure_logging(settings)

    from recession_monitor.jobs.refresh import refresh_live_data
    from recession_monitor.roster.baseline import generate_baseline
    from recession_monitor.roster.store import RosterStore

    store = RosterStore(generate_baseline())
    init_roster_store(store)
    logger.info("Baseline roster published (%d countries)", len(store.snapshot.countries))

    refresh_task = None
    if settings.fetch_live_on_startup:
        refresh_task = asyncio.create_task(refresh_live_data(store, settings=settings))

    yield

    # Shutdown
    if refresh_task is not None and not refresh_task.done():
        refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresh_task


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Recession Monitor", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url, "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(countries_router)
    app.include_router(stream_router)

    return app


app = create_app()
