"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (logging, query
store connection, telemetry).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from querymemo.core.config import Settings
from querymemo.shared.telemetry.logging import setup_logging
from querymemo.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


def setup_app_telemetry(app: FastAPI, settings: Settings) -> None:
    """Install tracing and instrument the app. Called from create_app().

    Instrumentation adds middleware, so it has to run before the app starts
    serving (not inside the lifespan).
    """
    if not settings.telemetry_enabled:
        return
    telemetry = TelemetryConfig.from_settings(settings)
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    set_telemetry(telemetry)
    telemetry.instrument_fastapi(app)
    if settings.query_cache_backend == "redis":
        telemetry.instrument_redis()


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, query store connect (stores that have one).
    Shutdown order: drain background cache writes, query store disconnect,
    telemetry shutdown.
    """
    setup_logging()

    # ---- Startup ----
    store = getattr(app.state, "query_store", None)
    if store is not None and hasattr(store, "connect"):
        await store.connect()

    yield

    # ---- Shutdown ----
    query_cache = getattr(app.state, "query_cache", None)
    if query_cache is not None:
        await query_cache.drain()

    if store is not None and hasattr(store, "disconnect"):
        await store.disconnect()
        logger.info("Query store disconnected")

    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)
