# selfpark/server/__init__.py
"""Live episode/step/reward readout for running ParkingEnv instances.

Envs push snapshots with ``BroadcastTelemetry``; viewers read the latest
state over REST or follow it on ``/events``.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("selfpark.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    from .sse import sse_manager

    app.state.started_at = time.monotonic()
    logger.info(f"Telemetry server listening on {settings.HOST}:{settings.PORT}")
    yield
    await sse_manager.shutdown()
    logger.info("Telemetry server stopped")


def create_app() -> FastAPI:
    from .models import HealthResponse
    from .routes import stream, telemetry
    from .sse import sse_manager
    from .telemetry_store import telemetry_store

    app = FastAPI(lifespan=lifespan, title="SelfPark Telemetry")
    app.state.started_at = time.monotonic()
    app.include_router(telemetry.router)
    app.include_router(stream.router)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            clients=sse_manager.client_count,
            runs=len(telemetry_store),
            uptime_s=time.monotonic() - app.state.started_at,
        )

    return app


app = create_app()
