"""FastAPI application factory with lifespan management."""

import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from analytics.engine import TrendEngine
from api.routers import health, prometheus, readings, trends, websocket
from api.ws_manager import WebSocketManager
from config import Settings, configure_logging
from storage.backends import RedisBackend


def create_app(settings: Settings | None = None, engine: TrendEngine | None = None) -> FastAPI:
    """
    Build the API. Tests pass a prebuilt engine (in-memory backend, fixed clock);
    otherwise one is created from settings at startup.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log = configure_logging("api", settings.log_level)
        trend_engine = engine or TrendEngine.from_settings(settings)

        app.state.settings = settings
        app.state.engine = trend_engine
        app.state.ws_manager = WebSocketManager(
            throttle_ms=settings.ws_throttle_ms, log_level=settings.log_level
        )
        app.state.start_time = time.time()
        log.info(
            "api_started",
            backend=type(trend_engine.store.backend).__name__,
            history=len(trend_engine.get_history()),
        )

        yield

        backend = trend_engine.store.backend
        if isinstance(backend, RedisBackend):
            backend.client.close()
        log.info("api_stopped")

    app = FastAPI(
        title="MilkoSense Trend Analytics API",
        version="2.0.0",
        description="Historical trend analysis and predictive analytics for milk-quality sensors",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health.router)
    app.include_router(readings.router)
    app.include_router(trends.router)
    app.include_router(websocket.router)
    if settings.enable_prometheus:
        app.include_router(prometheus.router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)
