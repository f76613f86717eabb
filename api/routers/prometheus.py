"""Prometheus-compatible metrics endpoint."""

import time

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from storage.backends import RedisBackend

router = APIRouter()

CIRCUIT_STATES = {"closed": 0, "open": 1, "half_open": 2}


@router.get("/metrics")
async def prometheus_metrics(request: Request):
    """Expose metrics in Prometheus text exposition format."""
    engine = request.app.state.engine
    ws_manager = request.app.state.ws_manager
    uptime = time.time() - request.app.state.start_time
    history_size = len(engine.get_history())

    lines = [
        "# HELP milk_history_readings Readings currently held in the history log",
        "# TYPE milk_history_readings gauge",
        f"milk_history_readings {history_size}",
        "",
        "# HELP milk_history_capacity Maximum readings retained in the history log",
        "# TYPE milk_history_capacity gauge",
        f"milk_history_capacity {engine.store.max_points}",
        "",
        "# HELP websocket_connections_active Current WebSocket connections",
        "# TYPE websocket_connections_active gauge",
        f"websocket_connections_active {ws_manager.connection_count}",
        "",
        "# HELP api_uptime_seconds Seconds since API start",
        "# TYPE api_uptime_seconds gauge",
        f"api_uptime_seconds {uptime:.1f}",
    ]

    backend = engine.store.backend
    if isinstance(backend, RedisBackend):
        cb_value = CIRCUIT_STATES.get(backend.client.circuit_state, 0)
        lines += [
            "",
            "# HELP redis_circuit_breaker_state Circuit breaker state (0=closed, 1=open, 2=half_open)",
            "# TYPE redis_circuit_breaker_state gauge",
            f"redis_circuit_breaker_state {cb_value}",
        ]

    return PlainTextResponse("\n".join(lines) + "\n", media_type="text/plain; version=0.0.4")
