"""Health and readiness check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from analytics.engine import TrendEngine
from api.dependencies import get_engine
from storage.backends import RedisBackend

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness probe. Returns 200 if the process is alive."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(engine: TrendEngine = Depends(get_engine)):
    """Readiness probe. Checks that the history backend is reachable."""
    backend = engine.store.backend
    body = {"status": "ready", "backend": type(backend).__name__}

    if isinstance(backend, RedisBackend):
        body["circuit_breaker"] = backend.client.circuit_state
        if not backend.client.ping():
            body.update(status="not_ready", redis="unreachable")
            return JSONResponse(status_code=503, content=body)
        body["redis"] = "connected"

    return body
