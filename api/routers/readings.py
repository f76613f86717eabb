"""Ingestion and history endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from analytics.engine import TrendEngine
from api.dependencies import get_engine, get_ws_manager
from api.ws_manager import WebSocketManager
from ingest.schemas import ReadingIn, StoredReading
from storage.history import HistoryPersistenceError

router = APIRouter(prefix="/api/v1")


@router.post("/readings", status_code=status.HTTP_201_CREATED, response_model=StoredReading)
async def store_reading(
    reading: ReadingIn,
    engine: TrendEngine = Depends(get_engine),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
):
    """Append a reading to the history; the server assigns its timestamp."""
    try:
        stored = engine.store_reading(reading)
    except HistoryPersistenceError as e:
        raise HTTPException(status_code=503, detail=f"History storage unavailable: {e}")

    await ws_manager.publish_reading(engine, stored)
    return stored


@router.get("/readings", response_model=list[StoredReading])
async def get_history(
    limit: int | None = Query(default=None, ge=1, le=1000, description="Only the most recent N readings"),
    engine: TrendEngine = Depends(get_engine),
):
    """Stored readings, oldest first."""
    history = engine.get_history()
    return history[-limit:] if limit else history


@router.delete("/readings", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(engine: TrendEngine = Depends(get_engine)):
    try:
        engine.clear_history()
    except HistoryPersistenceError as e:
        raise HTTPException(status_code=503, detail=f"History storage unavailable: {e}")
