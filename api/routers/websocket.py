"""WebSocket endpoint for live readings, dashboard metrics, and anomaly alerts."""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from api.ws_manager import WebSocketManager

router = APIRouter()


@router.websocket("/ws/live")
async def websocket_live(websocket: WebSocket):
    """
    Real-time WebSocket endpoint.

    Clients connect and optionally narrow what they receive:
        {"type": "subscribe", "channels": ["readings", "dashboard", "anomalies"]}

    Data is pushed by the readings router whenever a reading is stored.
    """
    manager: WebSocketManager = websocket.app.state.ws_manager
    await manager.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "detail": "invalid JSON"})
                continue
            if not isinstance(data, dict):
                continue
            if data.get("type") == "subscribe" and isinstance(data.get("channels"), list):
                accepted = manager.update_filters(websocket, data["channels"])
                await websocket.send_json({"type": "subscribed", "channels": sorted(accepted)})
            elif data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        manager.disconnect(websocket)
