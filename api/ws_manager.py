"""Live push of stored readings, dashboard metrics and anomaly alerts over WebSockets."""

import asyncio
import json
import time
from dataclasses import asdict

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from analytics.engine import TrendEngine
from config import configure_logging
from ingest.schemas import StoredReading

CHANNELS = frozenset({"readings", "dashboard", "anomalies"})
UNTHROTTLED = frozenset({"anomalies"})


class Subscriber:
    """One live client: the channels it listens to and when each was last fed."""

    __slots__ = ("websocket", "channels", "_last_sent")

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.channels: set[str] = set(CHANNELS)
        self._last_sent: dict[str, float] = {}

    def due(self, channel: str, now: float, min_interval: float) -> bool:
        """True when this client should receive a message on ``channel`` now; records the send."""
        if channel not in self.channels:
            return False
        if channel not in UNTHROTTLED and now - self._last_sent.get(channel, 0.0) < min_interval:
            return False
        self._last_sent[channel] = now
        return True


class WebSocketManager:
    """
    Fans out analytics updates to connected dashboards.

    Throttling is per client and per channel, so a burst of readings never
    starves the anomaly channel, and anomaly alerts are never dropped.
    """

    def __init__(self, throttle_ms: int = 100, log_level: str = "INFO"):
        self._subscribers: dict[WebSocket, Subscriber] = {}
        self._min_interval = throttle_ms / 1000.0
        self.log = configure_logging("ws-manager", log_level)

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self._subscribers[websocket] = Subscriber(websocket)
        self.log.info("ws_connected", total=len(self._subscribers))

    def disconnect(self, websocket: WebSocket):
        if self._subscribers.pop(websocket, None) is not None:
            self.log.info("ws_disconnected", total=len(self._subscribers))

    def update_filters(self, websocket: WebSocket, channels: list[str]) -> set[str]:
        """Narrow a client to the known channels it asked for; returns what was accepted."""
        subscriber = self._subscribers.get(websocket)
        if subscriber is None:
            return set()
        subscriber.channels = {c for c in channels if c in CHANNELS}
        return subscriber.channels

    async def broadcast(self, channel: str, data: dict):
        if not self._subscribers:
            return
        now = time.time()
        recipients = [ws for ws, sub in list(self._subscribers.items()) if sub.due(channel, now, self._min_interval)]
        if not recipients:
            return
        message = json.dumps({"channel": channel, "data": data}, default=str)
        await asyncio.gather(*(self._send(ws, message) for ws in recipients))

    async def publish_reading(self, engine: TrendEngine, stored: StoredReading):
        """Push a freshly stored reading, then the refreshed dashboard and any anomalies it raised."""
        if not self._subscribers:
            return
        await self.broadcast("readings", stored.model_dump())
        await self.broadcast("dashboard", asdict(engine.get_dashboard_metrics()))
        for parameter in engine.parameters:
            if stored.value_of(parameter) is None:
                continue
            anomaly = engine.detect_anomalies(parameter)
            if anomaly.has_anomaly:
                await self.broadcast("anomalies", asdict(anomaly))

    async def _send(self, ws: WebSocket, message: str):
        try:
            if ws.client_state == WebSocketState.CONNECTED:
                await ws.send_text(message)
        except Exception as e:
            self.log.warning("ws_send_failed", error=str(e))
            self.disconnect(ws)

    @property
    def connection_count(self) -> int:
        return len(self._subscribers)
