"""FastAPI dependency injection."""

from fastapi import Request

from analytics.engine import TrendEngine
from api.ws_manager import WebSocketManager
from config import Settings


def get_engine(request: Request) -> TrendEngine:
    return request.app.state.engine


def get_ws_manager(request: Request) -> WebSocketManager:
    return request.app.state.ws_manager


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
