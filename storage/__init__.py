from .redis_client import RedisClient
from .backends import InMemoryBackend, JsonFileBackend, RedisBackend, build_backend
from .history import HistoryStore, HistoryPersistenceError

__all__ = [
    "RedisClient",
    "InMemoryBackend", "JsonFileBackend", "RedisBackend", "build_backend",
    "HistoryStore", "HistoryPersistenceError",
]
