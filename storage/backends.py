"""Persistence backends for the reading history, one logical key holding the whole log."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Protocol

import redis

from config import Settings
from storage.redis_client import CircuitOpenError, RedisClient


class CorruptHistoryError(Exception):
    """Persisted history exists but cannot be decoded into a list of readings."""


class BackendUnavailableError(Exception):
    """The storage medium could not be reached or written."""


class HistoryBackend(Protocol):
    def load(self) -> list[dict]: ...

    def save(self, entries: list[dict]) -> None: ...

    def clear(self) -> None: ...


def _decode(payload: str | None) -> list[dict]:
    if payload is None or payload == "":
        return []
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CorruptHistoryError(f"history is not valid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise CorruptHistoryError("history must be a JSON array of objects")
    return data


def _encode(entries: list[dict]) -> str:
    return json.dumps(entries, separators=(",", ":"))


class InMemoryBackend:
    """Keeps the serialized log in process memory. Used for tests and ephemeral runs."""

    def __init__(self, payload: str | None = None):
        self._payload = payload

    def load(self) -> list[dict]:
        return _decode(self._payload)

    def save(self, entries: list[dict]) -> None:
        self._payload = _encode(entries)

    def clear(self) -> None:
        self._payload = None

    @property
    def raw(self) -> str | None:
        return self._payload


class JsonFileBackend:
    """
    Stores the log as a JSON file on local disk.

    Writes go to a sibling temp file that is then renamed over the target,
    so a reader never observes a half-written log.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def load(self) -> list[dict]:
        try:
            payload = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as e:
            raise CorruptHistoryError(f"history file is not UTF-8: {e}") from e
        except OSError as e:
            raise BackendUnavailableError(f"history file unreadable: {e}") from e
        return _decode(payload)

    def save(self, entries: list[dict]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".history-", suffix=".tmp")
        except OSError as e:
            raise BackendUnavailableError(f"history file not writable: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(_encode(entries))
            os.replace(tmp_path, self._path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise BackendUnavailableError(f"history file not writable: {e}") from e

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise BackendUnavailableError(f"history file not removable: {e}") from e

    @property
    def path(self) -> Path:
        return self._path


class RedisBackend:
    """Stores the log as a single Redis string; SET replaces it atomically."""

    def __init__(self, client: RedisClient, key: str = "milkosense_history"):
        self._client = client
        self._key = key

    def _run(self, op: Callable[..., Any], *args: Any) -> Any:
        try:
            return op(*args)
        except (CircuitOpenError, redis.RedisError) as e:
            raise BackendUnavailableError(f"redis unavailable: {e}") from e

    def load(self) -> list[dict]:
        return _decode(self._run(self._client.fetch, self._key))

    def save(self, entries: list[dict]) -> None:
        payload = _encode(entries)
        self._run(self._client.store, self._key, payload)

    def clear(self) -> None:
        self._run(self._client.remove, self._key)

    @property
    def client(self) -> RedisClient:
        return self._client


def build_backend(settings: Settings) -> HistoryBackend:
    """Instantiate the backend named by settings.history_backend."""
    kind = settings.history_backend.lower()
    if kind == "memory":
        return InMemoryBackend()
    if kind == "file":
        return JsonFileBackend(settings.history_file)
    if kind == "redis":
        return RedisBackend(RedisClient(settings), key=settings.history_key)
    raise ValueError(f"Unknown history backend: {settings.history_backend!r}")
