"""Tests for history persistence backends."""

import json
from unittest.mock import MagicMock

import pytest
import redis

from storage.backends import (
    BackendUnavailableError,
    CorruptHistoryError,
    InMemoryBackend,
    JsonFileBackend,
    RedisBackend,
    build_backend,
)
from storage.redis_client import CircuitOpenError


ENTRIES = [{"ph": 6.6, "timestamp_ms": 1700000000000.5, "iso_date": "2023-11-14T22:13:20+00:00"}]


class TestInMemoryBackend:
    def test_round_trip(self):
        backend = InMemoryBackend()
        backend.save(ENTRIES)
        assert backend.load() == ENTRIES

    def test_empty(self):
        assert InMemoryBackend().load() == []

    def test_clear(self):
        backend = InMemoryBackend()
        backend.save(ENTRIES)
        backend.clear()
        assert backend.load() == []

    @pytest.mark.parametrize("payload", ["nope", "{}", "[1, 2]", '"text"'])
    def test_corrupt(self, payload):
        with pytest.raises(CorruptHistoryError):
            InMemoryBackend(payload).load()


class TestJsonFileBackend:
    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileBackend(tmp_path / "history.json").load() == []

    def test_round_trip_creates_directories(self, tmp_path):
        backend = JsonFileBackend(tmp_path / "nested" / "history.json")
        backend.save(ENTRIES)
        assert backend.load() == ENTRIES
        assert json.loads(backend.path.read_text()) == ENTRIES

    def test_no_temp_files_left(self, tmp_path):
        backend = JsonFileBackend(tmp_path / "history.json")
        backend.save(ENTRIES)
        backend.save(ENTRIES + ENTRIES)
        assert [p.name for p in tmp_path.iterdir()] == ["history.json"]

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("[{broken")
        with pytest.raises(CorruptHistoryError):
            JsonFileBackend(path).load()

    def test_clear(self, tmp_path):
        backend = JsonFileBackend(tmp_path / "history.json")
        backend.save(ENTRIES)
        backend.clear()
        backend.clear()
        assert not backend.path.exists()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        backend = JsonFileBackend(blocker / "history.json")
        with pytest.raises(BackendUnavailableError):
            backend.save(ENTRIES)


class TestRedisBackend:
    def test_save_and_load(self):
        client = MagicMock()
        backend = RedisBackend(client, key="hist")
        backend.save(ENTRIES)
        key, payload = client.store.call_args.args
        assert key == "hist"

        client.fetch.return_value = payload
        assert backend.load() == ENTRIES
        client.fetch.assert_called_with("hist")

    def test_missing_key(self):
        client = MagicMock()
        client.fetch.return_value = None
        assert RedisBackend(client).load() == []

    def test_clear(self):
        client = MagicMock()
        RedisBackend(client, key="hist").clear()
        client.remove.assert_called_once_with("hist")

    @pytest.mark.parametrize("error", [CircuitOpenError("open"), redis.ConnectionError("down")])
    def test_unavailable(self, error):
        client = MagicMock()
        client.fetch.side_effect = error
        client.store.side_effect = error
        backend = RedisBackend(client)
        with pytest.raises(BackendUnavailableError):
            backend.load()
        with pytest.raises(BackendUnavailableError):
            backend.save(ENTRIES)


class TestBuildBackend:
    def test_memory(self, settings):
        assert isinstance(build_backend(settings), InMemoryBackend)

    def test_file(self, settings, tmp_path):
        settings = settings.model_copy(update={"history_backend": "file", "history_file": str(tmp_path / "h.json")})
        backend = build_backend(settings)
        assert isinstance(backend, JsonFileBackend)
        assert backend.path == tmp_path / "h.json"

    def test_redis(self, settings):
        settings = settings.model_copy(update={"history_backend": "redis"})
        assert isinstance(build_backend(settings), RedisBackend)

    def test_unknown(self, settings):
        with pytest.raises(ValueError):
            build_backend(settings.model_copy(update={"history_backend": "sqlite"}))
