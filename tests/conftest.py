"""Shared test fixtures."""

import pytest

from analytics.engine import TrendEngine
from config import Settings
from ingest.schemas import ReadingIn, StoredReading
from storage.backends import InMemoryBackend
from storage.history import HistoryStore

START_MS = 1_700_000_000_000.0


class FakeClock:
    """Deterministic millisecond clock."""

    def __init__(self, start_ms: float = START_MS):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, seconds: float = 0.0, minutes: float = 0.0, hours: float = 0.0):
        self.now_ms += (seconds + minutes * 60 + hours * 3600) * 1000


@pytest.fixture
def settings():
    """Test settings with an in-memory history and no scorer."""
    return Settings(history_backend="memory", redis_url="redis://localhost:6379/1")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend, clock):
    return HistoryStore(backend, max_points=500, clock=clock)


@pytest.fixture
def engine(settings, backend, clock):
    return TrendEngine.from_settings(settings, backend=backend, clock=clock)


@pytest.fixture
def make_readings():
    """Build stored readings one minute apart from per-parameter value lists."""

    def _make(start_ms: float = START_MS, step_ms: float = 60_000, **series) -> list[StoredReading]:
        length = max(len(values) for values in series.values())
        readings = []
        for i in range(length):
            fields = {name: values[i] for name, values in series.items() if i < len(values)}
            readings.append(StoredReading.stamp(ReadingIn(**fields), start_ms + i * step_ms))
        return readings

    return _make


def score_from_ph(reading) -> float:
    """Toy scorer for tests: 100 at pH 6.6, dropping 100 points per pH unit away from it."""
    return max(0.0, 100.0 - abs(reading.ph - 6.6) * 100)


@pytest.fixture
def ph_scorer():
    return score_from_ph
