"""Bounded, time-ordered reading history backed by a pluggable persistence backend."""

import time
from typing import Callable, Mapping

from pydantic import ValidationError

from config import configure_logging
from ingest.schemas import ReadingIn, StoredReading, TimeWindow
from storage.backends import BackendUnavailableError, CorruptHistoryError, HistoryBackend

DEFAULT_MAX_POINTS = 500


def system_clock_ms() -> float:
    return time.time() * 1000


class HistoryPersistenceError(Exception):
    """Writing the history log to its backend failed."""


class HistoryStore:
    """
    Append-only log of readings, oldest first, capped at max_points.

    The whole log is rewritten on every append, so readers always see either
    the state before or after an append. Nothing is cached in process: every
    read goes back to the backend, which keeps multiple store instances over
    the same backend consistent.
    """

    def __init__(
        self,
        backend: HistoryBackend,
        max_points: int = DEFAULT_MAX_POINTS,
        clock: Callable[[], float] = system_clock_ms,
        log_level: str = "INFO",
    ):
        if max_points < 1:
            raise ValueError("max_points must be at least 1")
        self._backend = backend
        self._max_points = max_points
        self._clock = clock
        self.log = configure_logging("history-store", log_level)

    @property
    def max_points(self) -> int:
        return self._max_points

    @property
    def backend(self) -> HistoryBackend:
        return self._backend

    def now_ms(self) -> float:
        return self._clock()

    def append(self, reading: ReadingIn | Mapping) -> StoredReading:
        """Stamp the reading with the current time, append it, and persist the log."""
        if not isinstance(reading, ReadingIn):
            reading = ReadingIn.model_validate(dict(reading))
        stored = StoredReading.stamp(reading, self._clock())

        history = self._load_for_write()
        history.append(stored)
        if len(history) > self._max_points:
            evicted = len(history) - self._max_points
            history = history[evicted:]
            self.log.debug("history_evicted", count=evicted)

        self._save([r.model_dump() for r in history])
        return stored

    def get_all(self) -> list[StoredReading]:
        """Full log, oldest first. Unreadable or corrupt state counts as empty."""
        try:
            entries = self._backend.load()
            return [StoredReading.model_validate(entry) for entry in entries]
        except (CorruptHistoryError, ValidationError) as e:
            self.log.warning("history_corrupt", error=str(e))
        except BackendUnavailableError as e:
            self.log.warning("history_load_failed", error=str(e))
        return []

    def clear(self):
        try:
            self._backend.clear()
        except BackendUnavailableError as e:
            self.log.error("history_clear_failed", error=str(e))
            raise HistoryPersistenceError(str(e)) from e
        self.log.info("history_cleared")

    def filter_by_window(self, window: TimeWindow) -> list[StoredReading]:
        """Readings no older than the window's duration; the whole log for ALL."""
        history = self.get_all()
        duration = window.duration_ms
        if duration is None:
            return history
        cutoff = self._clock() - duration
        return [r for r in history if r.timestamp_ms >= cutoff]

    def _load_for_write(self) -> list[StoredReading]:
        """
        Current log as the base for a rewrite. Corrupt state is replaced by a
        fresh log; an unreachable backend aborts the append with the stored
        log left untouched.
        """
        try:
            return [StoredReading.model_validate(entry) for entry in self._backend.load()]
        except (CorruptHistoryError, ValidationError) as e:
            self.log.warning("history_corrupt_reset", error=str(e))
            return []
        except BackendUnavailableError as e:
            self.log.error("history_load_failed", error=str(e), during="append")
            raise HistoryPersistenceError(str(e)) from e

    def _save(self, entries: list[dict]):
        try:
            self._backend.save(entries)
        except BackendUnavailableError as e:
            self.log.error("history_save_failed", error=str(e), entries=len(entries))
            raise HistoryPersistenceError(str(e)) from e
