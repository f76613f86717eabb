"""Redis access for the history log: pooled connections, retries and a circuit breaker."""

import time
from typing import Any, Callable

import redis

from config import Settings, configure_logging

RETRYABLE_ERRORS = (redis.ConnectionError, redis.TimeoutError)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half_open"


def backoff_delay(attempt: int, base: float = 0.1) -> float:
    """Exponential backoff in seconds for a zero-based retry attempt."""
    return base * (2 ** attempt)


class CircuitBreaker:
    """
    Fails fast once Redis has been failing for a while.

    After ``failure_threshold`` consecutive failures the breaker opens and
    rejects calls. Once ``recovery_timeout`` seconds have passed it reports
    half-open and lets a trial call through; its outcome closes or
    reopens it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self._opened_at: float | None = None
        self._clock = clock

    @property
    def state(self) -> str:
        if self._opened_at is None:
            return CLOSED
        if self._clock() - self._opened_at > self.recovery_timeout:
            return HALF_OPEN
        return OPEN

    def allow_request(self) -> bool:
        return self.state != OPEN

    def on_success(self):
        self.failure_count = 0
        self._opened_at = None

    def on_failure(self):
        trial_failed = self.state == HALF_OPEN
        self.failure_count += 1
        if trial_failed or self.failure_count >= self.failure_threshold:
            self._opened_at = self._clock()


class CircuitOpenError(Exception):
    pass


class RedisClient:
    """String get/set/delete against a pooled Redis connection, retried behind a circuit breaker."""

    def __init__(self, settings: Settings, circuit: CircuitBreaker | None = None, max_retries: int = 3):
        self.log = configure_logging("redis-client", settings.log_level)
        self._pool = redis.ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            decode_responses=True,
        )
        self._circuit = circuit or CircuitBreaker()
        self._max_retries = max_retries
        self.log.info("redis_pool_created", url=settings.redis_url, pool_size=settings.redis_pool_size)

    def connection(self) -> redis.Redis:
        return redis.Redis(connection_pool=self._pool)

    def call(self, op: Callable[[redis.Redis], Any], max_retries: int | None = None) -> Any:
        """
        Run ``op`` with a pooled connection.

        Connection and timeout errors are retried with exponential backoff
        until the attempts run out or the breaker opens; the last error is
        then re-raised. Raises CircuitOpenError without touching Redis while
        the breaker is open.
        """
        if not self._circuit.allow_request():
            raise CircuitOpenError("Redis circuit breaker is open")

        attempts = self._max_retries if max_retries is None else max_retries
        for attempt in range(attempts):
            try:
                result = op(self.connection())
            except RETRYABLE_ERRORS as e:
                self._circuit.on_failure()
                if attempt == attempts - 1 or not self._circuit.allow_request():
                    raise
                delay = backoff_delay(attempt)
                self.log.warning("redis_retry", attempt=attempt + 1, backoff=delay, error=str(e))
                time.sleep(delay)
            else:
                self._circuit.on_success()
                return result

    def fetch(self, key: str) -> str | None:
        return self.call(lambda r: r.get(key))

    def store(self, key: str, value: str) -> None:
        self.call(lambda r: r.set(key, value))

    def remove(self, key: str) -> None:
        self.call(lambda r: r.delete(key))

    def ping(self) -> bool:
        try:
            return bool(self.call(lambda r: r.ping(), max_retries=1))
        except (CircuitOpenError, *RETRYABLE_ERRORS):
            return False

    def close(self):
        self._pool.disconnect()
        self.log.info("redis_pool_closed")

    @property
    def circuit_state(self) -> str:
        return self._circuit.state
