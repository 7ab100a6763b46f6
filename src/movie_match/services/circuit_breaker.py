"""Circuit breaker guarding calls to the external catalog source.

CLOSED lets calls through and counts failures inside a monitoring window.
Reaching the failure threshold opens the circuit, which rejects calls with
CircuitOpenError until the reset timeout passes. The next call then runs in
HALF_OPEN: enough successes close the circuit, any failure reopens it.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from movie_match.domain.errors import CircuitOpenError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(StrEnum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass(frozen=True)
class BreakerSnapshot:
    """Point-in-time view of a breaker for the admin API."""

    name: str
    state: CircuitState
    failure_count: int
    success_count: int
    retry_after_seconds: float


class CircuitBreaker:
    """Per-process circuit breaker for an unreliable async dependency."""

    def __init__(  # noqa: PLR0913
        self,
        name: str,
        failure_threshold: int = 5,
        reset_timeout_seconds: float = 60.0,
        success_threshold: int = 2,
        monitoring_period_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout_seconds = reset_timeout_seconds
        self.success_threshold = success_threshold
        self.monitoring_period_seconds = monitoring_period_seconds
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_at = 0.0
        self._next_attempt_at = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func`` unless the circuit is open."""
        self._update_state(self._clock())
        if self._state == CircuitState.OPEN:
            raise CircuitOpenError(
                f"Circuit {self.name} is OPEN; retry in {self._retry_after():.0f}s"
            )

        try:
            result = await func()
        except Exception:
            self._on_failure(self._clock())
            raise

        self._on_success()
        return result

    def force_open(self) -> None:
        """Open the circuit manually."""
        self._transition(CircuitState.OPEN)
        self._next_attempt_at = self._clock() + self.reset_timeout_seconds

    def force_close(self) -> None:
        """Close the circuit manually and clear counters."""
        self._transition(CircuitState.CLOSED)
        self._failure_count = 0
        self._success_count = 0

    def snapshot(self) -> BreakerSnapshot:
        return BreakerSnapshot(
            name=self.name,
            state=self._state,
            failure_count=self._failure_count,
            success_count=self._success_count,
            retry_after_seconds=self._retry_after(),
        )

    def _retry_after(self) -> float:
        if self._state != CircuitState.OPEN:
            return 0.0
        return max(0.0, self._next_attempt_at - self._clock())

    def _update_state(self, now: float) -> None:
        if self._state == CircuitState.CLOSED:
            if now - self._last_failure_at > self.monitoring_period_seconds:
                self._failure_count = 0
        elif self._state == CircuitState.OPEN and now >= self._next_attempt_at:
            self._transition(CircuitState.HALF_OPEN)
            self._success_count = 0

    def _on_success(self) -> None:
        if self._state == CircuitState.CLOSED:
            self._failure_count = 0
        elif self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.success_threshold:
                self.force_close()

    def _on_failure(self, now: float) -> None:
        self._last_failure_at = now
        if self._state == CircuitState.CLOSED:
            self._failure_count += 1
            if self._failure_count >= self.failure_threshold:
                self._transition(CircuitState.OPEN)
                self._next_attempt_at = now + self.reset_timeout_seconds
        elif self._state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
            self._next_attempt_at = now + self.reset_timeout_seconds
            self._success_count = 0

    def _transition(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return
        _logger.warning(
            "Circuit %s: %s -> %s (failures=%s)",
            self.name,
            self._state.value,
            new_state.value,
            self._failure_count,
        )
        self._state = new_state
