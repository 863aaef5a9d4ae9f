"""
Circuit Breaker for calls to the schedule-generation model.

Detects repeated failures of the external model API and short-circuits
further calls until a recovery timeout has passed, so a dead upstream
surfaces as a fast ExternalServiceError instead of a stream of slow
timeouts.

States:
- CLOSED: Normal operation, calls pass through.
- OPEN: Service is unhealthy, calls are rejected immediately.
- HALF_OPEN: One trial call is allowed to probe recovery.

Usage:
    cb = await get_circuit_breaker("gemini_api")
    async with cb:
        response = await client.post(url, json=body)
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class CircuitState(StrEnum):
    """Possible states for a circuit breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_after: float) -> None:
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{name}' is open. Retry after {retry_after:.1f}s."
        )


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker guarded by an asyncio.Lock.

    Args:
        name: Identifier for the protected service (used in logging).
        failure_threshold: Consecutive failures before opening.
        recovery_timeout: Seconds in OPEN before a trial call is allowed.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self._state: CircuitState = CircuitState.CLOSED
        self._failure_count: int = 0
        self._trial_in_flight: bool = False
        self._opened_at: float = 0.0
        self._lock: asyncio.Lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _set_state(self, new_state: CircuitState) -> None:
        if self._state == new_state:
            return
        logger.info(
            "Circuit breaker '%s': %s -> %s",
            self.name,
            self._state.value,
            new_state.value,
        )
        self._state = new_state

    def retry_after_seconds(self) -> float:
        """Return seconds until the circuit may attempt recovery."""
        if self._state != CircuitState.OPEN:
            return 0.0
        elapsed = time.monotonic() - self._opened_at
        return max(0.0, self.recovery_timeout - elapsed)

    async def allow_request(self) -> bool:
        """Return True if a call may go through right now."""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return True
            if self._state == CircuitState.OPEN:
                if self.retry_after_seconds() > 0:
                    return False
                self._set_state(CircuitState.HALF_OPEN)
                self._trial_in_flight = False
            # HALF_OPEN: a single trial call
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
            return True

    async def record_success(self) -> None:
        async with self._lock:
            self._failure_count = 0
            self._trial_in_flight = False
            self._set_state(CircuitState.CLOSED)

    async def record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._trial_in_flight = False
            if (
                self._state == CircuitState.HALF_OPEN
                or self._failure_count >= self.failure_threshold
            ):
                if self._state == CircuitState.CLOSED:
                    logger.warning(
                        "Circuit breaker '%s' opened after %d consecutive failures",
                        self.name,
                        self._failure_count,
                    )
                self._opened_at = time.monotonic()
                self._set_state(CircuitState.OPEN)

    async def reset(self) -> None:
        """Force the breaker back to CLOSED."""
        async with self._lock:
            self._failure_count = 0
            self._trial_in_flight = False
            self._opened_at = 0.0
            self._set_state(CircuitState.CLOSED)

    async def __aenter__(self) -> CircuitBreaker:
        if not await self.allow_request():
            raise CircuitBreakerError(self.name, self.retry_after_seconds())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_type is None:
            await self.record_success()
        else:
            await self.record_failure()


# =============================================================================
# Global registry of circuit breakers
# =============================================================================

_registry: dict[str, CircuitBreaker] = {}
_registry_lock: asyncio.Lock = asyncio.Lock()


async def get_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: float = 60.0,
) -> CircuitBreaker:
    """
    Get or create a named circuit breaker from the global registry.

    Threshold and timeout are only applied when the breaker is created.
    """
    async with _registry_lock:
        if name not in _registry:
            _registry[name] = CircuitBreaker(
                name=name,
                failure_threshold=failure_threshold,
                recovery_timeout=recovery_timeout,
            )
        return _registry[name]


def get_all_circuit_breakers() -> dict[str, CircuitBreaker]:
    """Return a snapshot of all registered circuit breakers."""
    return dict(_registry)


def clear_circuit_breakers() -> None:
    """Drop every registered breaker (tests, reconfiguration)."""
    _registry.clear()
