"""
Tests for CircuitBreaker (src/lib/circuit_breaker.py).

Tests cover all three states (CLOSED, OPEN, HALF_OPEN), state transitions,
failure counting, recovery timeout, the single trial call in HALF_OPEN,
context manager usage, and the global registry.
"""

from __future__ import annotations

import asyncio

import pytest

from src.lib.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitState,
    clear_circuit_breakers,
    get_all_circuit_breakers,
    get_circuit_breaker,
)

# =============================================================================
# Basic CircuitBreaker Tests
# =============================================================================


@pytest.mark.asyncio
async def test_initial_state():
    """Test circuit breaker starts in CLOSED state."""
    cb = CircuitBreaker(name="test")
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0
    assert await cb.allow_request() is True


@pytest.mark.asyncio
async def test_record_success_resets_failure_count():
    """Test successful call resets failure count in CLOSED state."""
    cb = CircuitBreaker(name="test", failure_threshold=3)

    await cb.record_failure()
    await cb.record_failure()
    assert cb.failure_count == 2

    await cb.record_success()
    assert cb.failure_count == 0
    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_open_circuit_after_threshold():
    """Test circuit opens after reaching failure threshold."""
    cb = CircuitBreaker(name="test", failure_threshold=3)

    await cb.record_failure()
    await cb.record_failure()
    assert cb.state == CircuitState.CLOSED

    await cb.record_failure()
    assert cb.state == CircuitState.OPEN
    assert await cb.allow_request() is False


# =============================================================================
# HALF_OPEN
# =============================================================================


@pytest.mark.asyncio
async def test_transition_to_half_open_after_recovery_timeout():
    """Test circuit transitions to HALF_OPEN after recovery timeout."""
    cb = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=0.1)

    await cb.record_failure()
    assert cb.state == CircuitState.OPEN

    await asyncio.sleep(0.15)

    assert await cb.allow_request() is True
    assert cb.state == CircuitState.HALF_OPEN


@pytest.mark.asyncio
async def test_half_open_allows_single_trial():
    """Test HALF_OPEN lets one trial call through at a time."""
    cb = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=0.1)

    await cb.record_failure()
    await asyncio.sleep(0.15)

    assert await cb.allow_request() is True
    assert await cb.allow_request() is False


@pytest.mark.asyncio
async def test_half_open_success_closes_circuit():
    cb = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=0.1)

    await cb.record_failure()
    await asyncio.sleep(0.15)
    await cb.allow_request()

    await cb.record_success()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0


@pytest.mark.asyncio
async def test_half_open_failure_reopens_circuit():
    cb = CircuitBreaker(name="test", failure_threshold=5, recovery_timeout=0.1)

    for _ in range(5):
        await cb.record_failure()
    await asyncio.sleep(0.15)
    await cb.allow_request()
    assert cb.state == CircuitState.HALF_OPEN

    await cb.record_failure()
    assert cb.state == CircuitState.OPEN


@pytest.mark.asyncio
async def test_retry_after_seconds():
    """Test retry_after_seconds calculation."""
    cb = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=5.0)
    assert cb.retry_after_seconds() == 0.0

    await cb.record_failure()
    assert 4.5 <= cb.retry_after_seconds() <= 5.0


@pytest.mark.asyncio
async def test_manual_reset():
    cb = CircuitBreaker(name="test", failure_threshold=1)
    await cb.record_failure()
    assert cb.state == CircuitState.OPEN

    await cb.reset()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0
    assert await cb.allow_request() is True


# =============================================================================
# Context manager
# =============================================================================


@pytest.mark.asyncio
async def test_context_manager_success():
    cb = CircuitBreaker(name="test", failure_threshold=2)
    await cb.record_failure()

    async with cb:
        pass

    assert cb.failure_count == 0


@pytest.mark.asyncio
async def test_context_manager_failure():
    """Test an exception inside the block counts as a failure and propagates."""
    cb = CircuitBreaker(name="test", failure_threshold=2)

    with pytest.raises(RuntimeError):
        async with cb:
            raise RuntimeError("upstream")

    assert cb.failure_count == 1


@pytest.mark.asyncio
async def test_context_manager_rejects_when_open():
    cb = CircuitBreaker(name="gemini", failure_threshold=1, recovery_timeout=30)
    await cb.record_failure()

    with pytest.raises(CircuitBreakerError) as exc_info:
        async with cb:
            pytest.fail("block must not run while open")

    assert exc_info.value.name == "gemini"
    assert 0 < exc_info.value.retry_after <= 30
    assert "gemini" in str(exc_info.value)


# =============================================================================
# Registry
# =============================================================================


@pytest.mark.asyncio
async def test_get_circuit_breaker_returns_same_instance():
    first = await get_circuit_breaker("svc", failure_threshold=2)
    second = await get_circuit_breaker("svc", failure_threshold=9)
    assert first is second
    assert second.failure_threshold == 2


@pytest.mark.asyncio
async def test_get_all_and_clear():
    await get_circuit_breaker("one")
    await get_circuit_breaker("two")
    assert set(get_all_circuit_breakers()) == {"one", "two"}

    clear_circuit_breakers()
    assert get_all_circuit_breakers() == {}


@pytest.mark.asyncio
async def test_concurrent_failures():
    """Test concurrent failures are all counted."""
    cb = CircuitBreaker(name="test", failure_threshold=10)
    await asyncio.gather(*(cb.record_failure() for _ in range(10)))
    assert cb.failure_count == 10
    assert cb.state == CircuitState.OPEN
