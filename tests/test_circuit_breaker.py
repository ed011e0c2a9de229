"""
Tests for the provider circuit breaker.

Only provider-health failures (5xx, timeouts, transport errors) count toward
opening a circuit; rate limits and client errors do not.
"""

import pytest

from app.shared.core.exceptions import (
    APIRateLimitError,
    APITimeoutError,
    ExternalAPIError,
)
from app.shared.infrastructure.external_apis.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerException,
    CircuitState,
)


def make_breaker(failure_threshold: int = 3, recovery_timeout: int = 60) -> CircuitBreaker:
    return CircuitBreaker(
        "test_api",
        CircuitBreakerConfig(
            failure_threshold=failure_threshold,
            recovery_timeout_seconds=recovery_timeout,
            minimum_calls_threshold=100,
        ),
    )


def failing(error: Exception):
    async def _call():
        raise error
    return _call


async def ok():
    return {"ok": True}


class TestTripping:
    """Tests for opening the circuit."""

    async def test_opens_after_consecutive_server_errors(self):
        breaker = make_breaker(failure_threshold=3)

        for _ in range(3):
            with pytest.raises(ExternalAPIError):
                await breaker.call(failing(ExternalAPIError("boom", api_name="test", api_status_code=503)))

        assert breaker.get_state() == CircuitState.OPEN

    async def test_open_circuit_fails_fast_without_calling(self):
        breaker = make_breaker(failure_threshold=1)
        with pytest.raises(APITimeoutError):
            await breaker.call(failing(APITimeoutError("test", 5)))

        calls = []

        async def tracked():
            calls.append(1)

        with pytest.raises(CircuitBreakerException) as exc_info:
            await breaker.call(tracked)

        assert calls == []
        assert exc_info.value.error_code == "CIRCUIT_OPEN"
        assert exc_info.value.status_code == 503

    async def test_rate_limit_does_not_trip(self):
        breaker = make_breaker(failure_threshold=2)

        for _ in range(5):
            with pytest.raises(APIRateLimitError):
                await breaker.call(failing(APIRateLimitError("test", retry_after=30)))

        assert breaker.get_state() == CircuitState.CLOSED
        assert breaker.consecutive_failures == 0

    async def test_client_errors_do_not_trip(self):
        breaker = make_breaker(failure_threshold=2)

        for _ in range(5):
            with pytest.raises(ExternalAPIError):
                await breaker.call(failing(ExternalAPIError("bad request", api_name="test", api_status_code=400)))

        assert breaker.get_state() == CircuitState.CLOSED

    async def test_success_resets_consecutive_failures(self):
        breaker = make_breaker(failure_threshold=3)

        for _ in range(2):
            with pytest.raises(ConnectionError):
                await breaker.call(failing(ConnectionError("reset")))
        await breaker.call(ok)

        assert breaker.consecutive_failures == 0
        assert breaker.get_state() == CircuitState.CLOSED


class TestRecovery:
    """Tests for the half-open trial call."""

    async def test_successful_trial_call_closes_circuit(self):
        breaker = make_breaker(recovery_timeout=0)
        breaker.force_open("test")

        result = await breaker.call(ok)

        assert result == {"ok": True}
        assert breaker.get_state() == CircuitState.CLOSED

    async def test_failed_trial_call_reopens_circuit(self):
        breaker = make_breaker(recovery_timeout=0)
        breaker.force_open("test")

        with pytest.raises(TimeoutError):
            await breaker.call(failing(TimeoutError("slow")))

        assert breaker.get_state() == CircuitState.OPEN

    async def test_stays_open_before_recovery_timeout(self):
        breaker = make_breaker(recovery_timeout=3600)
        breaker.force_open("test")

        with pytest.raises(CircuitBreakerException):
            await breaker.call(ok)


class TestMetrics:
    async def test_metrics_are_json_friendly(self):
        breaker = make_breaker()
        await breaker.call(ok)

        metrics = breaker.get_metrics()

        assert metrics["name"] == "test_api"
        assert metrics["state"] == "closed"
        assert metrics["recent_call_count"] == 1
        assert metrics["last_failure_time"] is None
