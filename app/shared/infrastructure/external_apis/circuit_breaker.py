# 📄 File: app/shared/infrastructure/external_apis/circuit_breaker.py
# 🧭 Purpose (Layman Explanation):
# Works like a fuse box for PlantNet and Gemini: when one keeps failing we stop
# calling it for a while and go straight to the next option, then carefully try
# it again later.
# 🧪 Purpose (Technical Summary):
# Circuit Breaker pattern (CLOSED -> OPEN -> HALF_OPEN -> CLOSED) for provider
# calls, tripping on consecutive failures or a windowed failure rate. Rate-limit
# answers and 4xx client errors are passed through without counting against
# the provider.
# 🔗 Dependencies:
# time, enum, dataclasses, threading, collections
# 🔄 Connected Modules / Calls From:
# api_client.py (registration at startup), the PlantNet/Gemini adapters in
# app.modules.plant_identification.infrastructure.external, health endpoint

import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.shared.core.exceptions import APIRateLimitError, ExternalAPIError
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states"""
    CLOSED = "closed"        # Normal operation, requests flow through
    OPEN = "open"            # Circuit tripped, requests fail fast
    HALF_OPEN = "half_open"  # Testing if service recovered


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker behavior"""
    # Consecutive failures that open the circuit
    failure_threshold: int = 5
    # Failure rate over the window that opens the circuit
    failure_rate_threshold: float = 0.5
    minimum_calls_threshold: int = 10

    failure_window_seconds: int = 60
    recovery_timeout_seconds: int = 60

    # Successful trial calls needed in HALF_OPEN before closing
    half_open_max_calls: int = 1


class CircuitBreakerException(ExternalAPIError):
    """Exception raised when circuit breaker is open"""
    def __init__(self, message: str, circuit_name: str, state: CircuitState):
        self.circuit_name = circuit_name
        self.state = state
        super().__init__(
            message=message,
            api_name=circuit_name,
            details={"circuit_state": state.value},
            status_code=503,
            error_code="CIRCUIT_OPEN"
        )


class CircuitBreakerMetrics:
    """Metrics collector for circuit breaker performance"""

    def __init__(self, max_records: int = 1000):
        self.call_records = deque(maxlen=max_records)
        self.state_changes = deque(maxlen=100)
        self._lock = Lock()

    def record_call(self, success: bool, response_time: float):
        with self._lock:
            self.call_records.append({
                'timestamp': time.time(),
                'success': success,
                'response_time': response_time,
            })

    def record_state_change(self, old_state: CircuitState, new_state: CircuitState, reason: str):
        with self._lock:
            self.state_changes.append({
                'timestamp': time.time(),
                'old_state': old_state.value,
                'new_state': new_state.value,
                'reason': reason
            })

    def _recent(self, window_seconds: int) -> List[Dict[str, Any]]:
        cutoff_time = time.time() - window_seconds
        return [r for r in self.call_records if r['timestamp'] > cutoff_time]

    def get_failure_rate(self, window_seconds: int) -> float:
        """Calculate failure rate in the given time window"""
        with self._lock:
            recent_calls = self._recent(window_seconds)
            if not recent_calls:
                return 0.0
            failed_calls = sum(1 for r in recent_calls if not r['success'])
            return failed_calls / len(recent_calls)

    def get_call_count(self, window_seconds: int) -> int:
        with self._lock:
            return len(self._recent(window_seconds))


class CircuitBreaker:
    """
    Circuit breaker for one external provider.

    Implements the three states: CLOSED -> OPEN -> HALF_OPEN -> CLOSED
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0
        self.last_failure_time = 0.0
        self.last_state_change_time = time.time()
        self.half_open_call_count = 0
        self.half_open_success_count = 0
        self.metrics = CircuitBreakerMetrics()
        self._lock = Lock()

        logger.info(f"Circuit breaker '{name}' initialized in CLOSED state")

    def _should_trip(self) -> bool:
        """Check if circuit breaker should trip to OPEN state"""
        if self.consecutive_failures >= self.config.failure_threshold:
            return True

        call_count = self.metrics.get_call_count(self.config.failure_window_seconds)
        if call_count < self.config.minimum_calls_threshold:
            return False

        failure_rate = self.metrics.get_failure_rate(self.config.failure_window_seconds)
        return failure_rate >= self.config.failure_rate_threshold

    def _should_attempt_reset(self) -> bool:
        """Check if circuit breaker should attempt reset to HALF_OPEN"""
        time_since_open = time.time() - self.last_state_change_time
        return time_since_open >= self.config.recovery_timeout_seconds

    def _transition_to_state(self, new_state: CircuitState, reason: str):
        """Transition circuit breaker to new state"""
        old_state = self.state
        self.state = new_state
        self.last_state_change_time = time.time()

        if new_state == CircuitState.HALF_OPEN:
            self.half_open_call_count = 0
            self.half_open_success_count = 0
        elif new_state == CircuitState.CLOSED:
            self.consecutive_failures = 0

        self.metrics.record_state_change(old_state, new_state, reason)

        logger.warning(
            f"Circuit breaker '{self.name}' transitioned from {old_state.value} "
            f"to {new_state.value}: {reason}"
        )

    def _record_success(self, response_time: float):
        self.metrics.record_call(True, response_time)

        with self._lock:
            self.consecutive_failures = 0
            if self.state == CircuitState.HALF_OPEN:
                self.half_open_success_count += 1
                if self.half_open_success_count >= self.config.half_open_max_calls:
                    self._transition_to_state(CircuitState.CLOSED, "Successful recovery verified")

    def _record_failure(self, error: Exception, response_time: float):
        self.metrics.record_call(False, response_time)
        self.last_failure_time = time.time()

        with self._lock:
            self.consecutive_failures += 1
            if self.state == CircuitState.HALF_OPEN:
                # Any failure in half-open state trips the circuit
                self._transition_to_state(
                    CircuitState.OPEN, f"Failure during recovery test: {type(error).__name__}"
                )
            elif self.state == CircuitState.CLOSED and self._should_trip():
                self._transition_to_state(
                    CircuitState.OPEN, f"Failure threshold exceeded: {type(error).__name__}"
                )

    @staticmethod
    def _counts_as_failure(exception: Exception) -> bool:
        """
        Provider health failures: timeouts, transport errors and 5xx.

        A 429 is a backoff signal and a 4xx is our own request's fault, so
        neither says anything about the provider's health.
        """
        if isinstance(exception, APIRateLimitError):
            return False
        if isinstance(exception, ExternalAPIError):
            status_code = exception.api_status_code
            return status_code is None or status_code >= 500
        return isinstance(exception, (ConnectionError, TimeoutError, OSError))

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute a function call through the circuit breaker

        Args:
            func: Async function to call
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Function result

        Raises:
            CircuitBreakerException: When circuit is open
            Original exception: When call fails
        """
        with self._lock:
            if self.state == CircuitState.OPEN and self._should_attempt_reset():
                self._transition_to_state(CircuitState.HALF_OPEN, "Attempting recovery")

            if self.state == CircuitState.OPEN:
                raise CircuitBreakerException(
                    f"Circuit breaker '{self.name}' is OPEN. "
                    f"Last failure: {datetime.fromtimestamp(self.last_failure_time).isoformat()}",
                    self.name,
                    CircuitState.OPEN
                )

            if self.state == CircuitState.HALF_OPEN:
                if self.half_open_call_count >= self.config.half_open_max_calls:
                    raise CircuitBreakerException(
                        f"Circuit breaker '{self.name}' is HALF_OPEN and max test calls exceeded",
                        self.name,
                        CircuitState.HALF_OPEN
                    )
                self.half_open_call_count += 1

        start_time = time.time()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            response_time = time.time() - start_time
            if self._counts_as_failure(e):
                self._record_failure(e, response_time)
            else:
                self.metrics.record_call(True, response_time)
            raise

        self._record_success(time.time() - start_time)
        return result

    def force_open(self, reason: str = "Manually opened"):
        with self._lock:
            self._transition_to_state(CircuitState.OPEN, reason)

    def get_state(self) -> CircuitState:
        """Get current circuit breaker state"""
        return self.state

    def get_metrics(self) -> Dict[str, Any]:
        """Get circuit breaker metrics and statistics"""
        return {
            'name': self.name,
            'state': self.state.value,
            'consecutive_failures': self.consecutive_failures,
            'last_state_change': datetime.fromtimestamp(self.last_state_change_time).isoformat(),
            'last_failure_time': (
                datetime.fromtimestamp(self.last_failure_time).isoformat()
                if self.last_failure_time else None
            ),
            'failure_rate': self.metrics.get_failure_rate(self.config.failure_window_seconds),
            'recent_call_count': self.metrics.get_call_count(self.config.failure_window_seconds),
        }

    def reset_metrics(self):
        """Reset all metrics and statistics"""
        with self._lock:
            self.metrics = CircuitBreakerMetrics()
            self.consecutive_failures = 0
            logger.info(f"Circuit breaker '{self.name}' metrics reset")


class CircuitBreakerManager:
    """
    Manager for multiple circuit breakers
    """

    def __init__(self):
        self.circuit_breakers: Dict[str, CircuitBreaker] = {}
        self._lock = Lock()

    def get_circuit_breaker(self, name: str, config: Optional[CircuitBreakerConfig] = None) -> CircuitBreaker:
        """
        Get or create a circuit breaker by name

        Args:
            name: Circuit breaker name
            config: Configuration used only when the breaker is created

        Returns:
            CircuitBreaker instance
        """
        with self._lock:
            if name not in self.circuit_breakers:
                self.circuit_breakers[name] = CircuitBreaker(name, config)
            return self.circuit_breakers[name]

    def get_all_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Get metrics for all circuit breakers"""
        with self._lock:
            return {name: cb.get_metrics() for name, cb in self.circuit_breakers.items()}

    def get_unhealthy_circuits(self) -> List[str]:
        """Get names of unhealthy (OPEN/HALF_OPEN) circuit breakers"""
        with self._lock:
            return [name for name, cb in self.circuit_breakers.items()
                    if cb.get_state() != CircuitState.CLOSED]

    def reset_all_metrics(self):
        """Reset metrics for all circuit breakers"""
        with self._lock:
            for cb in self.circuit_breakers.values():
                cb.reset_metrics()


# Global circuit breaker manager instance
circuit_breaker_manager = CircuitBreakerManager()


def create_api_circuit_breaker(api_name: str,
                               failure_threshold: int = 5,
                               recovery_timeout: int = 60) -> CircuitBreaker:
    """
    Create a circuit breaker configured for API calls

    Args:
        api_name: API service name
        failure_threshold: Consecutive failures before opening
        recovery_timeout: Seconds to wait before a recovery trial call

    Returns:
        Configured CircuitBreaker
    """
    config = CircuitBreakerConfig(
        failure_threshold=failure_threshold,
        failure_rate_threshold=0.5,
        failure_window_seconds=60,
        recovery_timeout_seconds=recovery_timeout,
        half_open_max_calls=1,
        minimum_calls_threshold=10
    )

    return circuit_breaker_manager.get_circuit_breaker(f"{api_name}_api", config)
