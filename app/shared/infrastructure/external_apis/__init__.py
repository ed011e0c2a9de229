# 📄 File: app/shared/infrastructure/external_apis/__init__.py

# 🧭 Purpose (Layman Explanation):
# The toolkit for talking to outside services such as PlantNet and Gemini
# safely and patiently.

# 🧪 Purpose (Technical Summary):
# Exports the aiohttp API client and the circuit breaker primitives used by
# the identification provider adapters.

# 🔗 Dependencies:
# - api_client: Generic HTTP client with retry logic
# - circuit_breaker: Circuit breaker for API resilience

# 🔄 Connected Modules / Calls From:
# Used by: plant identification provider adapters, app.main

"""
External APIs Infrastructure Module

Key Features:
- Bounded timeouts and transport retries
- Circuit breaker pattern for resilience
- Centralized error mapping
- Performance logging
"""

from .api_client import APIClient, cleanup_api_clients, create_api_client, init_api_clients
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerException,
    CircuitState,
    circuit_breaker_manager,
    create_api_circuit_breaker,
)

__all__ = [
    "APIClient",
    "cleanup_api_clients",
    "create_api_client",
    "init_api_clients",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerException",
    "CircuitState",
    "circuit_breaker_manager",
    "create_api_circuit_breaker",
]
