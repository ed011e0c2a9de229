# 📄 File: app/modules/plant_identification/infrastructure/external/provider_adapter.py
# 🧭 Purpose (Layman Explanation):
# The common routine every identification service goes through: send the
# question, wait a bounded time, and turn whatever comes back (an answer,
# "slow down", garbage, silence) into one of a few clear outcomes.
# 🧪 Purpose (Technical Summary):
# Base class for provider adapters implementing the shared
# request -> circuit breaker -> parse/validate -> map-error pipeline.
# Provider failures never escape as exceptions; they become ProviderOutcome
# values. Malformed payloads are logged separately from transport failures.
# 🔗 Dependencies:
# pydantic (ValidationError), app.shared.infrastructure.external_apis
# (APIClient, CircuitBreaker), app.shared.core.exceptions, domain outcomes
# 🔄 Connected Modules / Calls From:
# plantnet_client.py, gemini_client.py

from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from app.modules.plant_identification.domain.models.identification import (
    OutcomeKind,
    ProviderOutcome,
)
from app.shared.core.exceptions import APIRateLimitError, ExternalAPIError
from app.shared.infrastructure.external_apis.api_client import APIClient
from app.shared.infrastructure.external_apis.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerException,
)
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)

# Parse failures that mean "the provider answered, but not in the agreed shape"
MALFORMED_ERRORS = (PydanticValidationError, ValueError, KeyError, TypeError, IndexError)


class ProviderAdapter:
    """
    Shared plumbing for external identification providers.

    Subclasses build the request and parse the payload; this class decides
    whether the provider is configured, routes the call through the circuit
    breaker and maps every failure to a tagged outcome.
    """

    api_name: str = "provider"

    def __init__(self, client: Optional[APIClient], circuit_breaker: Optional[CircuitBreaker] = None):
        self.client = client
        self.circuit_breaker = circuit_breaker

    @property
    def name(self) -> str:
        return self.api_name

    @property
    def is_configured(self) -> bool:
        return self.client is not None and bool(self.client.api_key)

    def not_configured(self) -> ProviderOutcome:
        return ProviderOutcome.failure(
            OutcomeKind.NOT_CONFIGURED, self.api_name, message=f"{self.api_name} API not configured"
        )

    async def _execute(
        self,
        send: Callable[[], Awaitable[Any]],
        parse: Callable[[Any], ProviderOutcome],
    ) -> ProviderOutcome:
        """
        Run one provider call through the pipeline.

        Args:
            send: Coroutine factory performing the HTTP exchange
            parse: Turns the raw payload into an outcome; may raise on bad shape

        Returns:
            The parsed outcome, or the mapped failure outcome
        """
        if not self.is_configured:
            return self.not_configured()

        try:
            if self.circuit_breaker is not None:
                payload = await self.circuit_breaker.call(send)
            else:
                payload = await send()
        except ExternalAPIError as e:
            return self._map_error(e)

        try:
            return parse(payload)
        except MALFORMED_ERRORS as e:
            logger.warning(
                f"Malformed {self.api_name} response: {e}",
                api_name=self.api_name,
                error_type=type(e).__name__,
            )
            return ProviderOutcome.failure(
                OutcomeKind.MALFORMED_RESPONSE, self.api_name, message=f"Unexpected {self.api_name} response"
            )

    def _map_error(self, error: ExternalAPIError) -> ProviderOutcome:
        """Translate a transport/API failure into an outcome."""
        if isinstance(error, APIRateLimitError):
            logger.warning(f"{self.api_name} rate limit hit")
            return ProviderOutcome.failure(OutcomeKind.RATE_LIMITED, self.api_name, message=error.message)

        if isinstance(error, CircuitBreakerException):
            logger.warning(f"{self.api_name} circuit open; skipping call")
        else:
            logger.error(
                f"{self.api_name} call failed: {error.message}",
                api_name=self.api_name,
                api_status_code=error.api_status_code,
            )
        return ProviderOutcome.failure(OutcomeKind.UNAVAILABLE, self.api_name, message=error.message)

    async def _download_image(self, image_url: str) -> bytes:
        """
        Fetch the photo outside the circuit breaker.

        A storage hiccup says nothing about the provider's health.
        """
        return await self.client.fetch_bytes(image_url)
