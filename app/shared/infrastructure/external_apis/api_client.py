# 📄 File: app/shared/infrastructure/external_apis/api_client.py

# 🧭 Purpose (Layman Explanation):
# A careful messenger for talking to PlantNet and Gemini over the internet: it
# never waits forever, tries again when the line drops, and translates every
# kind of failure into a clear error the rest of the app understands.

# 🧪 Purpose (Technical Summary):
# Generic async HTTP client on aiohttp with a bounded ClientTimeout, tenacity
# retries for transport failures and timeouts only, status-code mapping onto
# the ExternalAPIError hierarchy, multipart uploads, raw byte downloads and
# request statistics.

# 🔗 Dependencies:
# - aiohttp: Async HTTP client
# - tenacity: Retry logic and backoff strategies

# 🔄 Connected Modules / Calls From:
# Used by: PlantNet and Gemini adapters, app.main (startup/shutdown)

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.shared.core.exceptions import (
    APIAuthenticationError,
    APIConnectionError,
    APIQuotaExceededError,
    APIRateLimitError,
    APITimeoutError,
    ExternalAPIError,
)
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)

# (field_name, value, filename, content_type)
FormField = Tuple[str, Union[str, bytes], Optional[str], Optional[str]]


class APIClient:
    """
    Generic async HTTP client for external API integrations.

    Features:
    - Bounded timeout on every request
    - Automatic retry with exponential backoff for timeouts and
      connection failures (never for HTTP error answers such as 429)
    - Client-side per-minute request budget
    - Status code mapping to the exception hierarchy
    - Request/response logging and performance statistics
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        api_name: str,
        timeout: float = 30,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        rate_limit_per_minute: int = 60,
    ):
        """Initialize API client with configuration."""
        self.base_url = base_url.rstrip('/') + '/'
        self.api_key = api_key
        self.api_name = api_name
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff

        self.rate_limit_per_minute = rate_limit_per_minute
        self._request_timestamps: List[datetime] = []

        self.session: Optional[ClientSession] = None

        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'retried_requests': 0,
            'average_response_time': 0.0,
            'last_request_time': None,
            'rate_limit_hits': 0
        }

    async def initialize(self):
        """Initialize the client session."""
        if self.session is not None and not self.session.closed:
            return

        connector = aiohttp.TCPConnector(
            limit=10,  # Connection pool size
            limit_per_host=5,
            ttl_dns_cache=300,
        )

        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            connector=connector,
        )
        logger.info(f"API client initialized for {self.api_name}")

    def _get_default_headers(self, with_credentials: bool = True) -> Dict[str, str]:
        """Get default headers for requests."""
        headers = {
            'User-Agent': f'PlantSightingsApp/1.0 ({self.api_name}-client)',
            'Accept': 'application/json',
        }

        if self.api_key and with_credentials:
            name = self.api_name.lower()
            if 'gemini' in name:
                headers['x-goog-api-key'] = self.api_key
            elif 'plantnet' in name:
                # PlantNet authenticates with the api-key query parameter
                pass
            else:
                headers['Authorization'] = f'Bearer {self.api_key}'

        return headers

    def _get_default_params(self, with_credentials: bool = True) -> Dict[str, str]:
        if with_credentials and self.api_key and 'plantnet' in self.api_name.lower():
            return {'api-key': self.api_key}
        return {}

    def _check_rate_limits(self):
        """Check and enforce the client-side per-minute budget."""
        now = datetime.now(timezone.utc)
        minute_ago = now - timedelta(minutes=1)
        self._request_timestamps = [
            ts for ts in self._request_timestamps if ts > minute_ago
        ]

        if len(self._request_timestamps) >= self.rate_limit_per_minute:
            wait_time = 60 - (now - self._request_timestamps[0]).total_seconds()
            self.stats['rate_limit_hits'] += 1
            raise APIRateLimitError(self.api_name, retry_after=max(1, int(wait_time)))

        self._request_timestamps.append(now)

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        # Plain concatenation: "model:generateContent" would parse as a URL scheme
        return self.base_url + endpoint.lstrip('/')

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        json_body: Optional[Dict] = None,
        form_fields: Optional[List[FormField]] = None,
        timeout: Optional[float] = None,
        expect: str = 'json',
    ) -> Any:
        """
        Make an HTTP request, retrying transport failures.

        Returns:
            Parsed JSON (``expect='json'``) or raw bytes (``expect='bytes'``)
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_backoff, min=0, max=10),
            retry=retry_if_exception_type((APITimeoutError, APIConnectionError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        attempt_number = 0
        async for attempt in retrying:
            with attempt:
                attempt_number += 1
                if attempt_number > 1:
                    self.stats['retried_requests'] += 1
                return await self._send_once(
                    method, endpoint, params, json_body, form_fields, timeout, expect
                )

    async def _send_once(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict],
        json_body: Optional[Dict],
        form_fields: Optional[List[FormField]],
        timeout: Optional[float],
        expect: str,
    ) -> Any:
        await self.initialize()
        self._check_rate_limits()

        url = self._build_url(endpoint)
        # Never send our key to foreign hosts such as signed photo URLs
        own_host = url.startswith(self.base_url)
        request_kwargs: Dict[str, Any] = {
            'method': method,
            'url': url,
            'headers': self._get_default_headers(with_credentials=own_host),
            'params': {**self._get_default_params(with_credentials=own_host), **(params or {})},
        }

        if json_body is not None:
            request_kwargs['json'] = json_body
        elif form_fields:
            # FormData is single-use, rebuild it for every attempt
            form = aiohttp.FormData()
            for name, value, filename, content_type in form_fields:
                form.add_field(name, value, filename=filename, content_type=content_type)
            request_kwargs['data'] = form

        if timeout:
            request_kwargs['timeout'] = ClientTimeout(total=timeout)

        start_time = time.time()
        status_code: Optional[int] = None

        try:
            async with self.session.request(**request_kwargs) as response:
                status_code = response.status
                await self._handle_response_status(response)

                if expect == 'bytes':
                    payload: Any = await response.read()
                else:
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        payload = {'raw_response': await response.text()}

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._update_stats(False, duration_ms)
            transformed = self._transform_exception(e, method, url)
            logger.performance.log_external_api_call(
                self.api_name, url, method, status_code, duration_ms, False,
                extra={'error_type': type(transformed).__name__}
            )
            if transformed is e:
                raise
            raise transformed from e

        duration_ms = (time.time() - start_time) * 1000
        self._update_stats(True, duration_ms)
        logger.performance.log_external_api_call(
            self.api_name, url, method, status_code, duration_ms, True
        )
        return payload

    async def _handle_response_status(self, response: aiohttp.ClientResponse):
        """Handle HTTP response status codes."""
        if 200 <= response.status < 300:
            return

        if response.status in (401, 403):
            raise APIAuthenticationError(self.api_name, response.status)

        if response.status == 429:
            retry_after = response.headers.get('Retry-After')
            raise APIRateLimitError(
                self.api_name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if response.status in (402, 509):
            raise APIQuotaExceededError(self.api_name)

        response_text = (await response.text())[:500]
        kind = "Client" if response.status < 500 else "Server"
        raise ExternalAPIError(
            f"{kind} error for {self.api_name} ({response.status})",
            api_name=self.api_name,
            api_status_code=response.status,
            api_response={'body': response_text}
        )

    def _transform_exception(self, exception: Exception, method: str, url: str) -> Exception:
        """Transform transport exceptions to API exceptions."""
        if isinstance(exception, asyncio.TimeoutError):
            return APITimeoutError(self.api_name, self.timeout)
        if isinstance(exception, aiohttp.ClientError):
            return APIConnectionError(self.api_name, str(exception) or type(exception).__name__)
        return exception

    def _update_stats(self, success: bool, duration_ms: float):
        response_time = duration_ms / 1000
        self.stats['total_requests'] += 1
        self.stats['last_request_time'] = datetime.now(timezone.utc).isoformat()
        if success:
            self.stats['successful_requests'] += 1
        else:
            self.stats['failed_requests'] += 1

        if self.stats['average_response_time'] == 0:
            self.stats['average_response_time'] = response_time
        else:
            self.stats['average_response_time'] = (
                self.stats['average_response_time'] * 0.7 + response_time * 0.3
            )

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict] = None,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """Make GET request."""
        return await self._make_request('GET', endpoint, params=params, timeout=timeout)

    async def post(
        self,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """Make POST request with a JSON body."""
        return await self._make_request(
            'POST', endpoint, params=params, json_body=data, timeout=timeout
        )

    async def upload_file(
        self,
        endpoint: str,
        file_data: bytes,
        filename: str,
        field_name: str = 'file',
        content_type: Optional[str] = None,
        additional_fields: Optional[Dict[str, str]] = None,
        params: Optional[Dict] = None,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """Upload file using multipart/form-data."""
        form_fields: List[FormField] = [(field_name, file_data, filename, content_type)]
        for key, value in (additional_fields or {}).items():
            form_fields.append((key, str(value), None, None))

        return await self._make_request(
            'POST', endpoint, params=params, form_fields=form_fields, timeout=timeout
        )

    async def fetch_bytes(self, url: str, timeout: Optional[float] = None) -> bytes:
        """Download a binary resource (for example a signed photo URL)."""
        return await self._make_request('GET', url, timeout=timeout, expect='bytes')

    def get_stats(self) -> Dict[str, Any]:
        """Get client performance statistics."""
        return {
            **self.stats,
            'api_name': self.api_name,
            'error_rate': (
                self.stats['failed_requests'] / max(self.stats['total_requests'], 1)
            ) * 100,
        }

    async def close(self):
        """Close the client session and cleanup resources."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info(f"API client closed for {self.api_name}")


# Factory function for creating API clients
def create_api_client(
    api_name: str,
    base_url: str,
    api_key: Optional[str],
    **kwargs
) -> APIClient:
    """Factory function to create configured API client."""
    return APIClient(
        base_url=base_url,
        api_key=api_key,
        api_name=api_name,
        **kwargs
    )


def init_api_clients(failure_threshold: int = 5, recovery_timeout: int = 60) -> bool:
    """
    Register circuit breakers for the identification providers.

    Returns:
        True if initialization successful
    """
    from .circuit_breaker import create_api_circuit_breaker

    for api_name in ("plantnet", "gemini"):
        create_api_circuit_breaker(
            api_name,
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout
        )

    logger.info("✅ External API circuit breakers registered")
    return True


async def cleanup_api_clients(clients: List[APIClient]) -> None:
    """
    Close provider HTTP sessions and reset circuit breaker metrics.
    """
    from .circuit_breaker import circuit_breaker_manager

    for client in clients:
        await client.close()
    circuit_breaker_manager.reset_all_metrics()

    logger.info("✅ External API clients cleanup completed")
