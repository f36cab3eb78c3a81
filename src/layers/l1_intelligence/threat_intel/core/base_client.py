"""Base HTTP client for external vulnerability and package metadata services."""

import asyncio
from typing import Any

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from src.core.exceptions.errors import ExternalServiceError
from src.core.logger.logger import get_logger
from src.layers.l1_intelligence.threat_intel.core.rate_limiter import RateLimiter

logger = get_logger(__name__)

USER_AGENT = "RepoRisk/0.1.0 (Security Risk Aggregation)"

# Statuses worth another attempt; everything else >= 400 fails immediately
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class BaseClient:
    """Base class for JSON API clients.

    Provides a lazily created aiohttp session, rate limiting, per-request
    timeouts and retries with exponential backoff. Failures surface as
    :class:`ExternalServiceError` carrying the service name and HTTP status.
    """

    service_name = "http"

    def __init__(
        self,
        base_url: str | None = None,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 30.0,
        max_retries: int = 1,
        retry_delay: float = 1.0,
    ) -> None:
        """Initialize the base client.

        Args:
            base_url: Base URL for relative request paths.
            rate_limiter: Rate limiter instance. Created if not provided.
            timeout: Total request timeout in seconds.
            max_retries: Maximum number of attempts per request.
            retry_delay: Base delay between retries (exponential backoff).
        """
        self.base_url = base_url
        self.rate_limiter = rate_limiter or RateLimiter()
        self.timeout = ClientTimeout(total=timeout)
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._session: ClientSession | None = None

    async def __aenter__(self) -> "BaseClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _build_url(self, url: str) -> str:
        if self.base_url and not url.startswith("http"):
            if not url:
                return self.base_url
            return f"{self.base_url.rstrip('/')}/{url.lstrip('/')}"
        return url

    async def _request(
        self,
        url: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | str:
        """Make an HTTP request with rate limiting and retries.

        Args:
            url: Absolute URL or path relative to ``base_url``.
            method: HTTP method.
            params: Query parameters.
            headers: Additional headers.
            json_data: JSON body.
            **kwargs: Additional arguments for aiohttp.

        Returns:
            Decoded JSON body, or text for non-JSON responses.

        Raises:
            ExternalServiceError: On a non-retryable HTTP status, malformed
                JSON, or when all attempts fail.
        """
        session = await self._ensure_session()
        full_url = self._build_url(url)
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            await self.rate_limiter.acquire()
            try:
                logger.debug(f"Request: {method} {full_url} (attempt {attempt})")
                async with session.request(
                    method,
                    full_url,
                    params=params,
                    headers=headers,
                    json=json_data,
                    **kwargs,
                ) as response:
                    return await self._handle_response(response)

            except ExternalServiceError as e:
                if e.status not in RETRYABLE_STATUSES:
                    raise
                last_error = e
            except (ClientError, asyncio.TimeoutError) as e:
                last_error = e

            logger.warning(
                f"{self.service_name} request failed "
                f"(attempt {attempt}/{self.max_retries}): {last_error}"
            )
            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * (2 ** (attempt - 1)))

        raise ExternalServiceError(
            f"Request failed after {self.max_retries} attempts: {last_error}",
            service=self.service_name,
            status=getattr(last_error, "status", None),
            details={"url": full_url},
        ) from last_error

    async def _handle_response(self, response: ClientResponse) -> dict[str, Any] | str:
        if response.status >= 400:
            body = await response.text()
            logger.debug(f"HTTP {response.status}: {body[:500]}")
            raise ExternalServiceError(
                f"HTTP {response.status}: {response.reason}",
                service=self.service_name,
                status=response.status,
                details={"url": str(response.url)},
            )

        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            return await response.text()

        try:
            return await response.json()
        except (ClientError, ValueError) as e:
            raise ExternalServiceError(
                f"Malformed JSON response: {e}",
                service=self.service_name,
                status=response.status,
            ) from e

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | str:
        """Make a GET request."""
        return await self._request(url, "GET", params=params, headers=headers, **kwargs)

    async def post(
        self,
        url: str,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | str:
        """Make a POST request with a JSON body."""
        return await self._request(url, "POST", json_data=json_data, headers=headers, **kwargs)
