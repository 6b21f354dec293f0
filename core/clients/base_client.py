"""
Base Client Classes

Base class for HTTP clients with common patterns for initialization,
retry logic and error handling.
"""

import asyncio
from typing import Dict, Any, Optional
from abc import ABC
import httpx
from core.logging import log


class BaseHTTPClient(ABC):
    """
    Base class for HTTP-based API clients.

    Provides common functionality:
    - HTTP client management
    - Retry logic
    - Request timeout management
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize base HTTP client.

        Args:
            config: Configuration dict with:
                - base_url: Base URL for API
                - timeout: Request timeout in seconds (default: 30.0)
                - retry_attempts: Number of retry attempts (default: 3)
                - retry_delay: Delay between retries in seconds (default: 1.0)
                - headers: Default headers sent with every request
                - transport: Optional httpx transport (mock transports in tests)
        """
        config = config or {}
        self.base_url = config.get("base_url", "").rstrip("/")
        self.timeout = config.get("timeout", 30.0)
        self.retry_attempts = max(1, int(config.get("retry_attempts", 3)))
        self.retry_delay = config.get("retry_delay", 1.0)
        self.headers: Dict[str, str] = dict(config.get("headers") or {})
        self._transport: Optional[httpx.AsyncBaseTransport] = config.get("transport")
        self._client: Optional[httpx.AsyncClient] = None
        self._client_loop_id: Optional[int] = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """
        Ensure HTTP client is initialized and bound to current event loop.

        Returns:
            httpx.AsyncClient instance
        """
        current_loop_id = id(asyncio.get_running_loop())

        if self._client is None or self._client_loop_id != current_loop_id:
            if self._client is not None:
                try:
                    await self._client.aclose()
                except RuntimeError:
                    # Client was bound to a loop that is already closed
                    pass

            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.headers,
                transport=self._transport,
            )
            self._client_loop_id = current_loop_id

        return self._client

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic.

        Only transport failures are retried; HTTP status errors surface at once.

        Raises:
            httpx.HTTPError: If request fails after all retries
        """
        client = await self._ensure_client()

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
            except (httpx.TimeoutException, httpx.RemoteProtocolError,
                    httpx.ConnectError, httpx.NetworkError) as e:
                if attempt < self.retry_attempts:
                    log.warning(
                        f"Request failed (attempt {attempt}/{self.retry_attempts}): {e}. "
                        f"Retrying in {self.retry_delay}s..."
                    )
                    await asyncio.sleep(self.retry_delay)
                else:
                    log.error(f"Request failed after {self.retry_attempts} attempts: {e}")
                    raise
        raise RuntimeError("unreachable")

    async def close(self):
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._client_loop_id = None
