"""Base HTTP client with retry and rate limiting support."""
import asyncio
import logging
from typing import Any, Optional
from abc import ABC, abstractmethod

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Minimum-interval rate limiter.

    Serializes callers with an asyncio.Lock and spaces calls by at least
    1 / calls_per_second, even when requests are issued via gather().
    """

    def __init__(self, calls_per_second: float = 5.0):
        self.calls_per_second = calls_per_second
        self.min_interval = 1.0 / calls_per_second
        self._lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._last_call_time: float = 0.0

    def _get_lock(self) -> asyncio.Lock:
        """Return a lock bound to the running event loop."""
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if self._lock is None or self._loop is not current_loop:
            self._lock = asyncio.Lock()
            self._loop = current_loop
            self._last_call_time = 0.0

        return self._lock

    async def acquire(self):
        lock = self._get_lock()
        async with lock:
            loop = asyncio.get_running_loop()
            now = loop.time()
            wait_time = self.min_interval - (now - self._last_call_time)
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self._last_call_time = asyncio.get_running_loop().time()


class BaseAPIClient(ABC):
    """Base class for API clients with retry and rate limiting.

    Transient transport errors (timeouts, connection failures) are retried
    with exponential backoff. HTTP status errors are raised to the subclass,
    which decides how to degrade.
    """

    def __init__(
        self,
        base_url: str,
        rate_limit: float = 5.0,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = RateLimiter(rate_limit)
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    def get_headers(self) -> dict[str, str]:
        """Return headers for API requests. Override in subclasses."""
        pass

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json_data: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request with retry and rate limiting."""
        await self.rate_limiter.acquire()

        request_headers = self.get_headers()
        if headers:
            request_headers.update(headers)

        try:
            response = await self.client.request(
                method=method,
                url=path,
                params=params,
                json=json_data,
                headers=request_headers,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code} for {method} {path}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {path}: {e}")
            raise

    async def get(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        return await self._request("GET", path, params=params, headers=headers)
