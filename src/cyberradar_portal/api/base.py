import asyncio
import random
from typing import Any, Self

import httpx
import structlog

from cyberradar_portal.api.exceptions import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
)

logger = structlog.get_logger(__name__)


def retry_after_seconds(headers: Any) -> float | None:
    """Server-suggested wait in seconds.

    `Retry-After` is in seconds; Cosmos DB sends `x-ms-retry-after-ms` in
    milliseconds.
    """
    for name, scale in (("Retry-After", 1.0), ("x-ms-retry-after-ms", 1000.0)):
        value = headers.get(name)
        if not value:
            continue
        try:
            return float(value) / scale
        except ValueError:
            continue
    return None


class ServiceClient:
    """Async HTTP client base with retry on throttling.

    Use as an async context manager. One instance is meant to live for the
    whole process and be shared by every request handler.
    """

    MAX_RETRIES = 3
    BASE_BACKOFF = 1.0
    MAX_JITTER = 0.5

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self, method: str, path: str) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        url = f"{self.base_url}{path}"

        retries = 0
        while True:
            request_headers = {**self._headers(method, path), **(headers or {})}
            response = await self._client.request(
                method, url, headers=request_headers, json=json, params=params
            )

            if response.status_code == 429:
                retry_after = retry_after_seconds(response.headers)
                if retries >= self.MAX_RETRIES:
                    raise RateLimitError(
                        "Rate limit exceeded after max retries",
                        retry_after=retry_after,
                    )

                delay = self.BASE_BACKOFF * (2**retries) + random.uniform(0, self.MAX_JITTER)
                logger.warning("request_throttled", url=url, attempt=retries + 1, delay=delay)
                await asyncio.sleep(delay)
                retries += 1
                continue

            if response.status_code in (401, 403):
                raise AuthenticationError("Invalid or expired credentials")

            if response.status_code == 404:
                raise NotFoundError("Resource not found")

            response.raise_for_status()
            return response
