"""JSON GET helper with a TTL memo cache, a request timeout and capped exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final

import httpx

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS: Final[float] = 60.0
DEFAULT_TIMEOUT_SECONDS: Final[float] = 8.0
DEFAULT_RETRIES: Final[int] = 3
BASE_BACKOFF_SECONDS: Final[float] = 1.0
MAX_BACKOFF_SECONDS: Final[float] = 3.0


class FetchError(Exception):
    """Raised when a GET request still fails after all retries."""

    def __init__(self, message: str, status_code: int | None = None, body: Any | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


def backoff_delay(retry_number: int) -> float:
    """Delay before the ``retry_number``-th retry (0-based): 1s, 2s, then capped at 3s."""
    return min(BASE_BACKOFF_SECONDS * (2**retry_number), MAX_BACKOFF_SECONDS)


def _cache_key(url: str, params: Mapping[str, Any] | None) -> str:
    if not params:
        return url
    query = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return f"{url}?{query}"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class CachedFetcher:
    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._clock = clock
        self._sleep = sleep
        self._cache: dict[str, _CacheEntry] = {}

    def clear(self, prefix: str | None = None) -> None:
        """Drop cached responses, optionally only those whose key starts with ``prefix``."""
        if prefix is None:
            self._cache.clear()
            return
        for key in [key for key in self._cache if key.startswith(prefix)]:
            del self._cache[key]

    def _cached(self, key: str) -> tuple[bool, Any]:
        entry = self._cache.get(key)
        if entry is None:
            return False, None
        if entry.expires_at <= self._clock():
            del self._cache[key]
            return False, None
        return True, entry.value

    def _store(self, key: str, value: Any, ttl: float) -> None:
        now = self._clock()
        for expired in [k for k, entry in self._cache.items() if entry.expires_at <= now]:
            del self._cache[expired]
        self._cache[key] = _CacheEntry(value, now + ttl)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
        use_cache: bool = True,
    ) -> Any:
        """GET ``url`` and decode JSON.

        Transport errors, timeouts and 5xx responses are retried up to ``retries``
        times. 4xx responses fail immediately.

        Raises:
            FetchError: When the request fails for good.
        """
        key = _cache_key(url, params)
        if use_cache:
            hit, value = self._cached(key)
            if hit:
                logger.debug("Cache hit for %s", key)
                return value

        attempt = 0
        while True:
            try:
                async with httpx.AsyncClient(
                    transport=self._transport, timeout=timeout
                ) as client:
                    response = await client.get(url, params=params, headers=headers)
            except httpx.TimeoutException as exc:
                error = FetchError(f"Request to {url} timed out after {timeout}s")
                cause: Exception | None = exc
            except httpx.TransportError as exc:
                error = FetchError(f"Request to {url} failed: {exc}")
                cause = exc
            else:
                if response.is_success:
                    value = _response_body(response)
                    if use_cache and cache_ttl > 0:
                        self._store(key, value, cache_ttl)
                    return value
                error = FetchError(
                    f"Request to {url} failed with status {response.status_code}",
                    status_code=response.status_code,
                    body=_response_body(response),
                )
                cause = None
                if response.status_code < 500:
                    raise error

            if attempt >= retries:
                raise error from cause
            delay = backoff_delay(attempt)
            logger.warning(
                "GET %s failed (%s); retrying in %.1fs (%d left)",
                url,
                error,
                delay,
                retries - attempt,
            )
            await self._sleep(delay)
            attempt += 1
