"""Request-scoped client cache with a process-wide singleton handle."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from newsdesk.core.request_context import generate_request_id
from newsdesk.db.client import ClientFactory, DatabaseClient

logger = logging.getLogger(__name__)

CONNECTION_IDLE_TIMEOUT_SECONDS: Final[float] = 10 * 60
SINGLETON_CACHE_KEY: Final[str] = "global-singleton"


@dataclass
class _CacheEntry:
    client: DatabaseClient
    expires_at: float


class ConnectionManager:
    """Resolves a database client per request id.

    The first client the factory produces becomes the singleton and is returned
    for every later request. Before that, clients are cached per request id with
    an idle timeout, and the whole cache is swept when it goes unswept for longer
    than the timeout.
    """

    def __init__(
        self,
        factory: ClientFactory,
        *,
        idle_timeout: float = CONNECTION_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.factory = factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._singleton: DatabaseClient | None = None
        self._cache: dict[str, _CacheEntry] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    @property
    def singleton(self) -> DatabaseClient | None:
        return self._singleton

    @property
    def is_mock_mode(self) -> bool:
        return self.factory.config.use_mock_mode

    def cached_request_ids(self) -> list[str]:
        with self._lock:
            return list(self._cache)

    def get_client(self, request_id: str | None = None) -> DatabaseClient | None:
        """Return the client for ``request_id``; None means the database is unavailable."""
        request_id = request_id or generate_request_id()
        with self._lock:
            if self._singleton is not None:
                return self._singleton

            now = self._clock()
            self._evict_expired(now)
            entry = self._cache.get(request_id)
            if entry is not None:
                entry.expires_at = now + self._idle_timeout
                return entry.client

            client = self.factory.create(request_id)
            if client is None:
                logger.warning("No database client available for request %s", request_id)
                return None

            if self._singleton is None:
                self._singleton = client
                logger.info("Database client for %s promoted to singleton", request_id)
            self._cache[request_id] = _CacheEntry(client, now + self._idle_timeout)
            self._sweep(now)
            return client

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, entry in self._cache.items()
            if entry.expires_at <= now and entry.client is not self._singleton
        ]
        for key in expired:
            del self._cache[key]

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep <= self._idle_timeout:
            return
        self._cache.clear()
        if self._singleton is not None:
            self._cache[SINGLETON_CACHE_KEY] = _CacheEntry(
                self._singleton, now + self._idle_timeout
            )
        self._last_sweep = now
        logger.debug("Connection cache swept")

    async def check_health(self, request_id: str | None = None) -> bool:
        client = self.get_client(request_id)
        if client is None:
            return False
        return await client.check_health()

    async def close(self) -> None:
        """Dispose every distinct client and forget the singleton."""
        with self._lock:
            clients = {id(entry.client): entry.client for entry in self._cache.values()}
            if self._singleton is not None:
                clients[id(self._singleton)] = self._singleton
            self._cache.clear()
            self._singleton = None
        for client in clients.values():
            await client.dispose()
