"""Database client handles and the factory that builds them."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final

from sqlalchemy import event, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from newsdesk.db import fixtures
from newsdesk.db.base import Base
from newsdesk.db.config import DatabaseConfig
from newsdesk.db.models import AITask, Article, HotTopic, Template

logger = logging.getLogger(__name__)

MAX_CONSTRUCTION_ATTEMPTS: Final[int] = 3
MOCK_DATABASE_URL: Final[str] = "sqlite+aiosqlite://"
CLIENT_INFO: Final[str] = "crypto-news-app"
# Postgres truncates application_name to 63 bytes.
_APPLICATION_NAME_LIMIT: Final[int] = 63


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class MockStore:
    """Process-wide in-memory database shared by every mock client."""

    def __init__(self) -> None:
        self.engine = create_async_engine(
            MOCK_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._ready = False
        self._lock = asyncio.Lock()
        # Every session shares the single StaticPool connection, so they take turns.
        self.session_lock = asyncio.Lock()

    async def prepare(self, *, seed: bool) -> None:
        """Create the schema (and seed rows) once per process."""
        if self._ready:
            return
        async with self._lock:
            if self._ready:
                return
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                if seed:
                    await self._seed(conn)
            self._ready = True
            logger.info("In-memory database ready (seeded=%s)", seed)

    @staticmethod
    async def _seed(conn: Any) -> None:
        existing = await conn.execute(select(Template.id).limit(1))
        if existing.first() is not None:
            return
        await conn.execute(insert(Template), fixtures.TEMPLATES)
        await conn.execute(insert(HotTopic), fixtures.HOT_TOPICS)
        await conn.execute(insert(Article), fixtures.ARTICLES)
        await conn.execute(insert(AITask), fixtures.AI_TASKS)


_mock_store: MockStore | None = None


def get_mock_store() -> MockStore:
    global _mock_store
    if _mock_store is None:
        _mock_store = MockStore()
    return _mock_store


async def dispose_mock_store() -> None:
    """Discard the in-memory database; the next mock client starts from an empty store."""
    global _mock_store
    store, _mock_store = _mock_store, None
    if store is not None:
        await store.engine.dispose()


class DatabaseClient:
    """A handle on one database backend: an engine plus its session factory."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        request_id: str,
        mock_store: MockStore | None = None,
        seed_mock_data: bool = False,
    ) -> None:
        self.engine = engine
        self.request_id = request_id
        self._mock_store = mock_store
        self._seed_mock_data = seed_mock_data
        self._session_maker = async_sessionmaker[AsyncSession](
            bind=engine, class_=AsyncSession, expire_on_commit=False
        )

    @property
    def is_mock(self) -> bool:
        return self._mock_store is not None

    async def prepare(self) -> None:
        if self._mock_store is not None:
            await self._mock_store.prepare(seed=self._seed_mock_data)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        await self.prepare()
        if self._mock_store is None:
            async with self._session_maker() as session:
                yield session
            return
        async with self._mock_store.session_lock, self._session_maker() as session:
            yield session

    async def check_health(self) -> bool:
        """Run a minimal query against ``articles``; False when it fails."""
        try:
            async with self.session() as session:
                await session.execute(select(Article.id).limit(1))
        except SQLAlchemyError as exc:
            logger.error("Database health check failed: %s", exc)
            return False
        return True

    async def dispose(self) -> None:
        # The mock engine belongs to the shared store, not to this handle.
        if self._mock_store is None:
            await self.engine.dispose()


class ClientFactory:
    """Builds database clients, giving up after repeated construction failures."""

    def __init__(
        self,
        config: DatabaseConfig,
        *,
        max_attempts: int = MAX_CONSTRUCTION_ATTEMPTS,
        application_name: str = CLIENT_INFO,
    ) -> None:
        self.config = config
        self._max_attempts = max_attempts
        self._application_name = application_name
        self._failed_attempts = 0

    @property
    def failed_attempts(self) -> int:
        return self._failed_attempts

    def reset_attempts(self) -> None:
        self._failed_attempts = 0

    def create(self, request_id: str) -> DatabaseClient | None:
        """Return a client for ``request_id``, or None when none can be built. Never raises."""
        if self.config.use_mock_mode:
            if self.config.debug_mode:
                logger.debug("Using in-memory database for request %s", request_id)
            store = get_mock_store()
            return DatabaseClient(
                store.engine,
                request_id=request_id,
                mock_store=store,
                seed_mock_data=self.config.seed_mock_data,
            )

        if self._failed_attempts >= self._max_attempts:
            logger.error(
                "Database client construction disabled after %d failed attempts",
                self._failed_attempts,
            )
            return None

        try:
            engine = self._build_engine(request_id)
        except (SQLAlchemyError, ImportError, ValueError) as exc:
            self._failed_attempts += 1
            logger.error(
                "Failed to create database client (attempt %d/%d): %s",
                self._failed_attempts,
                self._max_attempts,
                exc,
            )
            return None

        self._failed_attempts = 0
        logger.info("Database client created for request %s", request_id)
        return DatabaseClient(engine, request_id=request_id)

    def _build_engine(self, request_id: str) -> AsyncEngine:
        if not self.config.database_url:
            raise ValueError("No database URL configured")
        application_name = f"{self._application_name}/{request_id}"[:_APPLICATION_NAME_LIMIT]
        return create_async_engine(
            self.config.database_url,
            pool_pre_ping=True,
            echo=self.config.debug_mode,
            connect_args={"server_settings": {"application_name": application_name}},
        )
