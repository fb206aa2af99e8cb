"""Unit tests for the client factory and the connection manager."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from newsdesk.db.client import ClientFactory, DatabaseClient
from newsdesk.db.config import DatabaseConfig
from newsdesk.db.connection import (
    CONNECTION_IDLE_TIMEOUT_SECONDS,
    SINGLETON_CACHE_KEY,
    ConnectionManager,
)


def _config(*, use_mock_mode: bool, database_url: str | None = None) -> DatabaseConfig:
    return DatabaseConfig(
        endpoint="https://project.supabase.co",
        anon_key="anon-key",
        service_key=None,
        database_url=database_url,
        use_mock_mode=use_mock_mode,
        debug_mode=False,
        seed_mock_data=False,
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeFactory:
    """Factory double that hands out mock clients, or None while ``failing``."""

    def __init__(self, *, failing: bool = False) -> None:
        self.config = _config(use_mock_mode=True)
        self.failing = failing
        self.created: list[str] = []

    def create(self, request_id: str) -> MagicMock | None:
        self.created.append(request_id)
        if self.failing:
            return None
        client = MagicMock(name=f"client-{request_id}")
        client.dispose = AsyncMock()
        client.check_health = AsyncMock(return_value=True)
        return client


def test_first_client_becomes_singleton() -> None:
    """Test that every request after the first reuses the first client."""
    # Arrange
    factory = FakeFactory()
    manager = ConnectionManager(factory)  # type: ignore[arg-type]

    # Act
    first = manager.get_client("req-1")
    second = manager.get_client("req-2")

    # Assert
    assert first is not None
    assert second is first
    assert manager.singleton is first
    assert factory.created == ["req-1"]


def test_unavailable_client_is_not_cached() -> None:
    """Test that a failed construction returns None and the next request retries."""
    factory = FakeFactory(failing=True)
    manager = ConnectionManager(factory)  # type: ignore[arg-type]

    assert manager.get_client("req-1") is None
    assert manager.singleton is None

    factory.failing = False
    client = manager.get_client("req-2")

    assert client is not None
    assert factory.created == ["req-1", "req-2"]


def test_missing_request_id_gets_generated_one() -> None:
    factory = FakeFactory()
    manager = ConnectionManager(factory)  # type: ignore[arg-type]

    manager.get_client()

    assert factory.created[0].startswith("req-")


def test_stale_cache_is_swept_down_to_singleton() -> None:
    """Test that a sweep after the idle timeout keeps only the singleton entry."""
    # Arrange
    clock = FakeClock()
    manager = ConnectionManager(FakeFactory(), clock=clock)  # type: ignore[arg-type]
    clock.now += CONNECTION_IDLE_TIMEOUT_SECONDS + 1

    # Act
    client = manager.get_client("req-1")

    # Assert
    assert client is manager.singleton
    assert manager.cached_request_ids() == [SINGLETON_CACHE_KEY]


def test_cache_kept_within_idle_timeout() -> None:
    clock = FakeClock()
    manager = ConnectionManager(FakeFactory(), clock=clock)  # type: ignore[arg-type]

    manager.get_client("req-1")

    assert manager.cached_request_ids() == ["req-1"]


@pytest.mark.asyncio
async def test_close_disposes_each_client_once() -> None:
    clock = FakeClock()
    manager = ConnectionManager(FakeFactory(), clock=clock)  # type: ignore[arg-type]
    clock.now += CONNECTION_IDLE_TIMEOUT_SECONDS + 1
    client = manager.get_client("req-1")
    assert client is not None

    await manager.close()

    client.dispose.assert_awaited_once()  # type: ignore[attr-defined]
    assert manager.singleton is None
    assert manager.cached_request_ids() == []


@pytest.mark.asyncio
async def test_check_health_without_client() -> None:
    manager = ConnectionManager(FakeFactory(failing=True))  # type: ignore[arg-type]

    assert await manager.check_health("req-1") is False


def test_factory_returns_mock_client_in_mock_mode() -> None:
    factory = ClientFactory(_config(use_mock_mode=True))

    client = factory.create("req-1")

    assert isinstance(client, DatabaseClient)
    assert client.is_mock
    assert client.request_id == "req-1"


def test_factory_gives_up_after_repeated_failures() -> None:
    """Test that construction stops being attempted after three failures."""
    # Arrange
    factory = ClientFactory(_config(use_mock_mode=False, database_url=None))

    # Act
    results = [factory.create(f"req-{i}") for i in range(3)]

    # Assert
    assert results == [None, None, None]
    assert factory.failed_attempts == 3
    with patch.object(ClientFactory, "_build_engine") as build_engine:
        assert factory.create("req-4") is None
        build_engine.assert_not_called()


def test_factory_attempts_can_be_reset() -> None:
    factory = ClientFactory(_config(use_mock_mode=False, database_url=None), max_attempts=1)
    factory.create("req-1")

    factory.reset_attempts()

    assert factory.failed_attempts == 0


@pytest.mark.asyncio
async def test_factory_builds_real_client_with_application_name() -> None:
    """Test that real clients tag their connections with the request id."""
    factory = ClientFactory(
        _config(use_mock_mode=False, database_url="postgresql+asyncpg://user:pw@localhost/app")
    )

    with patch("newsdesk.db.client.create_async_engine") as create_engine:
        create_engine.return_value = MagicMock(dispose=AsyncMock())
        client = factory.create("req-" + "x" * 80)

    assert client is not None
    assert not client.is_mock
    connect_args = create_engine.call_args.kwargs["connect_args"]
    application_name = connect_args["server_settings"]["application_name"]
    assert application_name.startswith("crypto-news-app/req-")
    assert len(application_name) == 63
    await client.dispose()
    create_engine.return_value.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_mock_client_health_check() -> None:
    client = ClientFactory(_config(use_mock_mode=True)).create("req-1")
    assert client is not None

    assert await client.check_health() is True
