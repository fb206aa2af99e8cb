"""Transaction handling across concurrent sessions and requests on the in-memory database."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.core.config import Settings
from newsdesk.db.client import ClientFactory, DatabaseClient
from newsdesk.db.config import resolve_database_config
from newsdesk.db.models import Template
from newsdesk.repositories import TemplateRepository


def _client(app_settings: Settings, name: str) -> DatabaseClient:
    client = ClientFactory(resolve_database_config(app_settings)).create(name)
    assert client is not None
    return client


@pytest.mark.asyncio
async def test_overlapping_session_keeps_pending_write(test_settings: Settings) -> None:
    """Test that a session opened mid-transaction does not discard another session's insert."""
    # Arrange
    inserted = asyncio.Event()

    async def writer() -> None:
        async with _client(test_settings, "writer").session() as session:
            await TemplateRepository(session).create({"name": "快讯", "content": "{coin}快讯"})
            inserted.set()
            await asyncio.sleep(0)
            await session.commit()

    async def reader() -> None:
        await inserted.wait()
        async with _client(test_settings, "reader").session():
            pass

    # Act
    await asyncio.gather(writer(), reader())

    # Assert
    async with _client(test_settings, "check").session() as session:
        count = await session.scalar(select(func.count()).select_from(Template))
    assert count == 1


@pytest.mark.asyncio
async def test_concurrent_requests_all_persist(async_http_client: AsyncClient) -> None:
    # Arrange
    creates = [
        async_http_client.post(
            "/api/templates", json={"name": f"模板{index}", "content": "今日{coin}价格"}
        )
        for index in range(20)
    ]
    reads = [async_http_client.get("/api/templates") for _ in range(20)]

    # Act
    responses = await asyncio.gather(*creates, *reads)
    listing = await async_http_client.get("/api/templates", params={"pageSize": 100})

    # Assert
    assert [response.status_code for response in responses[:20]] == [
        status.HTTP_201_CREATED
    ] * 20
    assert [response.status_code for response in responses[20:]] == [status.HTTP_200_OK] * 20
    assert listing.json()["total"] == 20


@pytest.mark.asyncio
async def test_commit_failure_returns_database_error(async_http_client: AsyncClient) -> None:
    """Test that a failed commit is reported to the client and leaves nothing behind."""
    # Arrange
    failing_commit = AsyncMock(
        side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
    )

    # Act
    with patch.object(AsyncSession, "commit", failing_commit):
        response = await async_http_client.post(
            "/api/templates", json={"name": "快讯", "content": "{coin}快讯"}
        )
    listing = await async_http_client.get("/api/templates")

    # Assert
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["code"] == "DATABASE_ERROR"
    failing_commit.assert_awaited_once()
    assert listing.json()["total"] == 0
