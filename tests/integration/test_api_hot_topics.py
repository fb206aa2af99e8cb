"""Integration tests for the hot topics API."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from newsdesk.db import fixtures


@pytest.mark.asyncio
async def test_list_with_min_volume(seeded_http_client: AsyncClient) -> None:
    response = await seeded_http_client.get("/api/hot-topics", params={"minVolume": 10000})

    assert response.status_code == status.HTTP_200_OK
    topics = response.json()["topics"]
    assert {t["keyword"] for t in topics} == {"比特币ETF", "以太坊坎昆升级"}
    assert all(t["is_trending"] for t in topics)


@pytest.mark.asyncio
async def test_list_exposes_date(seeded_http_client: AsyncClient) -> None:
    response = await seeded_http_client.get("/api/hot-topics", params={"source": "weibo"})

    topics = response.json()["topics"]
    assert len(topics) == 1
    assert topics[0]["date"] == "2024-03-05"
    assert topics[0]["is_trending"] is False


@pytest.mark.asyncio
async def test_search(seeded_http_client: AsyncClient) -> None:
    found = await seeded_http_client.get("/api/hot-topics/search", params={"q": "以太坊"})
    empty_query = await seeded_http_client.get("/api/hot-topics/search", params={"q": ""})

    assert [t["keyword"] for t in found.json()["topics"]] == ["以太坊坎昆升级"]
    assert empty_query.status_code == status.HTTP_400_BAD_REQUEST
    assert empty_query.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_trending(seeded_http_client: AsyncClient) -> None:
    response = await seeded_http_client.get("/api/hot-topics/trending", params={"limit": 1})

    assert [t["id"] for t in response.json()["topics"]] == [
        str(fixtures.HOT_TOPIC_BITCOIN_ETF_ID)
    ]


@pytest.mark.asyncio
async def test_create_and_apply_actions(async_http_client: AsyncClient) -> None:
    """Test increment_volume, mark_trending and archive through PATCH."""
    # Arrange
    created = await async_http_client.post(
        "/api/hot-topics", json={"keyword": "比特币减半", "volume": 9000, "source": "twitter"}
    )
    topic_url = f"/api/hot-topics/{created.json()['id']}"

    # Act
    incremented = await async_http_client.patch(
        topic_url, json={"action": "increment_volume", "volume": 500}
    )
    bumped_by_one = await async_http_client.patch(topic_url, json={"action": "increment_volume"})
    trending = await async_http_client.patch(topic_url, json={"action": "mark_trending"})
    archived = await async_http_client.patch(topic_url, json={"action": "archive"})

    # Assert
    assert created.status_code == status.HTTP_201_CREATED
    assert incremented.json()["volume"] == 9500
    assert bumped_by_one.json()["volume"] == 9501
    assert trending.json()["volume"] == 10000
    assert trending.json()["is_trending"] is True
    assert archived.json()["volume"] == 0


@pytest.mark.asyncio
async def test_unknown_action_rejected(async_http_client: AsyncClient) -> None:
    created = await async_http_client.post("/api/hot-topics", json={"keyword": "Solana"})

    response = await async_http_client.patch(
        f"/api/hot-topics/{created.json()['id']}", json={"action": "promote"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_update_and_delete(seeded_http_client: AsyncClient) -> None:
    topic_url = f"/api/hot-topics/{fixtures.HOT_TOPIC_DEFI_ID}"

    updated = await seeded_http_client.put(topic_url, json={"volume": 4800})
    deleted = await seeded_http_client.delete(topic_url)
    article = await seeded_http_client.get(f"/api/articles/{fixtures.ARTICLE_DEFI_ID}")

    assert updated.json()["volume"] == 4800
    assert updated.json()["keyword"] == "DeFi收益"
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert article.json()["hot_topic_id"] is None


@pytest.mark.asyncio
async def test_negative_volume_rejected(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post(
        "/api/hot-topics", json={"keyword": "x", "volume": -5}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
