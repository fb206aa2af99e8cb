"""Integration tests for the image upload API (local storage in mock mode)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient
from starlette.datastructures import UploadFile

from newsdesk.db import fixtures
from newsdesk.services.image_upload_service import MAX_IMAGE_SIZE

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.mark.asyncio
async def test_upload_to_local_storage(async_http_client: AsyncClient, tmp_path: Path) -> None:
    # Act
    response = await async_http_client.post(
        "/api/upload",
        files={"file": ("market chart.png", PNG_BYTES, "image/png")},
    )

    # Assert
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "success"
    assert body["warning"] is None
    assert body["size"] == len(PNG_BYTES)
    assert body["fileName"].endswith("-market_chart.png")
    assert body["storagePath"] == f"local/{body['fileName']}"
    assert body["url"] == f"/uploads/{body['fileName']}"
    assert body["articleId"] is None
    assert (tmp_path / "uploads" / body["fileName"]).read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_upload_linked_to_article(seeded_http_client: AsyncClient) -> None:
    response = await seeded_http_client.post(
        "/api/upload",
        files={"file": ("cover.png", PNG_BYTES, "image/png")},
        data={"article_id": str(fixtures.ARTICLE_ETF_ID)},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["articleId"] == str(fixtures.ARTICLE_ETF_ID)


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_type(
    async_http_client: AsyncClient, tmp_path: Path
) -> None:
    response = await async_http_client.post(
        "/api/upload",
        files={"file": ("report.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "UNSUPPORTED_FILE_TYPE"
    assert not (tmp_path / "uploads").exists()


@pytest.mark.asyncio
async def test_upload_rejects_large_file(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post(
        "/api/upload",
        files={"file": ("huge.jpg", b"\xff" * (MAX_IMAGE_SIZE + 1), "image/jpeg")},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "FILE_TOO_LARGE"


@pytest.mark.asyncio
async def test_upload_rejects_malformed_article_id(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post(
        "/api/upload",
        files={"file": ("cover.png", PNG_BYTES, "image/png")},
        data={"article_id": "article-1"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_UUID_FORMAT"


@pytest.mark.asyncio
async def test_upload_requires_file(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post("/api/upload", data={"article_id": ""})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_large_file_rejected_before_reading(async_http_client: AsyncClient) -> None:
    """Test that the declared size is checked before the body is read into memory."""
    # Arrange
    read = AsyncMock(return_value=b"")

    # Act
    with patch.object(UploadFile, "read", read):
        response = await async_http_client.post(
            "/api/upload",
            files={"file": ("huge.png", b"\x00" * (MAX_IMAGE_SIZE + 10), "image/png")},
        )

    # Assert
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "FILE_TOO_LARGE"
    read.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_reads_at_most_the_limit(async_http_client: AsyncClient) -> None:
    read = AsyncMock(return_value=PNG_BYTES)

    with patch.object(UploadFile, "read", read):
        response = await async_http_client.post(
            "/api/upload", files={"file": ("cover.png", PNG_BYTES, "image/png")}
        )

    assert response.status_code == status.HTTP_200_OK
    read.assert_awaited_once_with(MAX_IMAGE_SIZE + 1)
