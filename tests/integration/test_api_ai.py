"""Integration tests for the AI generation API (LLM mocked)."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient

from newsdesk.api.dependencies import get_llm_client_factory
from newsdesk.db import fixtures
from newsdesk.llm.client import LLMClient, LLMUnavailableError


class MockLLMClient(LLMClient):
    def __init__(self, answer: str = "生成的内容") -> None:
        self.answer = answer
        self.prompts: list[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        return self.answer


class FailingLLMClient(LLMClient):
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise LLMUnavailableError("LLM service error. Try again later.")


def _use_llm(app: FastAPI, client: LLMClient) -> None:
    app.dependency_overrides[get_llm_client_factory] = lambda: (lambda: client)


@pytest.mark.asyncio
async def test_generate_title(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    # Arrange
    llm = MockLLMClient("“比特币ETF迎来资金潮”")
    _use_llm(async_app, llm)

    # Act
    response = await async_http_client.post(
        "/api/ai/generate",
        json={"type": "article_title", "data": {"keywords": "比特币,ETF", "topic": "资金流入"}},
    )

    # Assert
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"result": "比特币ETF迎来资金潮"}
    assert "比特币, ETF" in llm.prompts[0]


@pytest.mark.asyncio
async def test_extract_keywords(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    _use_llm(async_app, MockLLMClient('{"keywords": ["以太坊", "坎昆升级", "Layer2"]}'))

    response = await async_http_client.post(
        "/api/ai/generate",
        json={"type": "extract_keywords", "data": {"text": "以太坊坎昆升级降低了Layer2费用", "count": 2}},
    )

    assert response.json() == {"result": ["以太坊", "坎昆升级"]}


@pytest.mark.asyncio
async def test_stored_template_counts_one_use(
    seeded_app: FastAPI, seeded_http_client: AsyncClient
) -> None:
    """Test that filling a stored template bumps its usage_count."""
    # Arrange
    llm = MockLLMClient("完整的行情日报")
    _use_llm(seeded_app, llm)
    template_url = f"/api/templates/{fixtures.TEMPLATE_MARKET_DAILY_ID}"

    # Act
    response = await seeded_http_client.post(
        "/api/ai/generate",
        json={
            "type": "template_content",
            "data": {
                "templateId": str(fixtures.TEMPLATE_MARKET_DAILY_ID),
                "variables": {"coin": "BTC"},
            },
        },
    )
    template = await seeded_http_client.get(template_url)

    # Assert
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"result": "完整的行情日报"}
    assert template.json()["usage_count"] == 13


@pytest.mark.asyncio
async def test_failed_generation_keeps_usage_count(
    seeded_app: FastAPI, seeded_http_client: AsyncClient
) -> None:
    _use_llm(seeded_app, FailingLLMClient())

    response = await seeded_http_client.post(
        "/api/ai/generate",
        json={
            "type": "template_content",
            "data": {
                "templateId": str(fixtures.TEMPLATE_MARKET_DAILY_ID),
                "variables": {"coin": "BTC"},
            },
        },
    )
    template = await seeded_http_client.get(f"/api/templates/{fixtures.TEMPLATE_MARKET_DAILY_ID}")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["code"] == "llm_unavailable"
    assert template.json()["usage_count"] == 12


@pytest.mark.asyncio
async def test_unknown_template(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    _use_llm(async_app, MockLLMClient())

    response = await async_http_client.post(
        "/api/ai/generate",
        json={
            "type": "template_content",
            "data": {"templateId": "00000000-0000-4000-8000-000000000000", "variables": {}},
        },
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_unsupported_type(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    _use_llm(async_app, MockLLMClient())

    response = await async_http_client.post("/api/ai/generate", json={"type": "poem", "data": {}})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "UNSUPPORTED_GENERATION_TYPE"


@pytest.mark.asyncio
async def test_missing_inputs(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    llm = MockLLMClient()
    _use_llm(async_app, llm)

    response = await async_http_client.post(
        "/api/ai/generate", json={"type": "article_summary", "data": {}}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_without_llm_keys(async_http_client: AsyncClient) -> None:
    """Test that the real factory reports missing provider credentials."""
    response = await async_http_client.post(
        "/api/ai/generate", json={"type": "article_summary", "data": {"content": "正文"}}
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["code"] == "llm_not_configured"


@pytest.mark.asyncio
async def test_non_numeric_max_length(async_app: FastAPI, async_http_client: AsyncClient) -> None:
    llm = MockLLMClient()
    _use_llm(async_app, llm)

    response = await async_http_client.post(
        "/api/ai/generate",
        json={"type": "article_summary", "data": {"content": "正文", "maxLength": "long"}},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert llm.prompts == []
