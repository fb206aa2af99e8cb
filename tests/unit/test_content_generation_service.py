"""Unit tests for the content generation service (LLM mocked)."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from newsdesk.llm.client import LLMClient, LLMInvalidResponseError, LLMUnavailableError
from newsdesk.repositories.errors import EntityNotFoundError
from newsdesk.services.content_generation_service import (
    ContentGenerationError,
    ContentGenerationService,
    InvalidGenerationRequestError,
    parse_keywords,
    render_template,
)


class MockLLMClient(LLMClient):
    """Returns a fixed answer and records the prompts it was given."""

    def __init__(self, answer: str = "生成的内容") -> None:
        self.answer = answer
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.answer


class ErrorLLMClient(LLMClient):
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise self.error


def _service(client: LLMClient, templates: object | None = None) -> ContentGenerationService:
    return ContentGenerationService(lambda: client, templates)  # type: ignore[arg-type]


def test_render_template_joins_lists() -> None:
    rendered = render_template(
        "今日{coin}价格为{price}，关键词：{keywords}，{unknown}",
        {"coin": "BTC", "price": 68000, "keywords": ["ETF", "减半"]},
    )

    assert rendered == "今日BTC价格为68000，关键词：ETF, 减半，{unknown}"


def test_parse_keywords_accepts_fenced_json_and_bare_lists() -> None:
    assert parse_keywords('```json\n{"keywords": ["比特币", "ETF"]}\n```') == ["比特币", "ETF"]
    assert parse_keywords('["DeFi", "收益"]') == ["DeFi", "收益"]


def test_parse_keywords_rejects_prose() -> None:
    with pytest.raises(LLMInvalidResponseError):
        parse_keywords("关键词是比特币和ETF")


@pytest.mark.asyncio
async def test_generate_title_strips_quotes() -> None:
    # Arrange
    client = MockLLMClient('"比特币ETF资金持续流入"')
    service = _service(client)

    # Act
    result = await service.generate(
        "article_title", {"keywords": ["比特币", "ETF"], "topic": "ETF资金流入"}
    )

    # Assert
    assert result == "比特币ETF资金持续流入"
    _, user_prompt = client.calls[0]
    assert "ETF资金流入" in user_prompt
    assert "比特币, ETF" in user_prompt
    assert "专业" in user_prompt


@pytest.mark.asyncio
async def test_generate_content_accepts_comma_separated_keywords() -> None:
    client = MockLLMClient("# 正文")
    service = _service(client)

    result = await service.generate(
        "article_content", {"topic": "以太坊升级", "keywords": "以太坊，Layer2", "style": "通俗"}
    )

    assert result == "# 正文"
    _, user_prompt = client.calls[0]
    assert "以太坊, Layer2" in user_prompt
    assert "通俗" in user_prompt


@pytest.mark.asyncio
async def test_generate_summary_uses_max_length() -> None:
    client = MockLLMClient("摘要")
    service = _service(client)

    await service.generate("article_summary", {"content": "很长的文章", "maxLength": 80})

    assert "不超过80个字" in client.calls[0][1]


@pytest.mark.asyncio
async def test_extract_keywords_truncates_to_count() -> None:
    client = MockLLMClient(json.dumps({"keywords": ["a", "b", "c", "d"]}))
    service = _service(client)

    result = await service.generate("extract_keywords", {"text": "正文", "count": 2})

    assert result == ["a", "b"]


@pytest.mark.asyncio
async def test_extract_keywords_invalid_output_is_generation_error() -> None:
    service = _service(MockLLMClient("not json"))

    with pytest.raises(ContentGenerationError) as exc_info:
        await service.extract_keywords("正文")

    assert exc_info.value.error_code == "llm_response_invalid"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_inline_template_is_rendered_before_generation() -> None:
    client = MockLLMClient("完整内容")
    service = _service(client)

    result = await service.generate(
        "template_content", {"template": "今日{coin}行情", "variables": {"coin": "ETH"}}
    )

    assert result == "完整内容"
    assert "今日ETH行情" in client.calls[0][1]


@pytest.mark.asyncio
async def test_stored_template_bumps_usage() -> None:
    """Test that a stored template is loaded through increment_usage."""
    # Arrange
    templates = MagicMock()
    templates.increment_usage = AsyncMock(return_value=MagicMock(content="{project}深度解读"))
    client = MockLLMClient("解读")
    service = _service(client, templates)

    # Act
    await service.generate(
        "template_content",
        {"templateId": "8a2d6b2f-4c1e-4e9f-8b68-2c3d4e5f6071", "variables": {"project": "Uniswap"}},
    )

    # Assert
    templates.increment_usage.assert_awaited_once_with("8a2d6b2f-4c1e-4e9f-8b68-2c3d4e5f6071")
    assert "Uniswap深度解读" in client.calls[0][1]


@pytest.mark.asyncio
async def test_missing_stored_template_propagates_not_found() -> None:
    templates = MagicMock()
    templates.increment_usage = AsyncMock(
        side_effect=EntityNotFoundError("Template", "8a2d6b2f-4c1e-4e9f-8b68-2c3d4e5f6071")
    )
    client = MockLLMClient()
    service = _service(client, templates)

    with pytest.raises(EntityNotFoundError):
        await service.generate(
            "template_content",
            {"templateId": "8a2d6b2f-4c1e-4e9f-8b68-2c3d4e5f6071", "variables": {}},
        )
    assert client.calls == []


@pytest.mark.parametrize(
    ("generation_type", "data"),
    [
        ("article_title", {"topic": "no keywords"}),
        ("article_content", {"keywords": ["a"]}),
        ("article_summary", {}),
        ("extract_keywords", {"count": 3}),
        ("template_content", {"variables": {}}),
        ("template_content", {"template": "{x}"}),
        ("article_summary", {"content": "正文", "maxLength": "long"}),
        ("article_summary", {"content": "正文", "maxLength": 0}),
        ("extract_keywords", {"text": "比特币", "count": -2}),
        ("extract_keywords", {"text": "比特币", "count": [3]}),
    ],
)
@pytest.mark.asyncio
async def test_missing_inputs_are_rejected_before_llm_call(
    generation_type: str, data: dict[str, object]
) -> None:
    """Test that invalid requests never build or call the LLM client."""
    factory = MagicMock()
    service = ContentGenerationService(factory)

    with pytest.raises(InvalidGenerationRequestError) as exc_info:
        await service.generate(generation_type, data)

    assert exc_info.value.status_code == 400
    factory.assert_not_called()


@pytest.mark.asyncio
async def test_unsupported_type() -> None:
    service = _service(MockLLMClient())

    with pytest.raises(InvalidGenerationRequestError) as exc_info:
        await service.generate("poem", {})

    assert exc_info.value.error_code == "UNSUPPORTED_GENERATION_TYPE"


@pytest.mark.asyncio
async def test_llm_failure_is_wrapped() -> None:
    service = _service(ErrorLLMClient(LLMUnavailableError("LLM request timed out. Try again.")))

    with pytest.raises(ContentGenerationError) as exc_info:
        await service.generate("article_summary", {"content": "正文"})

    assert exc_info.value.error_code == "llm_unavailable"
    assert str(exc_info.value) == "LLM request timed out. Try again."
