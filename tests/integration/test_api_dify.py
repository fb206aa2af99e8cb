"""Integration tests for the Dify API (upstream mocked with httpx.MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient

from newsdesk.api.dependencies import get_dify_client
from newsdesk.core.http_fetch import CachedFetcher
from newsdesk.dify.client import DifyClient
from newsdesk.services.dify_ingest_service import DEFAULT_COVER_IMAGE


class DifyUpstream:
    """Fake Dify server keyed by request path."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/chat-messages":
            return httpx.Response(
                200, json={"answer": "生成的正文", "conversation_id": "conv-1", "id": "msg-1"}
            )
        if path == "/v1/workflows/run":
            return httpx.Response(200, json={"task_id": "task-1", "data": {"status": "running"}})
        if path == "/v1/workflows/logs":
            return httpx.Response(200, json={"page": 1, "limit": 10, "total": 0, "data": []})
        if path.startswith("/v1/workflows/run/"):
            return httpx.Response(200, json={"id": path.rsplit("/", 1)[-1], "status": "succeeded"})
        if path.endswith("/stop"):
            return httpx.Response(200, json={"result": "success"})
        if path == "/v1/parameters":
            return httpx.Response(200, json={"user_input_form": [{"text-input": {}}]})
        if path == "/v1/messages":
            return httpx.Response(200, json={"data": [{"query": "问", "answer": "答"}]})
        return httpx.Response(404, json={"message": "not found"})


async def _no_sleep(_: float) -> None:
    return None


@pytest.fixture
def upstream(async_app: FastAPI) -> DifyUpstream:
    """Route the app's Dify calls to a fake upstream."""
    fake = DifyUpstream()
    transport = httpx.MockTransport(fake)
    client = DifyClient(
        api_endpoint="https://dify.example.com/v1",
        api_key="app-key",
        app_id="app-1",
        workflow_id="wf-1",
        user_id="editor-1",
        transport=transport,
        fetcher=CachedFetcher(transport=transport, sleep=_no_sleep),
    )
    async_app.dependency_overrides[get_dify_client] = lambda: client
    return fake


@pytest.mark.asyncio
async def test_chat_generation(async_http_client: AsyncClient, upstream: DifyUpstream) -> None:
    # Act
    response = await async_http_client.post(
        "/api/dify",
        json={"user": "editor-1", "title": "以太坊升级前瞻", "query": "写一篇新闻"},
    )

    # Assert
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "content": "生成的正文",
        "conversationId": "conv-1",
        "messageId": "msg-1",
        "success": True,
        "metadata": None,
    }
    sent = json.loads(upstream.requests[0].content)
    assert sent["inputs"]["title"] == "以太坊升级前瞻"
    assert sent["query"] == "写一篇新闻"


@pytest.mark.parametrize(
    ("payload", "missing"),
    [({"title": "标题"}, "user"), ({"user": "editor-1", "query": "写"}, "title")],
)
@pytest.mark.asyncio
async def test_chat_requires_user_and_title(
    async_http_client: AsyncClient,
    upstream: DifyUpstream,
    payload: dict[str, str],
    missing: str,
) -> None:
    response = await async_http_client.post("/api/dify", json=payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == f"Missing required parameter: {missing}"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_run_workflow_sets_callback(
    async_http_client: AsyncClient, upstream: DifyUpstream
) -> None:
    response = await async_http_client.post(
        "/api/dify/workflow/run", json={"inputs": {"topic": "比特币"}}
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["callback_url"] == "http://testserver/api/dify/callback"
    assert body["task_id"] == "task-1"
    assert body["workflow_run_id"].startswith("run-")
    sent = json.loads(upstream.requests[0].content)
    assert sent["inputs"]["sys.files"] == []


@pytest.mark.asyncio
async def test_run_workflow_requires_inputs(
    async_http_client: AsyncClient, upstream: DifyUpstream
) -> None:
    response = await async_http_client.post("/api/dify/workflow/run", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_workflow_reads(async_http_client: AsyncClient, upstream: DifyUpstream) -> None:
    """Test logs, run status, stop, parameters and conversation history."""
    logs = await async_http_client.get("/api/dify/workflow/logs", params={"status": "success"})
    run = await async_http_client.get("/api/dify/workflow/run-123")
    stopped = await async_http_client.post(
        "/api/dify/workflow/task/task-1/stop", json={"user": "editor-1"}
    )
    parameters = await async_http_client.get("/api/dify/parameters")
    conversation = await async_http_client.get("/api/dify/conversation/conv-1")

    assert logs.json()["success"] is True
    assert logs.json()["has_more"] is False
    assert run.json() == {"id": "run-123", "status": "succeeded", "success": True}
    assert stopped.json() == {"result": "success", "success": True}
    assert parameters.json()["user_input_form"] == [{"text-input": {}}]
    assert conversation.json() == {
        "conversation_id": "conv-1",
        "messages": [{"role": "user", "content": "问"}, {"role": "assistant", "content": "答"}],
    }


@pytest.mark.asyncio
async def test_invalid_log_status(async_http_client: AsyncClient, upstream: DifyUpstream) -> None:
    response = await async_http_client.get("/api/dify/workflow/logs", params={"status": "done"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_unconfigured_dify_is_server_error(async_http_client: AsyncClient) -> None:
    """Test that the default client without credentials reports dify_not_configured."""
    response = await async_http_client.post(
        "/api/dify", json={"user": "editor-1", "title": "标题"}
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["code"] == "dify_not_configured"


@pytest.mark.asyncio
async def test_callback_saves_pending_article(async_http_client: AsyncClient) -> None:
    # Act
    response = await async_http_client.post(
        "/api/dify/callback",
        json={
            "title": "比特币：突破新高",
            "content": "<p>比特币价格创下新高。</p>",
            "describe": "比特币创新高",
            "image": [{"url": "https://cdn.example.com/btc.png"}],
            "date": "2024-03-14",
        },
    )
    listing = await async_http_client.get("/api/articles", params={"status": "pending"})

    # Assert
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    article = body["article"]
    assert article["status"] == "pending"
    assert article["source"] == "Dify AI"
    assert article["summary"] == "比特币创新高"
    assert article["cover_image"] == "https://cdn.example.com/btc.png"
    assert article["keywords"] == ["比特币", "突破新高"]
    assert listing.json()["total"] == 1


@pytest.mark.asyncio
async def test_callback_defaults(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post(
        "/api/dify/callback", json={"title": "标题", "content": "正文"}
    )

    article = response.json()["article"]
    assert article["cover_image"] == DEFAULT_COVER_IMAGE
    assert article["category"] == "区块链"


@pytest.mark.asyncio
async def test_callback_requires_title_and_content(async_http_client: AsyncClient) -> None:
    response = await async_http_client.post("/api/dify/callback", json={"title": "只有标题"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "VALIDATION_ERROR"
