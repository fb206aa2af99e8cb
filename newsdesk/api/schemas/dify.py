from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DifyChatRequest(BaseModel):
    """Chat-message content generation request."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "user": "editor-1",
                    "title": "以太坊升级前瞻",
                    "query": "写一篇关于以太坊升级的新闻",
                    "inputs": {"style": "专业"},
                }
            ]
        }
    )

    user: str | None = None
    title: str | None = None
    query: str | None = None
    content: str | None = None
    inputs: dict[str, Any] = Field(default_factory=dict)
    conversation_id: str | None = None


class DifyChatResponse(BaseModel):
    content: str
    conversation_id: str = Field(..., serialization_alias="conversationId")
    message_id: str = Field(..., serialization_alias="messageId")
    success: bool = True
    metadata: Any | None = None


class WorkflowRunRequest(BaseModel):
    inputs: dict[str, Any]
    user_id: str | None = None
    workflow_id: str | None = None
    files: list[Any] = Field(default_factory=list)


class WorkflowRunResponse(BaseModel):
    success: bool = True
    workflow_run_id: str
    task_id: str | None = None
    result: Any | None = None
    callback_url: str


class StopTaskRequest(BaseModel):
    user: str | None = None


class WorkflowLogsResponse(BaseModel):
    success: bool = True
    page: int
    limit: int
    total: int
    has_more: bool
    data: list[Any]


class ConversationMessage(BaseModel):
    role: str = Field(..., examples=["user", "assistant"])
    content: str


class ConversationResponse(BaseModel):
    conversation_id: str
    messages: list[ConversationMessage]


class DifyCallbackRequest(BaseModel):
    """Payload Dify posts when a workflow run finishes."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    content: str | None = None
    describe: str | None = None
    image: list[dict[str, Any]] | None = None
    date: str | None = None
