from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from newsdesk.core.status import article_status_label


class ArticleBase(BaseModel):
    summary: str | None = None
    content: str | None = None
    cover_image: str | None = None
    category: str | None = Field(default=None, examples=["区块链"])
    author: str | None = None
    source: str | None = None
    published_at: datetime | None = None
    # Kept as strings so malformed ids reach the repository's UUID check.
    template_id: str | None = None
    hot_topic_id: str | None = None


class ArticleCreate(ArticleBase):
    """Request model for creating an article."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "title": "比特币ETF资金持续流入",
                    "summary": "本周现货ETF净流入超过10亿美元。",
                    "category": "市场",
                    "keywords": ["比特币", "ETF"],
                    "status": "draft",
                }
            ]
        }
    )

    title: str = Field(..., min_length=1, max_length=500)
    keywords: list[str] = Field(default_factory=list)
    status: str | None = Field(
        default=None,
        description="Either the API value (draft, pending, ...) or its display label",
        examples=["draft", "待审核"],
    )


class ArticleUpdate(ArticleBase):
    """Partial update; only fields present in the body are written."""

    title: str | None = Field(default=None, max_length=500)
    keywords: list[str] | None = None
    status: str | None = None


class ArticleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    summary: str | None
    content: str | None
    cover_image: str | None
    category: str | None
    keywords: list[str]
    status: str
    author: str | None
    source: str | None
    published_at: datetime | None
    template_id: uuid.UUID | None
    hot_topic_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return article_status_label(self.status)


class ArticleListResponse(BaseModel):
    articles: list[ArticleResponse]
    total: int
    page: int
    page_size: int = Field(..., serialization_alias="pageSize")
