from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TemplateCreate(BaseModel):
    """Request model for creating a content template."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "每日行情",
                    "category": "市场",
                    "content": "今日{coin}价格为{price}，关键词：{keywords}",
                }
            ]
        }
    )

    name: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, description="Body with {variable} placeholders")
    description: str | None = None
    category: str | None = None


class TemplateUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    content: str | None = None
    description: str | None = None
    category: str | None = None


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    category: str | None
    content: str
    usage_count: int
    created_at: datetime
    updated_at: datetime


class TemplateListResponse(BaseModel):
    templates: list[TemplateResponse]
    total: int
    page: int
    page_size: int = Field(..., serialization_alias="pageSize")
    total_pages: int = Field(..., serialization_alias="totalPages")
