from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from newsdesk.db.models import TRENDING_THRESHOLD


class HotTopicCreate(BaseModel):
    """Request model for creating a hot topic."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"keyword": "比特币减半", "volume": 15200, "source": "twitter"}]
        }
    )

    keyword: str = Field(..., min_length=1, max_length=200)
    volume: int = Field(default=0, ge=0)
    source: str | None = None
    related_articles: list[str] = Field(default_factory=list)


class HotTopicUpdate(BaseModel):
    keyword: str | None = Field(default=None, max_length=200)
    volume: int | None = Field(default=None, ge=0)
    source: str | None = None
    related_articles: list[str] | None = None


class HotTopicAction(BaseModel):
    """Atomic volume action; ``volume`` is the increment for ``increment_volume``."""

    action: Literal["increment_volume", "mark_trending", "archive"]
    volume: int | None = Field(default=None, ge=1)


class HotTopicResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    keyword: str
    volume: int
    source: str | None
    related_articles: list[str]
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_trending(self) -> bool:
        return self.volume >= TRENDING_THRESHOLD

    @computed_field  # type: ignore[prop-decorator]
    @property
    def date(self) -> str:
        return self.created_at.strftime("%Y-%m-%d")


class HotTopicListResponse(BaseModel):
    topics: list[HotTopicResponse]
