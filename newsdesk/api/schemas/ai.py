from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request model for ``/ai/generate``."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "type": "article_title",
                    "data": {"keywords": ["比特币", "ETF"], "topic": "比特币ETF资金流入"},
                },
                {
                    "type": "template_content",
                    "data": {"template": "今日{coin}行情", "variables": {"coin": "BTC"}},
                },
            ]
        }
    )

    type: str = Field(
        ...,
        min_length=1,
        description=(
            "article_title, article_content, article_summary, extract_keywords "
            "or template_content"
        ),
    )
    data: dict[str, Any] = Field(default_factory=dict)


class GenerateResponse(BaseModel):
    result: Any
