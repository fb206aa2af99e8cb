from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from newsdesk.core.status import AITaskStatus, AITaskType, ai_task_status_label


class AITaskCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "生成ETF文章摘要",
                    "type": "summary",
                    "input_data": {"maxLength": 150},
                }
            ]
        }
    )

    name: str = Field(..., min_length=1, max_length=200)
    type: AITaskType
    input_data: dict[str, Any] = Field(default_factory=dict)
    article_id: str | None = None


class AITaskUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    type: AITaskType | None = None
    status: AITaskStatus | None = None
    input_data: dict[str, Any] | None = None
    result_data: dict[str, Any] | None = None
    error_message: str | None = None
    article_id: str | None = None


class AITaskComplete(BaseModel):
    result: dict[str, Any] = Field(default_factory=dict)


class AITaskFail(BaseModel):
    error: str = Field(..., min_length=1)


class AITaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    type: str
    status: str
    input_data: dict[str, Any]
    result_data: dict[str, Any] | None
    error_message: str | None
    article_id: uuid.UUID | None
    created_at: datetime
    completed_at: datetime | None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return ai_task_status_label(self.status)


class AITaskListResponse(BaseModel):
    tasks: list[AITaskResponse]
    total: int
    page: int
    page_size: int = Field(..., serialization_alias="pageSize")
