from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    id: uuid.UUID
    url: str
    file_name: str = Field(..., serialization_alias="fileName")
    size: int
    storage_path: str = Field(..., serialization_alias="storagePath")
    article_id: uuid.UUID | None = Field(default=None, serialization_alias="articleId")
    status: Literal["success", "warning"]
    warning: str | None = None
