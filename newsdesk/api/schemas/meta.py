from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response model for health check."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"status": "ok", "database": "ok", "mock_mode": True}]}
    )

    status: str = Field(..., description="Service status", examples=["ok"])
    database: str = Field(..., description="Database status", examples=["ok", "unavailable"])
    mock_mode: bool = Field(..., description="Whether the in-memory database is in use")
