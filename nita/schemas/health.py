"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    environment: str = Field(description="APP_ENV (dev or prod)")
    database: Literal["connected", "disconnected"]
    directories: dict[str, bool] = Field(
        default_factory=dict,
        description="Directory label -> whether a host is configured (no network check)",
    )
