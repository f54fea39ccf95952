"""Shared response shapes and small nested models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StatusMessage(BaseModel):
    """Generic success body: {status, message}."""

    status: Literal["success"] = "success"
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    status: Literal["error"] = "error"
    message: str = Field(..., description="Human-readable message suitable for display")
    errors: dict[str, list[str]] | None = Field(
        default=None, description="Per-field validation messages"
    )
    debug: str | None = Field(default=None, description="Fault detail (DEBUG only)")


class RoleSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ServiceSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    url: str
    category: str | None = None
    icon: str | None = None
    is_maintenance: bool = False
    maintenance_message: str | None = None


class UserOut(BaseModel):
    """User as returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    email: str | None = None
    source: int = Field(..., description="0 local, 1 OpenLDAP, 2 FreeIPA")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    roles: list[RoleSummary] = []
