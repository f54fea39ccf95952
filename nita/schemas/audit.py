"""Response schemas for the audit log listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditActor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    target: str
    details: str | None = None
    ip_address: str | None = None
    created_at: datetime | None = None
    user: AuditActor | None = None


class AuditLogPage(BaseModel):
    """One page of audit entries, newest first."""

    data: list[AuditLogOut]
    current_page: int
    per_page: int
    total: int
    last_page: int
