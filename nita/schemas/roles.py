"""Request/response schemas for roles and role/service matrix sync."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nita.schemas.common import RoleSummary, ServiceSummary


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Role name must not be blank")
        return v


class RoleUpdate(RoleCreate):
    pass


class RoleOut(RoleSummary):
    """Role with the services linked to it (matrix rows)."""

    services: list[ServiceSummary] = []


class ServiceIdsRequest(BaseModel):
    """Full desired set of service ids for a role (may be empty)."""

    service_ids: list[int]


class RoleIdsRequest(BaseModel):
    """Full desired set of role ids for a user or a service (may be empty)."""

    role_ids: list[int]


class SyncResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attached: list[int]
    detached: list[int]


class RoleSyncResponse(BaseModel):
    message: str
    role: RoleOut
    changes: SyncResult
