"""Request/response schemas for the service registry."""

import re

from pydantic import BaseModel, Field, field_validator

from nita.schemas.common import RoleSummary, ServiceSummary

SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _check_url(v: str) -> str:
    v = v.strip()
    lower = v.lower()
    if not (lower.startswith("http://") or lower.startswith("https://")) or len(v) < 10:
        raise ValueError("URL must be an absolute http or https URL")
    return v


def _check_slug(v: str) -> str:
    v = v.strip()
    if not SLUG_PATTERN.match(v):
        raise ValueError("Slug may contain only letters, digits, '.', '_' and '-'")
    return v


def _blank_to_none(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class ServiceCreate(BaseModel):
    """Full service definition (POST, PUT)."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., max_length=2048)
    category: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return _check_slug(v)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _check_url(v)

    @field_validator("category", "icon")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ServiceUpdate(BaseModel):
    """Partial service update (PATCH); omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255)
    url: str | None = Field(default=None, max_length=2048)
    category: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return None if v is None else _check_slug(v)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        return None if v is None else _check_url(v)

    @field_validator("category", "icon")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class MaintenanceRequest(BaseModel):
    is_maintenance: bool
    maintenance_message: str | None = Field(default=None, max_length=2000)


class ServiceOut(ServiceSummary):
    """Service with the roles that can see it."""

    roles: list[RoleSummary] = []


class VpnCredentials(BaseModel):
    """Per-user VPN details; only served to callers with access to the vpn service."""

    username: str
    config: str | None = Field(default=None, description="Client profile, if configured")
