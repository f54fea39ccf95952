"""Request/response schemas for user administration and directory import."""

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from nita.schemas.common import UserOut

DIRECTORY_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9._\-]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserSyncRequest(BaseModel):
    """Legacy one-shot import of a directory user by username."""

    username: str = Field(..., min_length=1, max_length=255)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v


class DiscoverRequest(BaseModel):
    username: str = Field(..., min_length=2, max_length=255)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2 or not DIRECTORY_USERNAME_PATTERN.match(v):
            raise ValueError(
                "Invalid username format. Use only letters, numbers, dots, hyphens, and underscores."
            )
        return v


class DirectoryUserOut(BaseModel):
    """A directory entry found by discovery; nothing has been persisted yet."""

    username: str
    name: str
    email: str | None = None
    provider: Literal["OpenLDAP", "FreeIPA"]


class DirectorySyncRequest(DirectoryUserOut):
    """Confirmed discovery payload to upsert as a shadow user."""

    username: str = Field(..., min_length=2, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)

    @field_validator("username", "name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Email must be a valid email address")
        return v


class UserSyncResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut


class UserRolesResponse(BaseModel):
    message: str
    user: UserOut
