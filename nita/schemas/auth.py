"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from nita.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, USERNAME_MAX_LEN
from nita.schemas.common import UserOut


class LoginRequest(BaseModel):
    """Credentials for login. type: "0" local, "1" OpenLDAP, "2" FreeIPA."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN, description="Username")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")
    type: Literal["0", "1", "2"] = Field(..., description="Identity source")

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: object) -> object:
        # Clients send the source either as "1" or as 1.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class LoginResponse(BaseModel):
    """Opaque bearer token and the user with roles, returned after login."""

    status: Literal["success"] = "success"
    token: str = Field(..., description="Bearer token for the Authorization header")
    user: UserOut


class Capabilities(BaseModel):
    admin: bool


class MeResponse(BaseModel):
    user: UserOut
    capabilities: Capabilities


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    new_password_confirmation: str = Field(..., max_length=PASSWORD_MAX_LEN)
