"""Pydantic request/response schemas."""

from nita.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
)
from nita.schemas.common import (
    ErrorResponse,
    RoleSummary,
    ServiceSummary,
    StatusMessage,
    UserOut,
)
from nita.schemas.health import HealthResponse
from nita.schemas.roles import RoleOut
from nita.schemas.services import ServiceOut

__all__ = [
    "ChangePasswordRequest",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "RoleOut",
    "RoleSummary",
    "ServiceOut",
    "ServiceSummary",
    "StatusMessage",
    "UserOut",
]
