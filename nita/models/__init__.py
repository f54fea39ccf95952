"""SQLAlchemy ORM models."""

from nita.models.audit_log import AuditLog
from nita.models.base import Base
from nita.models.category import Category
from nita.models.role import ADMIN_ROLE, Role, role_service, role_user
from nita.models.service import Service
from nita.models.token import PersonalAccessToken
from nita.models.user import IdentitySource, User

__all__ = [
    "ADMIN_ROLE",
    "AuditLog",
    "Base",
    "Category",
    "IdentitySource",
    "PersonalAccessToken",
    "Role",
    "Service",
    "User",
    "role_service",
    "role_user",
]
