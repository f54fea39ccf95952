"""Authorization gate: decides whether a user holds a capability.

The administrator check runs first for every capability. A user holding the
admin role is granted everything without evaluating the capability's own rule.
"""

from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.orm import Session

from nita.core.errors import Forbidden
from nita.models import ADMIN_ROLE, Role, Service, User, role_service, role_user


@dataclass(frozen=True)
class ManageSystem:
    """Administrative capability: holding the admin role."""

    @property
    def name(self) -> str:
        return "manage-system"


@dataclass(frozen=True)
class AccessService:
    """Reach one service, identified by slug or name."""

    service: str

    @property
    def name(self) -> str:
        return f"access-service:{self.service}"


Capability = ManageSystem | AccessService

MANAGE_SYSTEM = ManageSystem()


def is_admin(user: User) -> bool:
    """True iff one of the user's roles is named admin (stored lowercase)."""
    return any((role.name or "").lower() == ADMIN_ROLE for role in user.roles)


def _has_service_link(db: Session, user: User, service: str) -> bool:
    query = (
        db.query(Service.id)
        .join(role_service, role_service.c.service_id == Service.id)
        .join(role_user, role_user.c.role_id == role_service.c.role_id)
        .filter(role_user.c.user_id == user.id)
        .filter(or_(Service.slug == service, Service.name == service))
    )
    return db.query(query.exists()).scalar()


def check(db: Session, user: User, capability: Capability) -> bool:
    """Evaluate a capability for user. Never raises for unknown services."""
    if is_admin(user):
        return True
    if isinstance(capability, AccessService):
        return _has_service_link(db, user, capability.service)
    return False


def authorize(db: Session, user: User, capability: Capability) -> None:
    """Raise Forbidden naming the capability when check() denies it."""
    if check(db, user, capability):
        return
    if isinstance(capability, AccessService):
        raise Forbidden(
            capability.name,
            f"Your role does not have permission to access the [{capability.service}] service.",
        )
    raise Forbidden(capability.name)


def visible_services(db: Session, user: User) -> list[Service]:
    """All services for administrators; otherwise those linked to the user's roles."""
    query = db.query(Service)
    if not is_admin(user):
        role_ids = [role.id for role in user.roles]
        if not role_ids:
            return []
        query = query.filter(Service.roles.any(Role.id.in_(role_ids)))
    return query.order_by(Service.id).all()
