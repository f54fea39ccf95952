"""Role management: create, rename, delete and the role->services matrix sync."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from nita.core.errors import Conflict, NotFound, ProtectedResource
from nita.models import ADMIN_ROLE, Role, Service
from nita.services.matrix import SyncResult, sync_links

logger = logging.getLogger(__name__)


def list_roles(db: Session) -> list[Role]:
    """All roles with their linked services, for matrix-building clients."""
    return db.query(Role).options(selectinload(Role.services)).order_by(Role.id).all()


def get_role(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if role is None:
        raise NotFound("Role not found.")
    return role


def _ensure_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(Role.id).filter(Role.name == name)
    if exclude_id is not None:
        query = query.filter(Role.id != exclude_id)
    if query.first() is not None:
        raise Conflict("name", f"The role name '{name}' has already been taken.")


def _flush(db: Session, name: str) -> None:
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("name", f"The role name '{name}' has already been taken.") from e


def create_role(db: Session, name: str) -> Role:
    """Create a role; name must already be normalized to lowercase."""
    _ensure_name_free(db, name)
    role = Role(name=name)
    db.add(role)
    _flush(db, name)
    return role


def rename_role(db: Session, role: Role, name: str) -> Role:
    """Rename a role. The admin role can neither be renamed nor be a rename target."""
    if role.is_protected:
        raise ProtectedResource("The admin role is a protected system role and cannot be renamed.")
    if name == ADMIN_ROLE:
        raise ProtectedResource("The name 'admin' is reserved for the protected system role.")
    if name == role.name:
        return role
    _ensure_name_free(db, name, exclude_id=role.id)
    role.name = name
    _flush(db, name)
    return role


def delete_role(db: Session, role: Role) -> None:
    """Delete a role and its user/service links. The admin role is protected."""
    if role.is_protected:
        raise ProtectedResource("The admin role is a protected system role and cannot be deleted.")
    role.users.clear()
    role.services.clear()
    db.delete(role)
    db.flush()


def sync_role_services(db: Session, role: Role, service_ids: list[int]) -> SyncResult:
    """Link role to exactly service_ids (admin included; the gate bypass makes it moot)."""
    return sync_links(db, role, "services", Service, service_ids, "service_ids")
