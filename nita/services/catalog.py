"""Service registry: CRUD, maintenance flag and the service->roles sync."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from nita.core.errors import Conflict, NotFound
from nita.models import Role, Service
from nita.services.matrix import SyncResult, sync_links

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "slug", "url", "category", "icon")
UNIQUE_FIELDS = ("name", "slug")


def list_services(db: Session) -> list[Service]:
    return db.query(Service).options(selectinload(Service.roles)).order_by(Service.id).all()


def get_service(db: Session, service_id: int) -> Service:
    service = db.get(Service, service_id)
    if service is None:
        raise NotFound("Service not found.")
    return service


def find_service(db: Session, key: str) -> Service | None:
    """Look a service up by slug first, then by name."""
    service = db.query(Service).filter(Service.slug == key).first()
    if service is None:
        service = db.query(Service).filter(Service.name == key).first()
    return service


def _ensure_unique(db: Session, values: dict[str, Any], exclude_id: int | None = None) -> None:
    for field in UNIQUE_FIELDS:
        if field not in values:
            continue
        column = getattr(Service, field)
        query = db.query(Service.id).filter(column == values[field])
        if exclude_id is not None:
            query = query.filter(Service.id != exclude_id)
        if query.first() is not None:
            raise Conflict(field, f"The {field} '{values[field]}' has already been taken.")


def _flush(db: Session) -> None:
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        message = str(e.orig).lower()
        field = "slug" if "slug" in message else "name"
        raise Conflict(field, f"The {field} has already been taken.") from e


def create_service(db: Session, values: dict[str, Any]) -> Service:
    """Create a service. Duplicate name or slug is a Conflict; nothing is overwritten."""
    values = {k: v for k, v in values.items() if k in EDITABLE_FIELDS}
    _ensure_unique(db, values)
    service = Service(**values, is_maintenance=False)
    db.add(service)
    _flush(db)
    return service


def update_service(db: Session, service: Service, values: dict[str, Any]) -> Service:
    """Apply the given fields to service; fields not present are left unchanged."""
    values = {k: v for k, v in values.items() if k in EDITABLE_FIELDS}
    _ensure_unique(db, values, exclude_id=service.id)
    for field, value in values.items():
        setattr(service, field, value)
    _flush(db)
    return service


def delete_service(db: Session, service: Service) -> None:
    """Delete a service together with its role links."""
    service.roles.clear()
    db.delete(service)
    db.flush()


def set_maintenance(
    db: Session, service: Service, is_maintenance: bool, message: str | None
) -> Service:
    """Toggle maintenance; switching it off clears the message."""
    service.is_maintenance = is_maintenance
    if is_maintenance:
        service.maintenance_message = (message or "").strip() or None
    else:
        service.maintenance_message = None
    db.flush()
    return service


def sync_service_roles(db: Session, service: Service, role_ids: list[int]) -> SyncResult:
    return sync_links(db, service, "roles", Role, role_ids, "role_ids")
