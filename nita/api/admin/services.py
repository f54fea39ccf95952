"""Admin service registry: CRUD, maintenance flag and service -> roles sync."""

from fastapi import APIRouter, Request, status

from nita.api.deps import AdminUser, DbSession, client_ip
from nita.models import Service
from nita.schemas.common import ErrorResponse, StatusMessage
from nita.schemas.roles import RoleIdsRequest
from nita.schemas.services import (
    MaintenanceRequest,
    ServiceCreate,
    ServiceOut,
    ServiceUpdate,
)
from nita.services import audit, catalog

router = APIRouter()


def _changes(service: Service, values: dict) -> dict:
    return {
        field: {"old": getattr(service, field), "new": value}
        for field, value in values.items()
        if getattr(service, field) != value
    }


@router.get("", response_model=list[ServiceOut])
def list_services(db: DbSession) -> list[ServiceOut]:
    return [ServiceOut.model_validate(s) for s in catalog.list_services(db)]


@router.post(
    "",
    response_model=ServiceOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def create_service(
    body: ServiceCreate, request: Request, admin: AdminUser, db: DbSession
) -> ServiceOut:
    service = catalog.create_service(db, body.model_dump())
    audit.record(
        db, admin, "create_service", f"Service: {service.name}", ip_address=client_ip(request)
    )
    db.commit()
    db.refresh(service)
    return ServiceOut.model_validate(service)


def _update(
    service_id: int, values: dict, request: Request, admin, db
) -> ServiceOut:
    service = catalog.get_service(db, service_id)
    changes = _changes(service, values)
    catalog.update_service(db, service, values)
    if changes:
        audit.record(
            db, admin, "update_service", f"Service: {service.name}",
            details=changes,
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(service)
    return ServiceOut.model_validate(service)


@router.put(
    "/{service_id}",
    response_model=ServiceOut,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def replace_service(
    service_id: int, body: ServiceCreate, request: Request, admin: AdminUser, db: DbSession
) -> ServiceOut:
    """Full update: every editable field is replaced."""
    return _update(service_id, body.model_dump(), request, admin, db)


@router.patch(
    "/{service_id}",
    response_model=ServiceOut,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def patch_service(
    service_id: int, body: ServiceUpdate, request: Request, admin: AdminUser, db: DbSession
) -> ServiceOut:
    """Partial update: only the fields sent are changed."""
    return _update(service_id, body.model_dump(exclude_unset=True), request, admin, db)


@router.delete(
    "/{service_id}",
    response_model=StatusMessage,
    responses={404: {"model": ErrorResponse}},
)
def delete_service(
    service_id: int, request: Request, admin: AdminUser, db: DbSession
) -> StatusMessage:
    service = catalog.get_service(db, service_id)
    name = service.name
    catalog.delete_service(db, service)
    audit.record(db, admin, "delete_service", f"Service: {name}", ip_address=client_ip(request))
    db.commit()
    return StatusMessage(message="Deleted successfully.")


@router.patch(
    "/{service_id}/maintenance",
    response_model=ServiceOut,
    responses={404: {"model": ErrorResponse}},
)
def toggle_maintenance(
    service_id: int,
    body: MaintenanceRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
) -> ServiceOut:
    service = catalog.get_service(db, service_id)
    catalog.set_maintenance(db, service, body.is_maintenance, body.maintenance_message)
    audit.record(
        db, admin, "update_service",
        f"Service: {service.name}",
        details={
            "is_maintenance": service.is_maintenance,
            "maintenance_message": service.maintenance_message,
        },
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(service)
    return ServiceOut.model_validate(service)


@router.put(
    "/{service_id}/roles",
    response_model=ServiceOut,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def sync_service_roles(
    service_id: int,
    body: RoleIdsRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
) -> ServiceOut:
    """Replace the roles that can see this service with exactly role_ids."""
    service = catalog.get_service(db, service_id)
    changes = catalog.sync_service_roles(db, service, body.role_ids)
    if changes.changed:
        audit.record(
            db, admin, "sync_service_roles", f"Service: {service.name}",
            details={"attached": changes.attached, "detached": changes.detached},
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(service)
    return ServiceOut.model_validate(service)
