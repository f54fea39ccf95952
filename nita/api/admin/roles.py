"""Admin role management and the role -> services matrix sync."""

from fastapi import APIRouter, Request, status

from nita.api.deps import AdminUser, DbSession, client_ip
from nita.schemas.common import ErrorResponse, StatusMessage
from nita.schemas.roles import (
    RoleCreate,
    RoleOut,
    RoleSyncResponse,
    RoleUpdate,
    ServiceIdsRequest,
    SyncResult,
)
from nita.services import audit
from nita.services import roles as role_service

router = APIRouter()


@router.post(
    "",
    response_model=RoleOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def create_role(
    body: RoleCreate, request: Request, admin: AdminUser, db: DbSession
) -> RoleOut:
    role = role_service.create_role(db, body.name)
    audit.record(db, admin, "create_role", f"Role: {role.name}", ip_address=client_ip(request))
    db.commit()
    db.refresh(role)
    return RoleOut.model_validate(role)


@router.patch(
    "/{role_id}",
    response_model=RoleOut,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_role(
    role_id: int, body: RoleUpdate, request: Request, admin: AdminUser, db: DbSession
) -> RoleOut:
    """Rename a role. The admin role cannot be renamed, and no role can become admin."""
    role = role_service.get_role(db, role_id)
    old_name = role.name
    role_service.rename_role(db, role, body.name)
    if role.name != old_name:
        audit.record(
            db, admin, "update_role", f"Role: {role.name}",
            details={"old_name": old_name, "new_name": role.name},
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(role)
    return RoleOut.model_validate(role)


@router.delete(
    "/{role_id}",
    response_model=StatusMessage,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_role(role_id: int, request: Request, admin: AdminUser, db: DbSession) -> StatusMessage:
    role = role_service.get_role(db, role_id)
    name = role.name
    role_service.delete_role(db, role)
    audit.record(db, admin, "delete_role", f"Role: {name}", ip_address=client_ip(request))
    db.commit()
    return StatusMessage(message="Role deleted")


@router.put(
    "/{role_id}/services",
    response_model=RoleSyncResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def sync_role_services(
    role_id: int,
    body: ServiceIdsRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
) -> RoleSyncResponse:
    """Replace the role's services with exactly service_ids (matrix save)."""
    role = role_service.get_role(db, role_id)
    changes = role_service.sync_role_services(db, role, body.service_ids)
    if changes.changed:
        audit.record(
            db, admin, "sync_role_services", f"Role: {role.name}",
            details={"attached": changes.attached, "detached": changes.detached},
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(role)
    return RoleSyncResponse(
        message="Role permissions updated",
        role=RoleOut.model_validate(role),
        changes=SyncResult.model_validate(changes),
    )
