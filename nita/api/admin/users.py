"""Admin user management and directory (OpenLDAP / FreeIPA) import."""

import logging

from fastapi import APIRouter, Request

from nita.api.deps import AdminUser, AppSettings, DbSession, Directories, client_ip
from nita.schemas.common import ErrorResponse, UserOut
from nita.schemas.roles import RoleIdsRequest
from nita.schemas.users import (
    DirectorySyncRequest,
    DirectoryUserOut,
    DiscoverRequest,
    UserRolesResponse,
    UserSyncRequest,
    UserSyncResponse,
)
from nita.services import audit
from nita.services import users as user_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/users", response_model=list[UserOut])
def list_users(db: DbSession) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in user_service.list_users(db)]


@router.post("/users/sync", response_model=UserOut)
def sync_external_user(
    body: UserSyncRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
) -> UserOut:
    """Legacy import: create a directory shadow user by username if it does not exist."""
    user, created = user_service.import_by_username(db, body.username)
    if created:
        audit.record(
            db, admin, "sync_user", f"User: {user.username}",
            details="Imported user: " + user.username,
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(user)
    return UserOut.model_validate(user)


@router.post(
    "/ldap/discover",
    response_model=DirectoryUserOut,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def discover_directory_user(
    body: DiscoverRequest,
    directories: Directories,
    settings: AppSettings,
) -> DirectoryUserOut:
    """Find a user in OpenLDAP, then FreeIPA. Nothing is persisted."""
    found = user_service.discover(directories, body.username, debug=settings.DEBUG)
    return DirectoryUserOut(
        username=found.username,
        name=found.name,
        email=found.email or f"{found.username}@{settings.DEFAULT_EMAIL_DOMAIN}",
        provider=found.provider,
    )


@router.post("/ldap/sync", response_model=UserSyncResponse)
def sync_directory_user(
    body: DirectorySyncRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
    settings: AppSettings,
) -> UserSyncResponse:
    """Upsert a previously discovered directory user into the local user table."""
    user = user_service.import_discovered(
        db,
        username=body.username,
        name=body.name,
        email=body.email,
        provider=body.provider,
        default_email_domain=settings.DEFAULT_EMAIL_DOMAIN,
    )
    audit.record(
        db, admin, "sync_user", f"User: {user.username}",
        details={"provider": body.provider, "source": user.source},
        ip_address=client_ip(request),
    )
    db.commit()
    db.refresh(user)
    logger.info(
        "Directory user synced",
        extra={"user_id": user.id, "directory": body.provider},
    )
    return UserSyncResponse(
        message=(
            f"User '{user.name}' has been synced successfully. "
            "You can now assign roles and services."
        ),
        user=UserOut.model_validate(user),
    )


@router.put(
    "/users/{user_id}/roles",
    response_model=UserRolesResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def sync_user_roles(
    user_id: int,
    body: RoleIdsRequest,
    request: Request,
    admin: AdminUser,
    db: DbSession,
) -> UserRolesResponse:
    """Replace the user's roles with exactly role_ids."""
    user = user_service.get_user(db, user_id)
    changes = user_service.sync_user_roles(db, user, body.role_ids)
    if changes.changed:
        audit.record(
            db, admin, "sync_user_roles", f"User: {user.username}",
            details={"attached": changes.attached, "detached": changes.detached},
            ip_address=client_ip(request),
        )
    db.commit()
    db.refresh(user)
    return UserRolesResponse(message="Roles updated", user=UserOut.model_validate(user))
