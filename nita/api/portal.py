"""Dashboard discovery: the services and roles any signed-in user may read."""

from fastapi import APIRouter, Depends

from nita.api.deps import AppSettings, CurrentUser, DbSession, require_service_access
from nita.core.errors import NotFound
from nita.schemas.common import ErrorResponse
from nita.schemas.roles import RoleOut
from nita.schemas.services import ServiceOut, VpnCredentials
from nita.services import catalog, gate, roles

router = APIRouter()


@router.get("/services", response_model=list[ServiceOut])
def list_visible_services(user: CurrentUser, db: DbSession) -> list[ServiceOut]:
    """Administrators see every service; others see services linked to their roles."""
    return [ServiceOut.model_validate(s) for s in gate.visible_services(db, user)]


@router.get(
    "/services/{slug}",
    response_model=ServiceOut,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_visible_service(slug: str, user: CurrentUser, db: DbSession) -> ServiceOut:
    """One service by slug (or name), if the caller may access it."""
    gate.authorize(db, user, gate.AccessService(slug))
    service = catalog.find_service(db, slug)
    if service is None:
        raise NotFound("Service not found.")
    return ServiceOut.model_validate(service)


@router.get("/roles", response_model=list[RoleOut])
def list_roles(_user: CurrentUser, db: DbSession) -> list[RoleOut]:
    """All roles with their linked services (matrix helper)."""
    return [RoleOut.model_validate(r) for r in roles.list_roles(db)]


@router.get(
    "/vpn/credentials",
    response_model=VpnCredentials,
    dependencies=[Depends(require_service_access("vpn"))],
    responses={403: {"model": ErrorResponse}},
)
def vpn_credentials(user: CurrentUser, settings: AppSettings) -> VpnCredentials:
    return VpnCredentials(username=user.username, config=settings.VPN_CLIENT_CONFIG)
