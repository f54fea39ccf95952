"""Health check: database reachability and which directories are configured."""

from fastapi import APIRouter

from nita.api.deps import AppSettings, DbSession, Directories
from nita.core.database import check_db_connected
from nita.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: DbSession, settings: AppSettings, directories: Directories) -> HealthResponse:
    """Used by load balancers and monitoring; never contacts the directories."""
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        directories={client.label: client.configured for client in directories.ordered()},
    )
