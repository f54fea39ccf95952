"""Shared route dependencies: bearer identity, admin gating, directories, icon store."""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from nita.core.config import Settings, get_settings
from nita.core.database import get_db
from nita.models import User
from nita.services import gate
from nita.services.auth import resolve_token
from nita.services.directory import DirectoryRegistry, build_registry
from nita.services.media import IconStore

security = HTTPBearer(auto_error=False)

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DbSession,
    settings: AppSettings,
) -> User:
    """Dependency: require a valid bearer token and return its owner. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = resolve_token(db, credentials.credentials, settings)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentUser, db: DbSession) -> User:
    """Dependency: require the manage-system capability. Raises 403 otherwise."""
    gate.authorize(db, user, gate.MANAGE_SYSTEM)
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def require_service_access(service: str) -> Callable[..., User]:
    """Dependency factory: require access to the named service (slug or name)."""

    def dependency(user: CurrentUser, db: DbSession) -> User:
        gate.authorize(db, user, gate.AccessService(service))
        return user

    return dependency


@lru_cache
def get_directory_registry() -> DirectoryRegistry:
    """The OpenLDAP / FreeIPA clients built from settings (overridable in tests)."""
    return build_registry(get_settings())


Directories = Annotated[DirectoryRegistry, Depends(get_directory_registry)]


def get_icon_store(settings: AppSettings) -> IconStore:
    return IconStore(settings.MEDIA_ROOT, settings.MAX_ICON_BYTES)


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
