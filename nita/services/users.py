"""User administration: listing, role sync and importing directory users."""

import logging
from sqlalchemy.orm import Session, selectinload

from nita.core.errors import AuthSystemError, NotFound
from nita.models import IdentitySource, Role, User
from nita.services.auth import upsert_shadow_user
from nita.services.directory import (
    PROVIDER_LABELS,
    DirectoryError,
    DirectoryRegistry,
    DirectoryUser,
)
from nita.services.matrix import SyncResult, sync_links

logger = logging.getLogger(__name__)

DISCOVERY_UNAVAILABLE = "LDAP/FreeIPA directory connection failed. Please try again later."

SOURCE_BY_PROVIDER = {label: source for source, label in PROVIDER_LABELS.items()}


def list_users(db: Session) -> list[User]:
    return db.query(User).options(selectinload(User.roles)).order_by(User.id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def sync_user_roles(db: Session, user: User, role_ids: list[int]) -> SyncResult:
    return sync_links(db, user, "roles", Role, role_ids, "role_ids")


def import_by_username(db: Session, username: str) -> tuple[User, bool]:
    """
    Legacy one-shot import: create a directory shadow user if absent.

    Returns (user, created). An existing user of any source is returned as is.
    """
    user = db.query(User).filter(User.username == username).first()
    if user is not None:
        return user, False
    user = upsert_shadow_user(
        db,
        username=username,
        name=username,
        email=None,
        source=IdentitySource.OPENLDAP,
    )
    return user, True


def discover(
    directories: DirectoryRegistry, username: str, debug: bool = False
) -> DirectoryUser:
    """
    Search OpenLDAP, then FreeIPA, for username without persisting anything.

    A hit in either directory wins. If neither has the user, NotFound is
    raised, unless a directory faulted, in which case the miss cannot be
    trusted and AuthSystemError is raised instead.
    """
    errors: list[DirectoryError] = []
    for client in directories.ordered():
        try:
            found = client.find_user(username)
        except DirectoryError as e:
            logger.exception(
                "Directory discovery failed",
                extra={"directory": e.directory, "username": username},
            )
            errors.append(e)
            continue
        if found is not None:
            logger.info(
                "Directory user discovered",
                extra={"directory": client.label, "username": username},
            )
            return found
        logger.info(
            "Directory user not found",
            extra={"directory": client.label, "username": username},
        )
    if errors:
        detail = "; ".join(str(e) for e in errors) if debug else None
        raise AuthSystemError(DISCOVERY_UNAVAILABLE, debug=detail)
    raise NotFound(
        f"User '{username}' not found in OpenLDAP or FreeIPA. Please check the username."
    )


def import_discovered(
    db: Session,
    username: str,
    name: str,
    email: str | None,
    provider: str,
    default_email_domain: str,
) -> User:
    """Upsert the confirmed discovery payload as a shadow user."""
    return upsert_shadow_user(
        db,
        username=username,
        name=name,
        email=email or f"{username}@{default_email_domain}",
        source=SOURCE_BY_PROVIDER[provider],
    )
