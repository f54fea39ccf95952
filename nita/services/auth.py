"""Login dispatch, shadow-user upsert and bearer-token issuance.

Both credential kinds are verified by their own strategy and then funnel
into issue_session(), which revokes the user's previous tokens before
minting exactly one new token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nita.core.errors import AuthSystemError, InvalidCredentials, ValidationFailed
from nita.core.security import (
    generate_token,
    hash_password,
    hash_token,
    random_password_hash,
    verify_password,
)
from nita.models import IdentitySource, PersonalAccessToken, User
from nita.services.directory import DirectoryError, DirectoryRegistry

if TYPE_CHECKING:
    from nita.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_NAME = "nita-token"
LOCAL_FAILURE = "Invalid local credentials"
DIRECTORY_FAILURE = "Invalid LDAP/IPA credentials"
DIRECTORY_UNAVAILABLE = "Authentication service is unavailable. Please try again later."


@dataclass(frozen=True)
class LocalCredential:
    username: str
    password: str


@dataclass(frozen=True)
class DirectoryCredential:
    source: IdentitySource
    username: str
    password: str


Credential = LocalCredential | DirectoryCredential


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


def credential_from_request(username: str, password: str, type_: str) -> Credential:
    """Map the login form's type ("0", "1", "2") onto a credential kind."""
    try:
        source = IdentitySource(int(type_))
    except (TypeError, ValueError):
        raise ValidationFailed.for_field("type", "The selected type is invalid.") from None
    if source is IdentitySource.LOCAL:
        return LocalCredential(username=username, password=password)
    return DirectoryCredential(source=source, username=username, password=password)


def _verify_local(db: Session, credential: LocalCredential) -> User:
    # Only local accounts; directory shadow users never authenticate here.
    user = (
        db.query(User)
        .filter(
            User.username == credential.username,
            User.source == IdentitySource.LOCAL.value,
        )
        .first()
    )
    if not verify_password(credential.password, user.password_hash if user else None):
        raise InvalidCredentials(LOCAL_FAILURE)
    return user


def upsert_shadow_user(
    db: Session,
    username: str,
    name: str,
    email: str | None,
    source: IdentitySource,
) -> User:
    """
    Create or update the local anchor row for a directory identity.

    Keyed on username. The stored password hash is of a random secret and is
    never checked. If a concurrent request inserted the same username first,
    the insert is retried as an update (last writer wins).
    """
    try:
        return _write_shadow_user(db, username, name, email, source)
    except IntegrityError:
        db.rollback()
        logger.info(
            "Shadow user inserted concurrently; retrying as update",
            extra={"username": username},
        )
        return _write_shadow_user(db, username, name, email, source)


def _write_shadow_user(
    db: Session,
    username: str,
    name: str,
    email: str | None,
    source: IdentitySource,
) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = User(username=username)
        db.add(user)
    elif user.source == IdentitySource.LOCAL.value:
        logger.warning(
            "Local account taken over by directory login",
            extra={"username": username, "directory": source.name},
        )
    user.name = name or username
    if email:
        user.email = email
    user.source = source.value
    user.password_hash = random_password_hash()
    db.flush()
    return user


def _verify_directory(
    db: Session,
    credential: DirectoryCredential,
    directories: DirectoryRegistry,
    debug: bool,
) -> User:
    client = directories.get(credential.source)
    try:
        entry = client.authenticate(credential.username, credential.password)
    except DirectoryError as e:
        logger.exception(
            "Directory authentication failed",
            extra={"directory": e.directory, "username": credential.username},
        )
        raise AuthSystemError(DIRECTORY_UNAVAILABLE, debug=str(e) if debug else None) from e
    if entry is None:
        raise InvalidCredentials(DIRECTORY_FAILURE)
    return upsert_shadow_user(
        db,
        username=credential.username,
        name=entry.name,
        email=entry.email,
        source=credential.source,
    )


def authenticate(
    db: Session,
    credential: Credential,
    directories: DirectoryRegistry,
    debug: bool = False,
) -> User:
    """Verify a credential with the strategy for its kind and return the user."""
    if isinstance(credential, LocalCredential):
        return _verify_local(db, credential)
    return _verify_directory(db, credential, directories, debug)


def issue_session(db: Session, user: User, settings: Settings) -> str:
    """
    Revoke every token of user and mint one new token. Commits.

    The delete is flushed before the new row is added, so within one request
    there is never a moment with two valid tokens for the user.
    """
    db.query(PersonalAccessToken).filter(PersonalAccessToken.user_id == user.id).delete(
        synchronize_session=False
    )
    db.flush()
    plain, digest = generate_token(settings.TOKEN_PREFIX)
    expires_at = None
    if settings.TOKEN_EXPIRE_MINUTES:
        expires_at = datetime.now(UTC) + timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES)
    db.add(
        PersonalAccessToken(
            user_id=user.id,
            name=TOKEN_NAME,
            token_hash=digest,
            expires_at=expires_at,
        )
    )
    db.commit()
    db.refresh(user)
    return plain


def login(
    db: Session,
    credential: Credential,
    directories: DirectoryRegistry,
    settings: Settings,
) -> LoginResult:
    """Authenticate, then issue a fresh session token for the user."""
    try:
        user = authenticate(db, credential, directories, debug=settings.DEBUG)
    except InvalidCredentials:
        logger.info(
            "Login rejected",
            extra={"username": credential.username, "source": _source_of(credential).name},
        )
        raise
    token = issue_session(db, user, settings)
    logger.info(
        "Login succeeded",
        extra={"user_id": user.id, "source": _source_of(credential).name},
    )
    return LoginResult(token=token, user=user)


def _source_of(credential: Credential) -> IdentitySource:
    if isinstance(credential, DirectoryCredential):
        return credential.source
    return IdentitySource.LOCAL


def revoke_sessions(db: Session, user: User) -> int:
    """Delete every token of user. Commits; returns the number revoked."""
    count = (
        db.query(PersonalAccessToken)
        .filter(PersonalAccessToken.user_id == user.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return count


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def resolve_token(db: Session, token: str, settings: Settings) -> User | None:
    """Return the owner of a presented bearer token, or None if it is not valid."""
    if not token or not token.startswith(settings.TOKEN_PREFIX):
        return None
    record = (
        db.query(PersonalAccessToken)
        .filter(PersonalAccessToken.token_hash == hash_token(token))
        .first()
    )
    if record is None:
        return None
    now = datetime.now(UTC)
    if record.expires_at is not None and _as_aware(record.expires_at) <= now:
        return None
    record.last_used_at = now
    db.commit()
    return record.user


def change_password(
    db: Session,
    user: User,
    current_password: str,
    new_password: str,
    confirmation: str,
) -> None:
    """Replace a local user's password after verifying the current one. Commits."""
    if user.identity_source.is_directory:
        raise ValidationFailed.for_field(
            "current_password",
            "Directory accounts must change their password in the directory.",
        )
    if new_password != confirmation:
        raise ValidationFailed.for_field(
            "new_password", "The new password confirmation does not match."
        )
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentials("Current password is incorrect.")
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed", extra={"user_id": user.id})
