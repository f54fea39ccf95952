"""Shared fixtures for API tests: in-memory SQLite, fake directories and data helpers."""

import unittest
from contextlib import contextmanager
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nita.api.deps import get_directory_registry
from nita.core.config import Settings, get_settings
from nita.core.database import get_db
from nita.core.security import hash_password
from nita.main import app
from nita.models import Base, IdentitySource, PersonalAccessToken, Role, Service, User
from nita.services import auth as auth_service
from nita.services.directory import (
    PROVIDER_LABELS,
    DirectoryError,
    DirectoryRegistry,
    DirectoryUser,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


class FakeDirectory:
    """In-memory stand-in for DirectoryClient."""

    def __init__(self, source: IdentitySource) -> None:
        self.source = source
        self.label = PROVIDER_LABELS[source]
        self.entries: dict[str, DirectoryUser] = {}
        self.passwords: dict[str, str] = {}
        self.fault: str | None = None
        self.calls: list[tuple[str, str]] = []
        self.configured = True

    def add(
        self,
        username: str,
        password: str,
        name: str | None = None,
        email: str | None = None,
    ) -> DirectoryUser:
        entry = DirectoryUser(
            username=username,
            name=name or username,
            email=email,
            dn=f"uid={username},ou=people,dc=example,dc=org",
            source=self.source,
        )
        self.entries[username] = entry
        self.passwords[username] = password
        return entry

    def find_user(self, username: str) -> DirectoryUser | None:
        self.calls.append(("find", username))
        if self.fault:
            raise DirectoryError(self.fault, self.label)
        return self.entries.get(username)

    def authenticate(self, username: str, password: str) -> DirectoryUser | None:
        self.calls.append(("bind", username))
        if self.fault:
            raise DirectoryError(self.fault, self.label)
        entry = self.entries.get(username)
        if entry is None or self.passwords.get(username) != password:
            return None
        return entry


class ApiTestCase(unittest.TestCase):
    """Fresh schema, TestClient and fake directories for every test."""

    def setUp(self) -> None:
        # Cheap bcrypt rounds keep the suite fast; verification is unaffected.
        rounds = patch("nita.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        Base.metadata.create_all(engine)
        self.addCleanup(Base.metadata.drop_all, engine)
        self.db: Session = TestingSession()
        self.addCleanup(self.db.close)

        self.openldap = FakeDirectory(IdentitySource.OPENLDAP)
        self.freeipa = FakeDirectory(IdentitySource.FREEIPA)
        self.directories = DirectoryRegistry(
            {IdentitySource.OPENLDAP: self.openldap, IdentitySource.FREEIPA: self.freeipa}
        )

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_directory_registry] = lambda: self.directories
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)
        self.prefix = get_settings().API_PREFIX

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def make_role(self, name: str) -> Role:
        role = Role(name=name)
        self.db.add(role)
        self.db.commit()
        return role

    def make_service(self, slug: str, name: str | None = None, roles: tuple = ()) -> Service:
        service = Service(
            name=name or slug.title(),
            slug=slug,
            url=f"https://{slug}.example.org",
            category="General",
            icon="Globe",
            is_maintenance=False,
        )
        service.roles.extend(roles)
        self.db.add(service)
        self.db.commit()
        return service

    def make_user(
        self,
        username: str,
        password: str = "password123",
        roles: tuple = (),
        source: IdentitySource = IdentitySource.LOCAL,
        name: str | None = None,
    ) -> User:
        user = User(
            username=username,
            name=name or username.title(),
            email=f"{username}@example.org",
            password_hash=hash_password(password),
            source=source.value,
        )
        user.roles.extend(roles)
        self.db.add(user)
        self.db.commit()
        return user

    def headers_for(self, user: User) -> dict[str, str]:
        token = auth_service.issue_session(self.db, user, get_settings())
        return {"Authorization": f"Bearer {token}"}

    def token_count(self, user: User) -> int:
        self.db.expire_all()
        return (
            self.db.query(PersonalAccessToken)
            .filter(PersonalAccessToken.user_id == user.id)
            .count()
        )

    def admin_headers(self) -> dict[str, str]:
        admin_role = self.db.query(Role).filter(Role.name == "admin").first()
        if admin_role is None:
            admin_role = self.make_role("admin")
        admin = self.make_user("root-admin", roles=(admin_role,))
        return self.headers_for(admin)

    @contextmanager
    def settings_override(self, **values):
        """Serve requests with a copy of the settings carrying the given values."""
        overridden: Settings = get_settings().model_copy(update=values)
        app.dependency_overrides[get_settings] = lambda: overridden
        try:
            yield overridden
        finally:
            app.dependency_overrides.pop(get_settings, None)
