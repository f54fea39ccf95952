"""Directory lookup adapter: search and bind against OpenLDAP / FreeIPA with ldap3."""

from __future__ import annotations

import logging
import ssl
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import ldap3
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from nita.models.user import IdentitySource

if TYPE_CHECKING:
    from nita.core.config import Settings

logger = logging.getLogger(__name__)

# Attributes requested for every user entry.
USER_ATTRIBUTES = ["uid", "cn", "displayName", "mail", "mailAlternateAddress"]

PROVIDER_LABELS = {
    IdentitySource.OPENLDAP: "OpenLDAP",
    IdentitySource.FREEIPA: "FreeIPA",
}


class DirectoryError(Exception):
    """Connection, timeout or protocol fault while talking to a directory."""

    def __init__(self, message: str, directory: str) -> None:
        self.message = message
        self.directory = directory
        super().__init__(f"{directory}: {message}")


@dataclass(frozen=True)
class DirectoryProfile:
    """Connection profile for one directory server."""

    source: IdentitySource
    host: str | None
    port: int = 389
    base_dn: str = ""
    bind_dn: str | None = None
    bind_password: str | None = None
    use_ssl: bool = False
    use_tls: bool = False
    user_attribute: str = "uid"
    timeout: float = 5.0

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self.source]

    @property
    def configured(self) -> bool:
        return bool(self.host)


@dataclass(frozen=True)
class DirectoryUser:
    """Normalized directory entry."""

    username: str
    name: str
    email: str | None
    dn: str
    source: IdentitySource

    @property
    def provider(self) -> str:
        return PROVIDER_LABELS[self.source]


def _first(attributes: Mapping[str, Any], attribute: str) -> str | None:
    """First non-empty value of an attribute, or None when absent."""
    values = attributes.get(attribute)
    if values is None:
        return None
    if not isinstance(values, (list, tuple)):
        values = [values]
    for value in values:
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        text = str(value).strip()
        if text:
            return text
    return None


class DirectoryClient:
    """
    Looks users up and verifies their passwords against one directory.

    Every round-trip is bounded by the profile timeout; any ldap3 failure
    other than rejected user credentials is raised as DirectoryError.
    """

    def __init__(self, profile: DirectoryProfile) -> None:
        self.profile = profile

    @property
    def label(self) -> str:
        return self.profile.label

    @property
    def configured(self) -> bool:
        return self.profile.configured

    def _server(self) -> ldap3.Server:
        tls = ldap3.Tls(validate=ssl.CERT_REQUIRED) if (
            self.profile.use_ssl or self.profile.use_tls
        ) else None
        return ldap3.Server(
            self.profile.host,
            port=self.profile.port,
            use_ssl=self.profile.use_ssl,
            tls=tls,
            get_info=ldap3.NONE,
            connect_timeout=self.profile.timeout,
        )

    def _service_connection(self, server: ldap3.Server) -> ldap3.Connection:
        """Bound connection using the service account (anonymous if none)."""
        auto_bind = (
            ldap3.AUTO_BIND_TLS_BEFORE_BIND if self.profile.use_tls else ldap3.AUTO_BIND_NO_TLS
        )
        return ldap3.Connection(
            server,
            user=self.profile.bind_dn or None,
            password=self.profile.bind_password or None,
            auto_bind=auto_bind,
            read_only=True,
            receive_timeout=self.profile.timeout,
        )

    def _to_user(self, entry: Mapping[str, Any], username: str) -> DirectoryUser:
        attributes = entry.get("attributes") or {}
        return DirectoryUser(
            username=_first(attributes, self.profile.user_attribute) or username,
            name=_first(attributes, "cn") or _first(attributes, "displayName") or username,
            email=_first(attributes, "mail") or _first(attributes, "mailAlternateAddress"),
            dn=entry["dn"],
            source=self.profile.source,
        )

    def _search(self, server: ldap3.Server, username: str) -> DirectoryUser | None:
        search_filter = f"({self.profile.user_attribute}={escape_filter_chars(username)})"
        conn = self._service_connection(server)
        try:
            conn.search(
                search_base=self.profile.base_dn,
                search_filter=search_filter,
                search_scope=ldap3.SUBTREE,
                attributes=USER_ATTRIBUTES,
                size_limit=1,
            )
            entries = [r for r in conn.response or [] if r.get("type") == "searchResEntry"]
            logger.debug(
                "Directory search returned %s entries",
                len(entries),
                extra={"directory": self.label, "username": username},
            )
            if not entries:
                return None
            return self._to_user(entries[0], username)
        finally:
            conn.unbind()

    def _require_configured(self) -> None:
        if not self.profile.configured:
            raise DirectoryError("directory is not configured", self.label)

    def find_user(self, username: str) -> DirectoryUser | None:
        """Return the directory entry for username, or None if it does not exist."""
        self._require_configured()
        try:
            return self._search(self._server(), username)
        except LDAPException as e:
            raise DirectoryError(str(e) or type(e).__name__, self.label) from e

    def authenticate(self, username: str, password: str) -> DirectoryUser | None:
        """
        Find the user's entry, then bind as that DN with the given password.

        Returns the entry on success, None when the user does not exist or the
        bind is rejected. Raises DirectoryError on infrastructure faults.
        """
        self._require_configured()
        if not password:
            # An empty password would be an unauthenticated bind, which succeeds.
            return None
        try:
            server = self._server()
            user = self._search(server, username)
            if user is None:
                return None
            conn = ldap3.Connection(
                server,
                user=user.dn,
                password=password,
                read_only=True,
                receive_timeout=self.profile.timeout,
            )
            try:
                conn.open()
                if self.profile.use_tls:
                    conn.start_tls()
                bound = conn.bind()
            finally:
                conn.unbind()
        except LDAPException as e:
            raise DirectoryError(str(e) or type(e).__name__, self.label) from e
        if not bound:
            logger.info(
                "Directory bind rejected",
                extra={"directory": self.label, "username": username},
            )
            return None
        return user


class DirectoryRegistry:
    """The configured directories, keyed by identity source, in lookup order."""

    def __init__(self, clients: dict[IdentitySource, DirectoryClient]) -> None:
        self._clients = clients

    def get(self, source: IdentitySource) -> DirectoryClient:
        return self._clients[source]

    def ordered(self) -> list[DirectoryClient]:
        """Directory A first, then directory B."""
        return [self._clients[s] for s in sorted(self._clients)]


def profiles_from_settings(settings: Settings) -> list[DirectoryProfile]:
    """Build the OpenLDAP and FreeIPA profiles from settings."""

    def secret(value) -> str | None:
        return value.get_secret_value() if value is not None else None

    return [
        DirectoryProfile(
            source=IdentitySource.OPENLDAP,
            host=settings.OPENLDAP_HOST,
            port=settings.OPENLDAP_PORT,
            base_dn=settings.OPENLDAP_BASE_DN,
            bind_dn=settings.OPENLDAP_BIND_DN,
            bind_password=secret(settings.OPENLDAP_BIND_PASSWORD),
            use_ssl=settings.OPENLDAP_USE_SSL,
            use_tls=settings.OPENLDAP_USE_TLS,
            user_attribute=settings.OPENLDAP_USER_ATTRIBUTE,
            timeout=settings.LDAP_TIMEOUT_SEC,
        ),
        DirectoryProfile(
            source=IdentitySource.FREEIPA,
            host=settings.FREEIPA_HOST,
            port=settings.FREEIPA_PORT,
            base_dn=settings.FREEIPA_BASE_DN,
            bind_dn=settings.FREEIPA_BIND_DN,
            bind_password=secret(settings.FREEIPA_BIND_PASSWORD),
            use_ssl=settings.FREEIPA_USE_SSL,
            use_tls=settings.FREEIPA_USE_TLS,
            user_attribute=settings.FREEIPA_USER_ATTRIBUTE,
            timeout=settings.LDAP_TIMEOUT_SEC,
        ),
    ]


def build_registry(settings: Settings) -> DirectoryRegistry:
    return DirectoryRegistry(
        {p.source: DirectoryClient(p) for p in profiles_from_settings(settings)}
    )
