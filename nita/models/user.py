"""ORM model for portal users (local accounts and directory shadow users)."""

import enum

from sqlalchemy import Column, Integer, SmallInteger, String
from sqlalchemy.orm import relationship

from nita.models.base import Base, TimestampMixin
from nita.models.role import role_user


class IdentitySource(enum.IntEnum):
    """Where a user's credentials are verified."""

    LOCAL = 0
    OPENLDAP = 1
    FREEIPA = 2

    @property
    def is_directory(self) -> bool:
        return self is not IdentitySource.LOCAL


class User(TimestampMixin, Base):
    """
    A human identity known to the portal.

    For directory-sourced users (source 1 or 2) password_hash holds the hash
    of a random secret and is never checked; the row only anchors role
    assignments.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    source = Column(SmallInteger, nullable=False, default=IdentitySource.LOCAL.value)

    roles = relationship(
        "Role",
        secondary=role_user,
        back_populates="users",
        order_by="Role.id",
    )
    tokens = relationship(
        "PersonalAccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def identity_source(self) -> IdentitySource:
        return IdentitySource(self.source)
