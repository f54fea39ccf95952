"""ORM model for roles and the role<->user / role<->service join tables."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from nita.models.base import Base, TimestampMixin

# Name of the protected system role; it bypasses every authorization check.
ADMIN_ROLE = "admin"

role_user = Table(
    "role_user",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

role_service = Table(
    "role_service",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Role(TimestampMixin, Base):
    """Named permission bucket. Names are stored lowercase."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True, index=True)

    users = relationship("User", secondary=role_user, back_populates="roles")
    services = relationship(
        "Service",
        secondary=role_service,
        back_populates="roles",
        order_by="Service.id",
    )

    @property
    def is_protected(self) -> bool:
        return (self.name or "").lower() == ADMIN_ROLE
