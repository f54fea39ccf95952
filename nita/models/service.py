"""ORM model for registered tools (services) shown on the portal dashboard."""

from sqlalchemy import Boolean, Column, Integer, String, Text, false
from sqlalchemy.orm import relationship

from nita.models.base import Base, TimestampMixin
from nita.models.role import role_service


class Service(TimestampMixin, Base):
    """
    A tool link with metadata. Visible to a user when one of the user's roles
    is linked to it, or when the user is an administrator.

    icon: either a symbolic icon name (e.g. 'BookOpen') or an uploaded file name.
    """

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    url = Column(String(2048), nullable=False)
    category = Column(String(255), nullable=True)
    icon = Column(String(255), nullable=True)
    is_maintenance = Column(Boolean, nullable=False, default=False, server_default=false())
    maintenance_message = Column(Text, nullable=True)

    roles = relationship(
        "Role",
        secondary=role_service,
        back_populates="services",
        order_by="Role.id",
    )
