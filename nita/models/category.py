"""ORM model for service categories offered by the admin screens."""

from sqlalchemy import Column, Integer, String

from nita.models.base import Base, TimestampMixin


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
