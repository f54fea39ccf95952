"""ORM model for opaque bearer tokens (only the SHA-256 digest is stored)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from nita.models.base import Base, TimestampMixin


class PersonalAccessToken(TimestampMixin, Base):
    """One issued bearer token. At most one exists per user after a login."""

    __tablename__ = "personal_access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False, default="nita-token")
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="tokens")
