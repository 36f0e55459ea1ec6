"""User, session and OAuth token models."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from domeal.database import Base
from domeal.models.mixins import TimestampMixin


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base, TimestampMixin):
    """A LINE-authenticated user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    line_sub = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    picture_url = Column(String, nullable=True)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    token = relationship(
        "UserToken", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class UserSession(Base):
    """Opaque cookie session with a sliding inactivity window."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    session_token = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    last_used_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")


class UserToken(Base, TimestampMixin):
    """Access/refresh token pair returned by the LINE token endpoint."""

    __tablename__ = "user_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)

    user = relationship("User", back_populates="token")
