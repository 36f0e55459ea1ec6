"""Group and group membership models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from domeal.database import Base
from domeal.models.mixins import TimestampMixin


class Group(Base, TimestampMixin):
    """A set of users splitting the cost of shared receipts."""

    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    menu = Column(String(255), nullable=False)
    menu_image_url = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    receipts = relationship("Receipt", back_populates="group")


class GroupMember(Base):
    """Membership of a user in a group."""

    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_owner = Column(Boolean, nullable=False, default=False)
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    group = relationship("Group", back_populates="members")
    user = relationship("User", backref="group_memberships")
