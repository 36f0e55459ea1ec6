"""Group creation, joining and membership checks."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domeal.errors import Conflict, NotFound, PersistenceError, ValidationError
from domeal.models.group import Group, GroupMember
from domeal.models.user import User

logger = logging.getLogger(__name__)


def is_group_member(db: Session, group_id: int, user_id: int) -> bool:
    """Check whether a user belongs to a group."""
    return (
        db.query(GroupMember.id)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .first()
        is not None
    )


class GroupService:
    """Service for creating and joining groups."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_group(
        self, user: User, name: str, menu: str, menu_image_url: str | None = None
    ) -> Group:
        """Create a group with ``user`` as its owner."""
        if not name.strip():
            raise ValidationError("Group name is required")
        if not menu.strip():
            raise ValidationError("Menu is required")

        group = Group(
            name=name.strip(),
            menu=menu.strip(),
            menu_image_url=menu_image_url,
            created_by=user.id,
        )
        try:
            self.db.add(group)
            self.db.flush()
            self.db.add(GroupMember(group_id=group.id, user_id=user.id, is_owner=True))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create group: {e}")
            raise PersistenceError("Failed to create group") from e

        self.db.refresh(group)
        logger.info(f"Group {group.id} created by user {user.id}")
        return group

    def join_group(self, user: User, group_id: int) -> Group:
        """Add ``user`` to an existing group as a regular member."""
        if group_id <= 0:
            raise ValidationError("Valid group ID is required")

        group = self.db.get(Group, group_id)
        if group is None:
            raise NotFound("Group not found")

        if is_group_member(self.db, group_id, user.id):
            raise Conflict("You are already a member of this group")

        try:
            self.db.add(GroupMember(group_id=group_id, user_id=user.id, is_owner=False))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to add user {user.id} to group {group_id}: {e}")
            raise PersistenceError("Failed to join group") from e

        logger.info(f"User {user.id} joined group {group_id}")
        return group
