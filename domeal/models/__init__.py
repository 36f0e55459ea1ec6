"""SQLAlchemy models."""

from domeal.models.group import Group, GroupMember
from domeal.models.receipt import PurchaseItem, Receipt
from domeal.models.user import User, UserSession, UserToken

__all__ = [
    "User",
    "UserSession",
    "UserToken",
    "Group",
    "GroupMember",
    "Receipt",
    "PurchaseItem",
]
