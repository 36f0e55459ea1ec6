"""Pydantic schemas for request/response validation."""

from domeal.schemas.auth import UserResponse
from domeal.schemas.group import (
    GroupCreate,
    GroupResponse,
    JoinGroupRequest,
    JoinGroupResponse,
)
from domeal.schemas.receipt import (
    ConfirmUploadRequest,
    ConfirmUploadResponse,
    IssueSignedReceiptRequest,
    IssueSignedReceiptResponse,
    OCRPurchaseItem,
    OCRReceiptData,
)

__all__ = [
    "UserResponse",
    "GroupCreate",
    "GroupResponse",
    "JoinGroupRequest",
    "JoinGroupResponse",
    "IssueSignedReceiptRequest",
    "IssueSignedReceiptResponse",
    "ConfirmUploadRequest",
    "ConfirmUploadResponse",
    "OCRPurchaseItem",
    "OCRReceiptData",
]
