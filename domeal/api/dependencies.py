"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Cookie, Depends
from sqlalchemy.orm import Session

from domeal.database import get_db
from domeal.models.user import User
from domeal.services.auth import authenticate_session
from domeal.services.group_service import GroupService
from domeal.services.ocr_service import OCRService, get_ocr_service
from domeal.services.receipt_service import ReceiptService
from domeal.services.storage_service import StorageService, get_storage_service

SESSION_COOKIE_NAME = "session_id"


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    session_id: Annotated[str | None, Cookie()] = None,
) -> User:
    """Get the current authenticated user from the session cookie."""
    return authenticate_session(db, session_id)


def get_group_service(
    db: Annotated[Session, Depends(get_db)],
) -> GroupService:
    """Get group service with dependencies."""
    return GroupService(db)


def get_receipt_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
    ocr: Annotated[OCRService, Depends(get_ocr_service)],
) -> ReceiptService:
    """Get receipt service with dependencies."""
    return ReceiptService(db, storage=storage, ocr=ocr)
