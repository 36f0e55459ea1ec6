"""Receipt upload API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from domeal.api.dependencies import get_current_user, get_receipt_service
from domeal.models.user import User
from domeal.schemas.receipt import (
    ConfirmUploadRequest,
    ConfirmUploadResponse,
    IssueSignedReceiptRequest,
    IssueSignedReceiptResponse,
)
from domeal.services.receipt_service import ReceiptService

router = APIRouter(prefix="/api", tags=["receipts"])


@router.post("/issue-signed-receipt", response_model=IssueSignedReceiptResponse)
def issue_signed_receipt(
    request: IssueSignedReceiptRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
):
    """Issue a presigned S3 upload URL and create the pending receipt.

    The client PUTs the PNG straight to ``upload_url`` within 15 minutes and
    then calls ``/api/confirm-upload-and-start-ocr``.
    """
    issued = service.issue_upload_credential(current_user, request.group_id)
    return IssueSignedReceiptResponse(
        upload_url=issued.upload_url,
        file_key=issued.file_key,
        receipt_id=issued.receipt_id,
    )


@router.post("/confirm-upload-and-start-ocr", response_model=ConfirmUploadResponse)
def confirm_upload_and_start_ocr(
    request: ConfirmUploadRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
):
    """Confirm an upload and run OCR on it.

    Succeeds whether or not item extraction worked.
    """
    result = service.confirm_upload(current_user, request.receipt_id)
    return ConfirmUploadResponse(
        message="Receipt upload confirmed successfully",
        receipt_id=result.receipt_id,
        status=result.status,
    )
