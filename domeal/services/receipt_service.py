"""Receipt upload credentials and the upload-confirmation/OCR workflow."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domeal.errors import (
    ConfigError,
    EnrichmentError,
    Forbidden,
    NotFound,
    PersistenceError,
    TransportError,
    ValidationError,
)
from domeal.models.enums import OcrStatus
from domeal.models.group import Group
from domeal.models.receipt import PurchaseItem, Receipt
from domeal.models.user import User
from domeal.schemas.receipt import OCRReceiptData
from domeal.services.group_service import is_group_member
from domeal.services.ocr_service import OCRService
from domeal.services.storage_service import StorageService, generate_receipt_key

logger = logging.getLogger(__name__)

# Largest value an Integer primary key column holds
MAX_ID = 2**31 - 1


class SkipReason(str, Enum):
    """Why a confirmation did not persist purchase items."""

    ALREADY_COMPLETED = "already_completed"
    OCR_UNAVAILABLE = "ocr_unavailable"
    OCR_FAILED = "ocr_failed"
    UNPARSEABLE = "unparseable"


@dataclass(frozen=True)
class EnrichmentCompleted:
    """OCR succeeded and every extracted item was staged for commit."""

    items: list[PurchaseItem]


@dataclass(frozen=True)
class EnrichmentSkipped:
    """OCR did not produce items; the upload confirmation still stands."""

    reason: SkipReason
    detail: str = ""


EnrichmentResult = EnrichmentCompleted | EnrichmentSkipped


@dataclass
class IssuedReceipt:
    """A freshly created pending receipt and its upload URL."""

    receipt_id: int
    upload_url: str
    file_key: str
    expires_at: datetime


@dataclass
class ConfirmUploadResult:
    """Outcome of confirming an upload."""

    receipt_id: int
    enrichment: EnrichmentResult
    status: str = field(default=OcrStatus.UPLOADED.value)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_ocr_result(raw_text: str) -> OCRReceiptData:
    """Parse the OCR reply into the receipt schema.

    Raises ``EnrichmentError`` when the reply is not JSON or does not match
    ``{items: [{name, predict_name, price, quantity}]}``.
    """
    try:
        payload = json.loads(_strip_code_fence(raw_text))
    except json.JSONDecodeError as e:
        raise EnrichmentError(f"OCR result is not valid JSON: {e}") from e

    try:
        return OCRReceiptData.model_validate(payload)
    except pydantic.ValidationError as e:
        raise EnrichmentError(f"OCR result does not match the receipt schema: {e}") from e


def parse_group_id(raw_group_id: str | int | None) -> int:
    """Parse a group id supplied as a string (or int) in a request body."""
    text = "" if raw_group_id is None else str(raw_group_id).strip()
    if text == "":
        raise ValidationError("Group ID is required")
    # int() alone would also take signs, underscores and non-ASCII digits
    if not (text.isascii() and text.isdigit()):
        raise ValidationError("Invalid Group ID format")
    group_id = int(text)
    if group_id <= 0 or group_id > MAX_ID:
        raise ValidationError("Invalid Group ID format")
    return group_id


class ReceiptService:
    """Receipt ingestion: issue upload URLs, confirm uploads, run OCR enrichment."""

    def __init__(
        self,
        db: Session,
        storage: StorageService | None = None,
        ocr: OCRService | None = None,
    ) -> None:
        self.db = db
        self.storage = storage or StorageService()
        self.ocr = ocr or OCRService()

    def issue_upload_credential(self, user: User, raw_group_id: str | int | None) -> IssuedReceipt:
        """Sign a 15-minute PNG upload URL and create the pending receipt for it.

        Group membership is not checked here; it is enforced at confirmation.
        """
        group_id = parse_group_id(raw_group_id)
        if self.db.get(Group, group_id) is None:
            raise NotFound("Group not found")

        file_key = generate_receipt_key(group_id)
        credential = self.storage.presign_upload(file_key)

        receipt = Receipt(
            group_id=group_id,
            file_key=file_key,
            ocr_status=OcrStatus.PENDING.value,
            is_uploaded=False,
            uploaded_by=user.id,
        )
        try:
            self.db.add(receipt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create receipt record: {e}")
            raise PersistenceError("Failed to create receipt record") from e

        logger.info(
            f"Signed URL issued: user={user.id} group={group_id} "
            f"receipt={receipt.id} file_key={file_key}"
        )
        return IssuedReceipt(
            receipt_id=receipt.id,
            upload_url=credential.upload_url,
            file_key=file_key,
            expires_at=credential.expires_at,
        )

    def confirm_upload(self, user: User, receipt_id: int) -> ConfirmUploadResult:
        """Mark a receipt uploaded and try to extract its purchase items.

        Steps run strictly in order: load, authorize, mark uploaded, resolve
        the image key, OCR, persist items, commit. Anything failing before the
        OCR call aborts and rolls back. OCR and payload failures come back as
        ``EnrichmentSkipped`` and the confirmation is still committed. A
        database failure while saving items rolls back the whole attempt.
        """
        if receipt_id <= 0 or receipt_id > MAX_ID:
            raise ValidationError("Invalid Receipt ID")

        receipt = self.db.get(Receipt, receipt_id)
        if receipt is None:
            raise NotFound("Receipt not found")

        try:
            is_member = is_group_member(self.db, receipt.group_id, user.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to check group membership: {e}")
            raise PersistenceError("Failed to verify group membership") from e
        if not is_member:
            logger.warning(f"User {user.id} is not a member of group {receipt.group_id}")
            raise Forbidden("User is not authorized to update this receipt")

        try:
            # Row lock serializes concurrent confirmations of one receipt
            receipt = (
                self.db.query(Receipt)
                .filter(Receipt.id == receipt_id)
                .with_for_update()
                .populate_existing()
                .one()
            )
            receipt.is_uploaded = True
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update receipt upload status for {receipt_id}: {e}")
            raise PersistenceError("Failed to update receipt status") from e

        if receipt.ocr_status == OcrStatus.COMPLETED.value:
            enrichment: EnrichmentResult = EnrichmentSkipped(
                SkipReason.ALREADY_COMPLETED, "Receipt items were already extracted"
            )
        else:
            object_key = self._resolve_object_key(receipt)
            enrichment = self._enrich(receipt, object_key)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to commit upload confirmation: {e}")
            raise PersistenceError("Failed to commit transaction") from e

        if isinstance(enrichment, EnrichmentCompleted):
            logger.info(
                f"Receipt upload confirmed: user={user.id} receipt={receipt_id} "
                f"group={receipt.group_id} items={len(enrichment.items)}"
            )
        else:
            logger.info(
                f"Receipt upload confirmed: user={user.id} receipt={receipt_id} "
                f"group={receipt.group_id} enrichment skipped ({enrichment.reason.value})"
            )
        return ConfirmUploadResult(receipt_id=receipt_id, enrichment=enrichment)

    def _resolve_object_key(self, receipt: Receipt) -> str:
        """Return the most recently created object key in the receipt's group.

        This is the group's latest key, not necessarily ``receipt.file_key``.
        The two differ when another upload in the same group was issued after
        this one; the mismatch is logged.
        """
        try:
            latest = (
                self.db.query(Receipt.file_key)
                .filter(Receipt.group_id == receipt.group_id)
                .order_by(Receipt.created_at.desc(), Receipt.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to get receipt object key for group {receipt.group_id}: {e}")
            raise PersistenceError("Failed to get receipt object key") from e

        if latest is None:
            raise PersistenceError("Failed to get receipt object key")

        object_key = latest[0]
        if object_key != receipt.file_key:
            logger.warning(
                f"OCR for receipt {receipt.id} uses group {receipt.group_id}'s latest key "
                f"{object_key} instead of its own key {receipt.file_key}"
            )
        return object_key

    def _enrich(self, receipt: Receipt, object_key: str) -> EnrichmentResult:
        try:
            image_url = self.storage.public_url(object_key)
            raw_text = self.ocr.extract(image_url)
        except ConfigError as e:
            logger.error(f"OCR unavailable for receipt {receipt.id}: {e.detail}")
            return EnrichmentSkipped(SkipReason.OCR_UNAVAILABLE, e.detail)
        except TransportError as e:
            logger.error(f"Failed to perform OCR for receipt {receipt.id}: {e.detail}")
            return EnrichmentSkipped(SkipReason.OCR_FAILED, e.detail)

        try:
            data = parse_ocr_result(raw_text)
        except EnrichmentError as e:
            logger.warning(
                f"Failed to parse OCR result for receipt {receipt.id}: {e.detail}; "
                f"raw={raw_text[:500]!r}"
            )
            return EnrichmentSkipped(SkipReason.UNPARSEABLE, e.detail)

        items = self._save_items(receipt, data)
        return EnrichmentCompleted(items=items)

    def _save_items(self, receipt: Receipt, data: OCRReceiptData) -> list[PurchaseItem]:
        """Stage every parsed item and mark the receipt completed in the open transaction."""
        items = [
            PurchaseItem(
                receipt_id=receipt.id,
                group_id=receipt.group_id,
                item_name=item.name,
                predict_item_name=item.predict_name,
                price=Decimal(str(item.price)),
                quantity=item.quantity,
            )
            for item in data.items
        ]

        if OcrStatus(receipt.ocr_status).can_transition_to(OcrStatus.COMPLETED):
            receipt.ocr_status = OcrStatus.COMPLETED.value

        try:
            self.db.add_all(items)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save purchase items for receipt {receipt.id}: {e}")
            raise PersistenceError("Failed to save purchase items") from e

        logger.info(
            f"OCR result staged: receipt={receipt.id} group={receipt.group_id} "
            f"items_count={len(items)}"
        )
        return items
