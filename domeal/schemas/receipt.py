"""Receipt upload and OCR schemas."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class IssueSignedReceiptRequest(BaseModel):
    """Request a presigned upload URL for a group's receipt."""

    group_id: str | int = ""


class IssueSignedReceiptResponse(BaseModel):
    """Presigned upload URL and the receipt it belongs to."""

    upload_url: str
    file_key: str
    receipt_id: int


class ConfirmUploadRequest(BaseModel):
    """Confirm a direct upload finished."""

    receipt_id: int = 0


class ConfirmUploadResponse(BaseModel):
    """Upload confirmation. Enrichment outcome is not reported here."""

    message: str
    receipt_id: int
    status: str = "uploaded"


# Bounds of the purchase_items columns the parsed values are written to
MAX_ITEM_NAME_LENGTH = 255
MAX_PRICE = 10**8  # Numeric(10, 2), exclusive
MAX_QUANTITY = 2**31 - 1


class OCRPurchaseItem(BaseModel):
    """One line item as returned by the OCR model.

    Values that would not fit the purchase_items columns fail validation, so
    such replies are treated as unparseable rather than failing at insert.
    """

    name: str = Field(..., min_length=1, max_length=MAX_ITEM_NAME_LENGTH)
    predict_name: str | None = Field("", max_length=MAX_ITEM_NAME_LENGTH)
    price: float = Field(..., ge=0, lt=MAX_PRICE, allow_inf_nan=False)
    quantity: int | None = Field(1, le=MAX_QUANTITY)

    @field_validator("predict_name", mode="after")
    @classmethod
    def blank_predict_name(cls, value: str | None) -> str:
        """Treat a missing prediction as an empty string."""
        return (value or "").strip()

    @field_validator("quantity", mode="after")
    @classmethod
    def default_quantity(cls, value: int | None) -> int:
        """Unstated or nonsensical quantities count as one."""
        if value is None or value < 1:
            return 1
        return value


class OCRReceiptData(BaseModel):
    """Structured receipt payload returned by the OCR model."""

    date: Any = None
    total: Any = None
    items: list[OCRPurchaseItem] = Field(default_factory=list)
