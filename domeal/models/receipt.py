"""Receipt and purchase item models."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from domeal.database import Base
from domeal.models.enums import OcrStatus
from domeal.models.mixins import TimestampMixin


class Receipt(Base, TimestampMixin):
    """One uploaded receipt photo and its OCR lifecycle.

    ``is_uploaded`` flips to true once the client confirms the direct upload;
    ``ocr_status`` stays ``pending`` until extracted items are persisted.
    """

    __tablename__ = "receipts"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    file_key = Column(String(512), unique=True, nullable=False)
    ocr_status = Column(String(20), nullable=False, default=OcrStatus.PENDING.value)
    is_uploaded = Column(Boolean, nullable=False, default=False)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    group = relationship("Group", back_populates="receipts")
    uploader = relationship("User", backref="uploaded_receipts")
    items = relationship(
        "PurchaseItem",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="PurchaseItem.id",
    )


class PurchaseItem(Base, TimestampMixin):
    """A line item extracted from a receipt."""

    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    receipt_id = Column(Integer, ForeignKey("receipts.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    # Empty when the printed name is already unambiguous
    predict_item_name = Column(String(255), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    receipt = relationship("Receipt", back_populates="items")
