"""Enums for model fields."""

from enum import Enum


class OcrStatus(str, Enum):
    """OCR lifecycle of a receipt. Only moves forward."""

    PENDING = "pending"
    UPLOADED = "uploaded"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        """Position in the forward-only lifecycle."""
        return _OCR_STATUS_ORDER.index(self)

    def can_transition_to(self, target: "OcrStatus") -> bool:
        """Check that moving to ``target`` does not regress the lifecycle."""
        return target.rank >= self.rank


_OCR_STATUS_ORDER = [
    OcrStatus.PENDING,
    OcrStatus.UPLOADED,
    OcrStatus.FAILED,
    OcrStatus.COMPLETED,
]
