"""Receipt OCR using Claude Vision."""

import logging

import anthropic

from domeal.config import Settings, get_settings
from domeal.errors import EmptyResponseError, OCRConfigError, TransportError
from domeal.services.ocr_prompts import RECEIPT_EXTRACTION_PROMPT

logger = logging.getLogger(__name__)


class OCRService:
    """Sends a receipt image URL to Claude and returns the raw text reply."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the OCR service."""
        self.settings = settings or get_settings()
        self.api_key = self.settings.anthropic_api_key
        self.model = self.settings.ocr_model
        self._configured = bool(self.api_key)

    @property
    def is_configured(self) -> bool:
        """Check if the Anthropic API is configured."""
        return self._configured

    def extract(self, image_url: str) -> str:
        """Extract receipt contents from a publicly reachable image.

        Args:
            image_url: HTTPS URL of the receipt image

        Returns:
            The model's reply, expected to be a JSON document

        No retry is attempted; the caller decides what a failure means.
        """
        if not self.is_configured:
            raise OCRConfigError("ANTHROPIC_API_KEY is not set")

        client = anthropic.Anthropic(
            api_key=self.api_key,
            timeout=self.settings.ocr_timeout_seconds,
            max_retries=0,
        )

        try:
            message = client.messages.create(
                model=self.model,
                max_tokens=self.settings.ocr_max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {"type": "url", "url": image_url},
                            },
                            {
                                "type": "text",
                                "text": RECEIPT_EXTRACTION_PROMPT,
                            },
                        ],
                    }
                ],
            )
        except anthropic.APIError as e:
            logger.error(f"Failed to call Anthropic API: {e}")
            raise TransportError(f"Failed to call OCR provider: {e}") from e

        texts = [block.text for block in message.content if block.type == "text"]
        if not texts:
            raise EmptyResponseError("No response from OCR provider")

        return "".join(texts).strip()


def get_ocr_service() -> OCRService:
    """Get an OCR service instance."""
    return OCRService()
