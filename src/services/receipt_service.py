"""Receipt scanning service using Claude Vision."""

import base64
import logging
from datetime import date

import anthropic

from src.config import Settings, get_settings
from src.schemas.receipt_scan import RawLineItem
from src.services.exceptions import (
    ExtractionRequestError,
    NoItemsExtractedError,
    ValidationError,
)
from src.services.llm_prompts import get_receipt_extraction_prompt
from src.services.receipt_parser import parse_receipt_response

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class ReceiptService:
    """Service for extracting line items from receipt photos using Claude Vision."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        """Initialize the receipt service.

        Args:
            settings: Application settings; the cached settings when omitted
            client: Pre-built Anthropic client, mainly for tests
        """
        self.settings = settings or get_settings()
        self.api_key = self.settings.anthropic_api_key
        self.model = self.settings.receipt_model
        self.timeout = self.settings.llm_timeout_seconds
        self._client = client
        self._configured = bool(self.api_key) or client is not None

    @property
    def is_configured(self) -> bool:
        """Check if the Anthropic API is configured."""
        return self._configured

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=1,
            )
        return self._client

    async def extract(
        self, image_data: bytes, media_type: str, today: date | None = None
    ) -> list[RawLineItem]:
        """Extract food line items from a receipt image.

        Args:
            image_data: Raw bytes of the image
            media_type: MIME type (e.g., "image/jpeg", "image/png")
            today: Reference date given to the model for shelf-life estimates

        Returns:
            Parsed line items; malformed rows are skipped

        Raises:
            ExtractionRequestError: the model call failed or is not configured
            NoItemsExtractedError: the reply contained no usable food rows
        """
        if media_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
            )
        if not image_data:
            raise ValidationError("Receipt image is empty")
        if not self.is_configured:
            raise ExtractionRequestError("Anthropic API not configured")

        image_base64 = base64.standard_b64encode(image_data).decode("utf-8")
        prompt = get_receipt_extraction_prompt(today or date.today())

        try:
            message = await self._get_client().messages.create(
                model=self.model,
                max_tokens=4096,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": media_type,
                                    "data": image_base64,
                                },
                            },
                            {
                                "type": "text",
                                "text": prompt,
                            },
                        ],
                    }
                ],
            )
        except anthropic.APIError as e:
            logger.error(f"Receipt extraction request failed: {e}")
            raise ExtractionRequestError(f"Receipt extraction request failed: {e}") from e

        response_text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        items = parse_receipt_response(response_text)

        if not items:
            logger.warning(f"No food items parsed from receipt. Response was: {response_text}")
            raise NoItemsExtractedError("No food items could be parsed from the receipt")

        logger.info(f"Extracted {len(items)} items from receipt")
        return items
