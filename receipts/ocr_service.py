"""
OCR Service for Django app - integrates with lib.ocr
"""

import logging
from decimal import Decimal

from django.conf import settings

from lib.ocr import FallbackOCRProvider, OCRResult, build_provider

logger = logging.getLogger(__name__)

# Global provider so the Vision client is created once per process
_provider = None


def get_ocr_provider() -> FallbackOCRProvider:
    """Get or create the global OCR provider chain"""
    global _provider

    if _provider is None:
        logger.info("Initializing global OCR provider")
        _provider = build_provider(
            settings.GOOGLE_CLOUD_VISION_API_KEY,
            timeout=settings.OCR_TIMEOUT_SECONDS,
        )
    return _provider


def reset_ocr_provider():
    """Drop the cached provider (after settings change)"""
    global _provider
    _provider = None


def process_receipt_with_ocr(image_bytes: bytes) -> OCRResult:
    """
    Extract a receipt draft from image bytes.

    Falls back to placeholder data when Cloud Vision is not configured,
    unavailable, or finds no text, so callers always get an editable result.
    """
    result = get_ocr_provider().process_image(image_bytes)
    logger.info(f"OCR produced {len(result.items)} items, total {result.total}")
    if not result.is_balanced():
        logger.warning(
            f"Receipt totals do not balance: subtotal={result.subtotal} "
            f"tax={result.tax} tip={result.tip} total={result.total}"
        )
    if abs(result.items_total - result.subtotal) > Decimal("0.01"):
        logger.warning(
            f"Items sum to {result.items_total} but subtotal is {result.subtotal}"
        )
    return result
