"""
OCR Library for Receipt Processing
"""

from .ocr_lib import ReceiptOCR, OCRServiceError
from .models import OCRResult, ParsedItem
from .providers import FallbackOCRProvider, MockOCRProvider, build_provider
from .text_parser import parse_receipt_text

__all__ = [
    'ReceiptOCR', 'OCRServiceError', 'OCRResult', 'ParsedItem',
    'FallbackOCRProvider', 'MockOCRProvider', 'build_provider', 'parse_receipt_text',
]
