"""
OCR Library for Receipt Processing using Google Cloud Vision document text detection
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, UnidentifiedImageError
import pillow_heif
from google.api_core import exceptions as google_exceptions
from google.cloud import vision

from .models import OCRResult
from .text_parser import parse_receipt_text

# Register HEIF opener with Pillow
pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

# Formats Cloud Vision accepts as-is; anything else is re-encoded as JPEG
_VISION_FORMATS = {"JPEG", "PNG", "GIF", "BMP", "WEBP", "TIFF", "ICO"}


class OCRServiceError(Exception):
    """The text detection service could not produce text for an image"""


ImageInput = Union[str, Path, bytes, BinaryIO]


def read_image_bytes(image_input: ImageInput) -> bytes:
    """Load raw bytes from a path, bytes or file-like object"""
    if isinstance(image_input, (str, Path)):
        image_path = Path(image_input)
        if not image_path.exists():
            raise FileNotFoundError(f"Image file not found: {image_path}")
        logger.info(f"Processing image file: {image_path}")
        return image_path.read_bytes()
    if isinstance(image_input, bytes):
        logger.info(f"Processing image from bytes ({len(image_input)} bytes)")
        return image_input
    logger.info("Processing image from file-like object")
    image_input.seek(0)
    return image_input.read()


class ReceiptOCR:
    """Extract receipt text with Cloud Vision and parse it into an OCRResult"""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize the OCR processor.

        Args:
            api_key: Google Cloud Vision API key
            timeout: Seconds to wait for the annotate request
        """
        self.client = vision.ImageAnnotatorClient(client_options={"api_key": api_key})
        self.timeout = timeout

    def _prepare_image(self, raw_bytes: bytes) -> bytes:
        """Re-encode formats Vision does not accept (e.g. HEIC) as JPEG."""
        try:
            image = Image.open(BytesIO(raw_bytes))
        except UnidentifiedImageError:
            # Let the service decide; it reports unreadable images itself
            logger.debug("Pillow could not identify image, sending raw bytes")
            return raw_bytes

        if image.format in _VISION_FORMATS:
            return raw_bytes

        logger.debug(f"Converting {image.format} image to JPEG for text detection")
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        buffer = BytesIO()
        image.save(buffer, format='JPEG', quality=90)
        return buffer.getvalue()

    def extract_text(self, image_bytes: bytes) -> str:
        """Run document text detection and return the full text annotation"""
        logger.info(f"Making Cloud Vision API call ({len(image_bytes)} bytes)")
        try:
            response = self.client.document_text_detection(
                image=vision.Image(content=image_bytes),
                timeout=self.timeout,
            )
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Cloud Vision API error: {e}")
            raise OCRServiceError(f"Failed to process image with Cloud Vision: {e}") from e

        if response.error.message:
            logger.error(f"Cloud Vision returned an error: {response.error.message}")
            raise OCRServiceError(response.error.message)

        text = response.full_text_annotation.text or ""
        logger.info(f"Cloud Vision API call complete - {len(text)} characters detected")
        return text

    def process_image(self, image_input: ImageInput) -> OCRResult:
        """
        Process a receipt image from any input type

        Args:
            image_input: Can be a file path, Path object, bytes, or file-like object

        Returns:
            OCRResult parsed from the detected text

        Raises:
            OCRServiceError: the service failed or detected no text
        """
        raw_bytes = read_image_bytes(image_input)
        text = self.extract_text(self._prepare_image(raw_bytes))
        if not text.strip():
            raise OCRServiceError("No text detected in image")
        return parse_receipt_text(text)
