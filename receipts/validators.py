"""
Input validators for receipt application
Provides validation for image uploads and user text inputs
"""

import base64
import binascii
import logging
from io import BytesIO

import bleach
import pillow_heif
from django.conf import settings
from django.core.exceptions import ValidationError
from PIL import Image

pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)


class FileUploadValidator:
    """Validate uploaded image files for security and requirements"""

    ALLOWED_FORMATS = {'JPEG', 'PNG', 'WEBP', 'HEIF', 'HEIC', 'GIF', 'BMP', 'TIFF'}

    @classmethod
    def max_file_size(cls):
        return settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @classmethod
    def validate_image_file(cls, uploaded_file) -> bytes:
        """
        Validate an uploaded image and return its bytes
        Raises: ValidationError if file is invalid
        """
        if not uploaded_file:
            raise ValidationError('Please upload a receipt image')

        uploaded_file.seek(0)
        return cls.validate_image_bytes(uploaded_file.read())

    @classmethod
    def validate_image_bytes(cls, file_content: bytes) -> bytes:
        if not file_content:
            raise ValidationError('File is empty')

        if len(file_content) > cls.max_file_size():
            raise ValidationError(f'File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit')

        try:
            image = Image.open(BytesIO(file_content))
            image_format = image.format
            image.verify()
        except Exception:
            logger.exception("Invalid image file")
            raise ValidationError('Invalid image file.')

        if image_format not in cls.ALLOWED_FORMATS:
            raise ValidationError(f'Unsupported image type: {image_format}')

        return file_content

    @classmethod
    def validate_base64_image(cls, encoded) -> bytes:
        """Decode and validate a base64 image payload"""
        if not encoded or not isinstance(encoded, str):
            raise ValidationError('imageBase64 is required')

        if encoded.startswith('data:') and ',' in encoded:
            encoded = encoded.split(',', 1)[1]

        try:
            file_content = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError('imageBase64 is not valid base64')

        return cls.validate_image_bytes(file_content)


class InputValidator:
    """Validate and sanitize user text inputs"""

    @staticmethod
    def validate_name(name, field_name="Name", min_length=1, max_length=50):
        """Validate and sanitize name input"""
        if not name or not isinstance(name, str):
            raise ValidationError(f"{field_name} is required")

        # Remove any HTML tags using bleach
        name = bleach.clean(name.strip(), tags=[], strip=True).strip()

        if len(name) < min_length:
            raise ValidationError(f"{field_name} is required")

        if len(name) > max_length:
            raise ValidationError(f"{field_name} must not exceed {max_length} characters")

        return name

    @staticmethod
    def clean_item_name(name, max_length=100):
        """Item names may be blank; they are only sanitized and trimmed"""
        if not isinstance(name, str):
            return ""
        return bleach.clean(name, tags=[], strip=True).strip()[:max_length]
