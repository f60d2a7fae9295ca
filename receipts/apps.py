from django.apps import AppConfig
import logging


class ReceiptsConfig(AppConfig):
    name = "receipts"

    def ready(self):
        """Called when Django is ready - log startup information"""
        from django.conf import settings
        logger = logging.getLogger('receipts')
        ocr_mode = "Cloud Vision" if settings.GOOGLE_CLOUD_VISION_API_KEY else "mock data"
        logger.info(f"🚀 Receipt Splitter started - DEBUG={settings.DEBUG}, OCR={ocr_mode}")
