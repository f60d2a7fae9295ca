"""
Session management for bill splitting.
Stores the SplitSession for the current visitor inside the Django session.
"""

import logging

from pydantic import ValidationError

from lib.settlement import SplitSession

logger = logging.getLogger(__name__)


class SplitSessionManager:
    """Loads and saves the visitor's SplitSession with proper namespacing"""

    NAMESPACE = 'split_session'

    def __init__(self, request):
        self.request = request

    def load(self) -> SplitSession:
        data = self.request.session.get(self.NAMESPACE)
        if not data:
            return SplitSession()
        try:
            return SplitSession.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable split session: {e}")
            return SplitSession()

    def save(self, split_session: SplitSession):
        self.request.session[self.NAMESPACE] = split_session.model_dump(mode="json")

    def clear(self):
        self.request.session.pop(self.NAMESPACE, None)
