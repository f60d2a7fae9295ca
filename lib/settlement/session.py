"""
Session-scoped state for one bill split

A SplitSession owns the group and the single active receipt and carries them
through capture, editing, assignment and settlement. It is a plain pydantic
model so the web layer can store it in a Django session between requests.
"""

import logging
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from lib.ocr.models import OCRResult

from .engine import compute_owed, settle
from .models import LineItem, Participant, Receipt, Settlement, new_id
from .money import Money

logger = logging.getLogger(__name__)


class SessionError(Exception):
    pass


class NoActiveReceiptError(SessionError):
    pass


class ItemNotFoundError(SessionError):
    pass


class ParticipantNotFoundError(SessionError):
    pass


class SplitSession(BaseModel):
    """Group members plus the receipt they are splitting"""

    participants: List[Participant] = Field(default_factory=list)
    receipt: Optional[Receipt] = None

    # ------------------------------------------------------------------
    # Group
    # ------------------------------------------------------------------

    def add_participant(self, name: str) -> Participant:
        name = (name or "").strip()
        if not name:
            raise SessionError("Participant name is required")
        existing = {p.id for p in self.participants}
        participant = Participant(id=new_id(), name=name)
        while participant.id in existing:
            participant = Participant(id=new_id(), name=name)
        self.participants.append(participant)
        logger.info(f"Added participant {participant.id}")
        return participant

    def get_participant(self, participant_id: str) -> Participant:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        raise ParticipantNotFoundError(f"Participant {participant_id} not found")

    def rename_participant(self, participant_id: str, name: str) -> Participant:
        name = (name or "").strip()
        if not name:
            raise SessionError("Participant name is required")
        participant = self.get_participant(participant_id)
        participant.name = name
        return participant

    def remove_participant(self, participant_id: str):
        """Remove a member. Existing item assignments are left untouched."""
        participant = self.get_participant(participant_id)
        self.participants.remove(participant)
        logger.info(f"Removed participant {participant_id}")

    # ------------------------------------------------------------------
    # Receipt
    # ------------------------------------------------------------------

    def set_receipt(self, receipt: Receipt) -> Receipt:
        self.receipt = receipt
        return receipt

    def load_ocr_result(self, result: OCRResult) -> Receipt:
        """Replace the active receipt with a fresh draft of an OCR result"""
        receipt = Receipt.from_ocr_result(result)
        logger.info(f"Loaded receipt {receipt.id} with {len(receipt.items)} items")
        return self.set_receipt(receipt)

    def require_receipt(self) -> Receipt:
        if self.receipt is None:
            raise NoActiveReceiptError("No active receipt")
        return self.receipt

    def get_item(self, item_id: str) -> LineItem:
        item = self.require_receipt().get_item(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found")
        return item

    def add_item(self, name: str = "", price=None) -> LineItem:
        receipt = self.require_receipt()
        item = LineItem(id=receipt.next_item_id(), name=(name or "").strip(), price=price)
        receipt.items.append(item)
        return item

    def update_item(self, item_id: str, name: Optional[str] = None, price=None) -> LineItem:
        """Rename and/or reprice an item. Unparsable prices become 0."""
        item = self.get_item(item_id)
        if name is not None:
            item.name = name.strip()
        if price is not None:
            item.price = price
        return item

    def remove_item(self, item_id: str):
        receipt = self.require_receipt()
        receipt.items.remove(self.get_item(item_id))

    def update_items(self, items: Iterable[LineItem]):
        self.require_receipt().items = list(items)

    def update_totals(self, subtotal, tax, tip) -> Receipt:
        """Set subtotal/tax/tip from edit input; total follows their sum"""
        receipt = self.require_receipt()
        receipt.set_totals(subtotal, tax, tip)
        return receipt

    def toggle_assignment(self, item_id: str, participant_id: str) -> bool:
        """Flip whether a participant shares an item. Returns the new state."""
        self.get_participant(participant_id)
        return self.get_item(item_id).toggle_assignee(participant_id)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def owed(self) -> Dict[str, Money]:
        return compute_owed(self.receipt, self.participants)

    def settle(self) -> List[Settlement]:
        return settle(self.receipt, self.participants)
