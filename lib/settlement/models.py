"""
Pydantic models for group members, editable receipts and settlements
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lib.ocr.models import OCRResult

from .money import ZERO, Money, format_money, money_sum, to_money


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class Participant(BaseModel):
    """A member of the group splitting the bill"""

    id: str = Field(default_factory=new_id)
    name: str


class LineItem(BaseModel):
    """One purchased entry on the receipt and the people sharing it"""
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    id: str
    name: str
    price: Decimal = ZERO
    assigned_to: Set[str] = Field(default_factory=set)

    @field_validator('price', mode='before')
    @classmethod
    def coerce_price(cls, v):
        """Lenient: non-numeric or negative prices become 0"""
        price = to_money(v)
        return price if price > 0 else ZERO

    def toggle_assignee(self, participant_id: str) -> bool:
        """Add or remove a participant. Returns True if now assigned."""
        if participant_id in self.assigned_to:
            self.assigned_to.discard(participant_id)
            return False
        self.assigned_to.add(participant_id)
        return True

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'price': float(self.price),
            'assigned_to': sorted(self.assigned_to),
        }


class Receipt(BaseModel):
    """The receipt currently being split"""
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    id: str = Field(default_factory=new_id)
    items: List[LineItem] = Field(default_factory=list)
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    tip: Decimal = ZERO
    total: Decimal = ZERO
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator('subtotal', 'tax', 'tip', 'total', mode='before')
    @classmethod
    def coerce_to_money(cls, v):
        return to_money(v)

    @classmethod
    def from_ocr_result(cls, result: OCRResult, receipt_id: Optional[str] = None) -> "Receipt":
        """Build an editable draft, numbering items 1..n with nobody assigned"""
        items = [
            LineItem(id=str(index), name=parsed.name, price=parsed.price)
            for index, parsed in enumerate(result.items, start=1)
        ]
        return cls(
            id=receipt_id or new_id(),
            items=items,
            subtotal=result.subtotal,
            tax=result.tax,
            tip=result.tip,
            total=result.total,
        )

    @property
    def item_total(self) -> Money:
        """Sum of all listed item prices, assigned or not"""
        return money_sum(item.price for item in self.items)

    def get_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def next_item_id(self) -> str:
        numeric = [int(item.id) for item in self.items if item.id.isdigit()]
        return str(max(numeric, default=0) + 1)

    def set_totals(self, subtotal, tax, tip):
        """Replace subtotal/tax/tip and recompute the total from them"""
        self.subtotal = to_money(subtotal)
        self.tax = to_money(tax)
        self.tip = to_money(tip)
        self.total = self.subtotal + self.tax + self.tip

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'items': [item.to_dict() for item in self.items],
            'subtotal': format_money(self.subtotal),
            'tax': format_money(self.tax),
            'tip': format_money(self.tip),
            'total': format_money(self.total),
            'created_at': self.created_at.isoformat(),
        }


class Settlement(BaseModel):
    """``from_participant`` owes ``to_participant`` ``amount``"""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    from_participant: str
    to_participant: str
    amount: Decimal = Field(gt=0)

    def to_dict(self) -> dict:
        return {
            'from': self.from_participant,
            'to': self.to_participant,
            'amount': format_money(self.amount),
        }
