"""
Pydantic models for OCR output
"""

from decimal import Decimal, InvalidOperation
from typing import List
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

FALLBACK_ITEM_NAME = "Item"


def _coerce_decimal(v):
    """Convert float/int/str to Decimal, treating garbage as zero"""
    if isinstance(v, Decimal):
        return v if v.is_finite() else Decimal("0")
    if isinstance(v, (int, float, str)):
        try:
            value = Decimal(str(v).replace("$", "").replace(",", "").strip())
        except InvalidOperation:
            logger.debug(f"Could not coerce {v!r} to Decimal, using 0")
            return Decimal("0")
        return value if value.is_finite() else Decimal("0")
    return v


class ParsedItem(BaseModel):
    """A single (name, price) pair found in receipt text"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = FALLBACK_ITEM_NAME
    price: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator('price', mode='before')
    @classmethod
    def coerce_to_decimal(cls, v):
        return _coerce_decimal(v)

    def to_dict(self) -> dict:
        return {'name': self.name, 'price': float(self.price)}


class OCRResult(BaseModel):
    """Structured receipt draft produced from raw OCR text"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str = ""
    items: List[ParsedItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    tip: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    @field_validator('subtotal', 'tax', 'tip', 'total', mode='before')
    @classmethod
    def coerce_to_decimal(cls, v):
        return _coerce_decimal(v)

    @property
    def items_total(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))

    def is_balanced(self, tolerance: Decimal = Decimal("0.01")) -> bool:
        """Check the soft invariant total ~= subtotal + tax + tip"""
        return abs(self.subtotal + self.tax + self.tip - self.total) <= tolerance

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned to clients"""
        return {
            'text': self.text,
            'items': [item.to_dict() for item in self.items],
            'subtotal': float(self.subtotal),
            'tax': float(self.tax),
            'tip': float(self.tip),
            'total': float(self.total),
        }
