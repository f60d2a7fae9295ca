"""
Receipt text interpretation

Turns the raw text returned by a document text detection service into an
OCRResult. Item extraction is a single cursor pass over the non-empty lines,
driven by a three-state machine; the summary figures are found by an
independent labelled-amount scan over the whole text.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import FALLBACK_ITEM_NAME, OCRResult, ParsedItem

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# "$1,234.56", "12.99", "3." -- a decimal point is required so that quantities
# and table numbers are not read as prices
PRICE_RE = re.compile(r'\$?(\d[\d,]*\.\d{0,2})')
BARE_PRICE_RE = re.compile(r'^\$?(\d[\d,]*\.\d{0,2})$')

_AMOUNT = r'[:\s]*\$?(\d[\d,]*\.\d{2})'

LABELED_AMOUNT_PATTERNS = {
    'subtotal': re.compile(r'\bsub[\s-]?total' + _AMOUNT, re.IGNORECASE),
    'tax': re.compile(r'\btax' + _AMOUNT, re.IGNORECASE),
    'tip': re.compile(r'\btip' + _AMOUNT, re.IGNORECASE),
    'total': re.compile(r'(?<!sub)(?<!sub\s)(?<!sub-)\btotal' + _AMOUNT, re.IGNORECASE),
}

# A summary label anywhere in the line, e.g. "Sales Tax" or "Grand Total"
SUMMARY_LINE_RE = re.compile(r'\b(sub[\s-]?total|total|tax|tip)\b', re.IGNORECASE)


class ParserState(str, Enum):
    """How the line under the cursor is consumed"""
    SCAN = "scan"
    ITEM_ON_SAME_LINE = "item_on_same_line"
    ITEM_NAME_PENDING_PRICE = "item_name_pending_price"


def parse_price(raw: str) -> Optional[Decimal]:
    """Convert a matched price string like '1,234.5' to Decimal"""
    try:
        value = Decimal(raw.replace(',', ''))
    except (InvalidOperation, AttributeError):
        return None
    return value if value.is_finite() else None


def split_lines(raw_text: str) -> List[str]:
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def is_summary_line(line: str) -> bool:
    """True for subtotal/tax/tip/total lines, which are never line items"""
    return SUMMARY_LINE_RE.search(line) is not None


def classify_line(lines: List[str], index: int) -> ParserState:
    """Decide which state the walk enters for the line at ``index``"""
    if PRICE_RE.search(lines[index]):
        return ParserState.ITEM_ON_SAME_LINE
    if index + 1 < len(lines) and BARE_PRICE_RE.match(lines[index + 1]):
        return ParserState.ITEM_NAME_PENDING_PRICE
    return ParserState.SCAN


def _consume(lines: List[str], index: int,
             state: ParserState) -> Tuple[Optional[ParsedItem], int]:
    """Run one step of the walk. Returns (item or None, lines consumed)."""
    line = lines[index]

    if state is ParserState.ITEM_ON_SAME_LINE:
        match = PRICE_RE.search(line)
        price = parse_price(match.group(1))
        if not price or is_summary_line(line):
            return None, 1
        name = line.replace(match.group(0), '', 1).strip() or FALLBACK_ITEM_NAME
        return ParsedItem(name=name, price=price), 1

    if state is ParserState.ITEM_NAME_PENDING_PRICE:
        price = parse_price(BARE_PRICE_RE.match(lines[index + 1]).group(1))
        if not price:
            return None, 1
        if is_summary_line(line):
            return None, 2
        return ParsedItem(name=line or FALLBACK_ITEM_NAME, price=price), 2

    return None, 1


def extract_line_items(lines: List[str]) -> List[ParsedItem]:
    """Walk the lines once, left to right, collecting priced items"""
    items = []
    index = 0
    while index < len(lines):
        state = classify_line(lines, index)
        item, consumed = _consume(lines, index, state)
        if item is not None:
            items.append(item)
        index += consumed
    return items


def extract_labeled_amounts(raw_text: str) -> Dict[str, Decimal]:
    """Find the first labelled subtotal/tax/tip/total amount in the text.

    Labels that do not appear are absent from the returned dict.
    """
    found = {}
    for label, pattern in LABELED_AMOUNT_PATTERNS.items():
        match = pattern.search(raw_text)
        if match:
            value = parse_price(match.group(1))
            if value is not None:
                found[label] = value
    return found


def parse_receipt_text(raw_text: Optional[str]) -> OCRResult:
    """
    Interpret raw OCR text as a receipt.

    Never raises: empty or unrecognisable input yields a single "Item" line
    priced at the best-guess subtotal so the caller can always continue to
    manual correction.

    Args:
        raw_text: Multi-line text as returned by the OCR service

    Returns:
        OCRResult with items in line order and reconciled totals
    """
    raw_text = raw_text or ""
    lines = split_lines(raw_text)
    items = extract_line_items(lines)
    labeled = extract_labeled_amounts(raw_text)

    zero = Decimal("0")
    tax = labeled.get('tax', zero)
    tip = labeled.get('tip', zero)
    subtotal = labeled.get('subtotal', zero)
    total = labeled['total'] if 'total' in labeled else subtotal + tax + tip
    if 'subtotal' not in labeled:
        subtotal = total - tax - tip

    logger.debug(
        f"Parsed {len(lines)} lines: {len(items)} items, "
        f"labels found: {sorted(labeled) or 'none'}"
    )

    if not items:
        items = [ParsedItem(name=FALLBACK_ITEM_NAME, price=max(subtotal, zero))]

    return OCRResult(
        text=raw_text,
        items=items,
        subtotal=subtotal,
        tax=tax,
        tip=tip,
        total=total,
    )
