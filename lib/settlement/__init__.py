"""
Bill splitting: receipt drafts, assignments and settlements
"""

from .engine import FirstParticipantPays, compute_owed, settle
from .models import LineItem, Participant, Receipt, Settlement
from .money import Money, format_money, round_money, to_money
from .session import (
    ItemNotFoundError,
    NoActiveReceiptError,
    ParticipantNotFoundError,
    SessionError,
    SplitSession,
)

__all__ = [
    'FirstParticipantPays', 'compute_owed', 'settle',
    'LineItem', 'Participant', 'Receipt', 'Settlement',
    'Money', 'format_money', 'round_money', 'to_money',
    'ItemNotFoundError', 'NoActiveReceiptError', 'ParticipantNotFoundError',
    'SessionError', 'SplitSession',
]
