"""
Settlement engine: who owes the payer how much

Each assigned item's price is split evenly between its assignees. Tax and tip
are spread over items in proportion to each item's share of the total listed
item price (unassigned items included in the base), then split the same way.
Unassigned items are dropped: nobody pays for them.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .models import Participant, Receipt, Settlement
from .money import ZERO, Money

logger = logging.getLogger(__name__)


class FirstParticipantPays:
    """Payer policy: the first listed group member paid the whole bill"""

    def select(self, participants: Sequence[Participant]) -> Optional[Participant]:
        return participants[0] if participants else None


DEFAULT_PAYER_POLICY = FirstParticipantPays()


def _add_share(owed: Dict[str, Money], assignees, amount: Money):
    share = amount / len(assignees)
    for participant_id in assignees:
        if participant_id not in owed:
            logger.debug(f"Skipping share for unknown participant {participant_id}")
            continue
        owed[participant_id] += share


def compute_owed(receipt: Optional[Receipt],
                 participants: Sequence[Participant]) -> Dict[str, Money]:
    """
    Calculate each participant's share of the bill, including tax and tip.

    Returns:
        Mapping of participant id to amount, with an entry for every participant
    """
    owed = {participant.id: ZERO for participant in participants}
    if receipt is None:
        return owed

    assigned_items = [item for item in receipt.items if item.assigned_to]

    for item in assigned_items:
        _add_share(owed, item.assigned_to, item.price)

    total_item_price = receipt.item_total
    if total_item_price > 0:
        tax_rate = receipt.tax / total_item_price
        tip_rate = receipt.tip / total_item_price
        for item in assigned_items:
            _add_share(owed, item.assigned_to, item.price * tax_rate)
            _add_share(owed, item.assigned_to, item.price * tip_rate)

    return owed


def settle(receipt: Optional[Receipt], participants: Sequence[Participant],
           payer_policy=DEFAULT_PAYER_POLICY) -> List[Settlement]:
    """
    Compute the debts owed to the payer.

    Args:
        receipt: Finalized receipt, or None if nothing has been captured yet
        participants: Group members in display order
        payer_policy: Chooses who paid; defaults to the first participant

    Returns:
        One Settlement per non-payer owing more than zero, in participant order
    """
    if receipt is None or not participants:
        return []

    payer = payer_policy.select(participants)
    if payer is None:
        return []

    owed = compute_owed(receipt, participants)

    settlements = [
        Settlement(
            from_participant=participant.id,
            to_participant=payer.id,
            amount=owed[participant.id],
        )
        for participant in participants
        if participant.id != payer.id and owed[participant.id] > 0
    ]
    logger.debug(f"Computed {len(settlements)} settlements for receipt {receipt.id}")
    return settlements
