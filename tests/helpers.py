"""Builders shared by the test modules."""

from decimal import Decimal
from typing import Optional

from giftwise.models import Expense, ParticipantShare, PayerContribution


def build_expense(
    expense_id: str,
    total: str,
    participants: dict[str, Optional[str]],
    payers: dict[str, str],
    gift_id: Optional[str] = None,
) -> Expense:
    """
    Shorthand expense builder.
    
    participants: person_id -> custom share (None for equal split)
    payers: person_id -> amount paid
    """
    return Expense(
        id=expense_id,
        total_amount=Decimal(total),
        participants=tuple(
            ParticipantShare(
                person_id=person_id,
                share_amount=Decimal(share) if share is not None else None,
            )
            for person_id, share in participants.items()
        ),
        payers=tuple(
            PayerContribution(person_id=person_id, amount_paid=Decimal(paid))
            for person_id, paid in payers.items()
        ),
        gift_id=gift_id,
    )
