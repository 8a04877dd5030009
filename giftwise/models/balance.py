"""
Balance Models for Giftwise

Outputs of the settlement engine and of the per-user balance view.
None of these are persisted. They exist for a single computation and are
rebuilt whenever the expense list changes.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SettlementTransfer(BaseModel):
    """
    A suggested payment from a net debtor to a net creditor.
    
    Frozen (and therefore hashable) so transfer lists can be compared
    as multisets.
    """
    model_config = ConfigDict(frozen=True)
    
    from_person_id: str = Field(
        ...,
        description="Person who should pay"
    )
    to_person_id: str = Field(
        ...,
        description="Person who should receive"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to transfer, rounded to cents"
    )
    
    def involves(self, person_id: str) -> bool:
        return person_id in (self.from_person_id, self.to_person_id)


class BalanceDirection(str, Enum):
    """Which way money flows, seen from the viewing user."""
    OWES = "owes"    # viewer pays the counterparty
    OWED = "owed"    # counterparty pays the viewer


class BalanceLine(BaseModel):
    """One row of a user's balance list."""
    model_config = ConfigDict(frozen=True)
    
    direction: BalanceDirection
    counterparty_id: str
    counterparty_name: str
    amount: Decimal
    text: str = Field(
        ...,
        description="Display text, e.g. 'You owe Bob €20.00'"
    )


class BalanceView(BaseModel):
    """
    Everything needed to render one user's balances.
    
    `all_transfers` is only filled for household admins.
    """
    
    person_id: str
    net_balance: Decimal
    lines: list[BalanceLine] = Field(default_factory=list)
    all_transfers: list[SettlementTransfer] = Field(default_factory=list)
    
    @property
    def is_settled(self) -> bool:
        """True when the user neither owes nor is owed anything."""
        return not self.lines
    
    @property
    def total_owed_by_user(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.direction == BalanceDirection.OWES),
            Decimal("0"),
        )
    
    @property
    def total_owed_to_user(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.direction == BalanceDirection.OWED),
            Decimal("0"),
        )
