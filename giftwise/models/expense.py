"""
Expense Models for Giftwise

These models describe the input of the settlement engine: expenses with the
people who share their cost (participants) and the people who advanced the
money (payers).

DESIGN DECISION: A participant without an explicit share is NOT a zero share.
`share_amount=None` means "take an equal part of whatever the explicit shares
leave over". The `is_equal_split` property makes that reading explicit so no
caller has to remember the convention.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _float_to_decimal(v: Any) -> Any:
    """Convert floats through their repr so 0.1 stays 0.1."""
    if isinstance(v, float):
        return Decimal(str(v))
    return v


class ParticipantShare(BaseModel):
    """A person bearing part of an expense's cost."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)
    
    person_id: str = Field(
        ...,
        min_length=1,
        description="Person who owes part of the expense"
    )
    share_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Fixed amount owed; None means equal split of the remainder"
    )
    
    @field_validator('share_amount', mode='before')
    @classmethod
    def coerce_float_amount(cls, v: Any) -> Any:
        return _float_to_decimal(v)
    
    @property
    def is_equal_split(self) -> bool:
        """True when this participant takes an equal part of the remainder."""
        return self.share_amount is None


class PayerContribution(BaseModel):
    """A person who advanced money toward an expense."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)
    
    person_id: str = Field(
        ...,
        min_length=1,
        description="Person who paid"
    )
    amount_paid: Decimal = Field(
        ...,
        ge=0,
        description="Amount actually paid"
    )
    
    @field_validator('amount_paid', mode='before')
    @classmethod
    def coerce_float_amount(cls, v: Any) -> Any:
        return _float_to_decimal(v)


class Expense(BaseModel):
    """
    A single shared expense.
    
    The engine trusts that callers validated the expense when it was created
    (payers sum to the total, explicit shares fit in the total).
    See giftwise.validation for those checks.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)
    
    id: str = Field(
        ...,
        min_length=1,
        description="Opaque expense identifier (traceability only)"
    )
    total_amount: Decimal = Field(
        ...,
        gt=0,
        description="Total cost of the expense"
    )
    participants: tuple[ParticipantShare, ...] = Field(
        default=(),
        description="People sharing the cost"
    )
    payers: tuple[PayerContribution, ...] = Field(
        default=(),
        description="People who paid"
    )
    
    # Organizational only, never used in balance calculations
    description: Optional[str] = Field(
        default=None,
        max_length=500,
    )
    gift_id: Optional[str] = Field(
        default=None,
        description="Gift this expense was made for, if any"
    )
    
    @field_validator('total_amount', mode='before')
    @classmethod
    def coerce_float_amount(cls, v: Any) -> Any:
        return _float_to_decimal(v)
    
    @property
    def total_paid(self) -> Decimal:
        """Sum of all payer contributions."""
        return sum((p.amount_paid for p in self.payers), Decimal("0"))
    
    @property
    def explicit_share_total(self) -> Decimal:
        """Sum of the fixed participant shares."""
        return sum(
            (p.share_amount for p in self.participants if not p.is_equal_split),
            Decimal("0"),
        )
    
    @property
    def person_ids(self) -> set[str]:
        """Everyone appearing as participant or payer."""
        ids = {p.person_id for p in self.participants}
        ids.update(p.person_id for p in self.payers)
        return ids
    
    def involves(self, person_id: str) -> bool:
        """Check whether a person paid for or shares this expense."""
        return (
            any(p.person_id == person_id for p in self.payers)
            or any(p.person_id == person_id for p in self.participants)
        )
    
    @classmethod
    def from_record(cls, record: dict) -> "Expense":
        """
        Build an Expense from a storage row.
        
        Accepts the shape the household database returns: the total under
        `amount` (or `total_amount`), and nested `payers` / `participants`
        keyed by `user_id` (or `person_id`).
        """
        def person_of(row: dict) -> str:
            return str(row.get("person_id") or row.get("user_id") or "")
        
        total = record.get("total_amount", record.get("amount"))
        gift_id = record.get("gift_id")
        
        return cls(
            id=str(record["id"]),
            total_amount=total,
            participants=tuple(
                ParticipantShare(
                    person_id=person_of(row),
                    share_amount=row.get("share_amount"),
                )
                for row in record.get("participants") or []
            ),
            payers=tuple(
                PayerContribution(
                    person_id=person_of(row),
                    amount_paid=row.get("amount_paid", 0),
                )
                for row in record.get("payers") or []
            ),
            description=record.get("description"),
            gift_id=str(gift_id) if gift_id is not None else None,
        )
