"""
Data Models Package

This package contains all Pydantic models used in Giftwise.
Everything handed to or returned from the settlement engine conforms
to these schemas.
"""

from giftwise.models.expense import (
    Expense,
    ParticipantShare,
    PayerContribution,
)
from giftwise.models.balance import (
    BalanceDirection,
    BalanceLine,
    BalanceView,
    SettlementTransfer,
)
from giftwise.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Expense models
    "Expense",
    "ParticipantShare",
    "PayerContribution",
    # Balance models
    "BalanceDirection",
    "BalanceLine",
    "BalanceView",
    "SettlementTransfer",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
