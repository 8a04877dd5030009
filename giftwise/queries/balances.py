"""
Balance Queries

Read-only views built on the settlement engine. Every call recomputes from
the expense list it is given; nothing is cached between calls.

PRIVACY: balances_for_person filters the INPUT before computing. Computing on
the whole household and filtering the output afterwards would let a user see
transfers that only exist because of debts between other people.
"""

from decimal import Decimal
from typing import Iterable, Optional

from giftwise.models.balance import SettlementTransfer
from giftwise.models.expense import Expense
from giftwise.settlement.engine import aggregate_net_balances, compute_balances
from giftwise.settlement.money import ZERO, Numeric, round_money


def net_balances(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Unrounded paid-minus-owed per person."""
    return aggregate_net_balances(expenses)


def net_balance_for(
    person_id: str,
    expenses: Iterable[Expense],
    epsilon: Optional[Numeric] = None,
) -> Decimal:
    """
    A person's net position: what they receive minus what they pay
    across the settlement transfers, rounded to cents.
    """
    net = ZERO
    for transfer in compute_balances(expenses, epsilon=epsilon):
        if transfer.from_person_id == person_id:
            net -= transfer.amount
        elif transfer.to_person_id == person_id:
            net += transfer.amount
    return round_money(net)


def expenses_involving(person_id: str, expenses: Iterable[Expense]) -> list[Expense]:
    """Expenses the person paid for or shares."""
    return [expense for expense in expenses if expense.involves(person_id)]


def balances_for_person(
    person_id: str,
    expenses: Iterable[Expense],
    epsilon: Optional[Numeric] = None,
) -> list[SettlementTransfer]:
    """
    Transfers naming a person, computed only from their own expenses.
    
    Unrelated expenses never change the result.
    """
    own_expenses = expenses_involving(person_id, expenses)
    transfers = compute_balances(own_expenses, epsilon=epsilon)
    return [transfer for transfer in transfers if transfer.involves(person_id)]


def total_of(expenses: Iterable[Expense]) -> Decimal:
    """Sum of expense totals, for display."""
    return sum((expense.total_amount for expense in expenses), ZERO)


def totals_by_gift(expenses: Iterable[Expense]) -> dict[Optional[str], Decimal]:
    """
    Sum of expense totals per gift.
    
    Expenses not linked to a gift are grouped under None.
    """
    totals: dict[Optional[str], Decimal] = {}
    for expense in expenses:
        totals[expense.gift_id] = totals.get(expense.gift_id, ZERO) + expense.total_amount
    return totals
