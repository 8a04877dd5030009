"""Balance query package."""

from giftwise.queries.balances import (
    balances_for_person,
    expenses_involving,
    net_balance_for,
    net_balances,
    total_of,
    totals_by_gift,
)
from giftwise.queries.view import build_balance_view

__all__ = [
    "balances_for_person",
    "build_balance_view",
    "expenses_involving",
    "net_balance_for",
    "net_balances",
    "total_of",
    "totals_by_gift",
]
