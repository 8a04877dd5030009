"""
Balance View

Builds what a user sees on their balance page: who they owe, who owes them,
and for household admins the full list of suggested transfers.

Lines come from the household-wide settlement, filtered to the viewer. Use
balances_for_person when only the viewer's own expenses may be considered.
"""

from typing import Iterable, Optional

from giftwise.config import get_settings
from giftwise.models.balance import (
    BalanceDirection,
    BalanceLine,
    BalanceView,
    SettlementTransfer,
)
from giftwise.models.expense import Expense
from giftwise.settlement.engine import compute_balances
from giftwise.settlement.money import ZERO, Numeric, format_money, round_money

UNKNOWN_NAME = "Unknown"


def _line_for(
    person_id: str,
    transfer: SettlementTransfer,
    names: dict[str, str],
    symbol: str,
) -> BalanceLine:
    """Describe one transfer from the viewer's side."""
    amount_text = format_money(transfer.amount, symbol)
    
    if transfer.from_person_id == person_id:
        other = transfer.to_person_id
        name = names.get(other, UNKNOWN_NAME)
        return BalanceLine(
            direction=BalanceDirection.OWES,
            counterparty_id=other,
            counterparty_name=name,
            amount=transfer.amount,
            text=f"You owe {name} {amount_text}",
        )
    
    other = transfer.from_person_id
    name = names.get(other, UNKNOWN_NAME)
    return BalanceLine(
        direction=BalanceDirection.OWED,
        counterparty_id=other,
        counterparty_name=name,
        amount=transfer.amount,
        text=f"{name} owes you {amount_text}",
    )


def build_balance_view(
    person_id: str,
    expenses: Iterable[Expense],
    names: Optional[dict[str, str]] = None,
    is_admin: bool = False,
    epsilon: Optional[Numeric] = None,
    currency_symbol: Optional[str] = None,
) -> BalanceView:
    """
    Build one user's balance view.
    
    Args:
        person_id: The viewing user
        expenses: Household expenses the viewer may see
        names: person_id -> display name; missing people show as "Unknown"
        is_admin: Include every household transfer in `all_transfers`
        epsilon: Settled tolerance; defaults to the configured value
        currency_symbol: Defaults to the configured symbol
    """
    names = names or {}
    symbol = currency_symbol or get_settings().settlement.currency_symbol
    
    transfers = compute_balances(expenses, epsilon=epsilon)
    lines = [
        _line_for(person_id, transfer, names, symbol)
        for transfer in transfers
        if transfer.involves(person_id)
    ]
    
    net = ZERO
    for line in lines:
        if line.direction == BalanceDirection.OWED:
            net += line.amount
        else:
            net -= line.amount
    
    return BalanceView(
        person_id=person_id,
        net_balance=round_money(net),
        lines=lines,
        all_transfers=transfers if is_admin else [],
    )
