"""
Settlement Engine

Turns a list of expenses into net balances and a short list of transfers
that settles everyone up.

Three steps, each a plain function:
1. resolve_shares: what each participant owes for ONE expense
2. aggregate_net_balances: paid minus owed, per person, across ALL expenses
3. match_settlements: greedy largest-first matching of debtors to creditors

The engine keeps no state between calls and never mutates its input.
It does not validate expenses either: a badly formed expense produces an
odd balance, not an exception. Validation belongs where expenses are
created (see giftwise.validation).

NOTE: Largest-first matching keeps the transfer count small but is not
guaranteed to find the global minimum.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from giftwise.audit import get_logger
from giftwise.models.balance import SettlementTransfer
from giftwise.models.expense import Expense, ParticipantShare
from giftwise.settlement.money import ZERO, Numeric, resolve_epsilon, round_money

logger = get_logger(__name__)


def resolve_shares(
    total_amount: Decimal,
    participants: Sequence[ParticipantShare],
) -> dict[str, Decimal]:
    """
    Resolve every participant's share of one expense.
    
    Explicit shares are kept as given. Whatever they leave of the total is
    split equally between the participants without an explicit share.
    The remainder may be negative when explicit shares overcommit the total;
    the equal shares then go negative too.
    
    When every share is explicit, any remainder is not attributed to anyone.
    
    A person listed more than once gets the sum of their entries.
    
    Returns:
        person_id -> resolved share (empty for an expense with no participants)
    """
    if not participants:
        return {}
    
    explicit_total = sum(
        (p.share_amount for p in participants if not p.is_equal_split),
        ZERO,
    )
    remainder = total_amount - explicit_total
    n_implicit = sum(1 for p in participants if p.is_equal_split)
    
    # Only divide when someone takes the remainder
    equal_share = remainder / n_implicit if n_implicit > 0 else ZERO
    
    shares: dict[str, Decimal] = {}
    for participant in participants:
        amount = equal_share if participant.is_equal_split else participant.share_amount
        shares[participant.person_id] = shares.get(participant.person_id, ZERO) + amount
    
    return shares


def aggregate_net_balances(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Fold all expenses into one signed balance per person.
    
    balance = total paid - total share owed
    Positive means the person is owed money, negative means they owe.
    
    Expenses without participants are skipped. Balances are NOT rounded here.
    """
    balances: dict[str, Decimal] = {}
    
    for expense in expenses:
        if not expense.participants:
            logger.warning(
                "expense_skipped_no_participants",
                expense_id=expense.id,
            )
            continue
        
        shares = resolve_shares(expense.total_amount, expense.participants)
        
        if all(not p.is_equal_split for p in expense.participants):
            unattributed = expense.total_amount - sum(shares.values(), ZERO)
            if unattributed != ZERO:
                logger.warning(
                    "expense_remainder_unattributed",
                    expense_id=expense.id,
                    remainder=str(unattributed),
                )
        
        for person_id, share in shares.items():
            balances[person_id] = balances.get(person_id, ZERO) - share
        
        for payer in expense.payers:
            balances[payer.person_id] = balances.get(payer.person_id, ZERO) + payer.amount_paid
    
    return balances


def _partition(
    net_balances: dict[str, Decimal],
    epsilon: Decimal,
) -> tuple[list[list], list[list]]:
    """
    Split balances into creditors and debtors as [person_id, rounded amount].
    
    Balances within +/- epsilon are settled and dropped, as is anything
    that rounds to zero cents.
    """
    creditors = []
    debtors = []
    
    for person_id, balance in net_balances.items():
        if balance > epsilon:
            amount = round_money(balance)
            if amount > ZERO:
                creditors.append([person_id, amount])
        elif balance < -epsilon:
            amount = round_money(-balance)
            if amount > ZERO:
                debtors.append([person_id, amount])
    
    # Largest first; sort is stable so ties keep first-seen order
    creditors.sort(key=lambda entry: entry[1], reverse=True)
    debtors.sort(key=lambda entry: entry[1], reverse=True)
    
    return creditors, debtors


def match_settlements(
    net_balances: dict[str, Decimal],
    epsilon: Optional[Numeric] = None,
) -> list[SettlementTransfer]:
    """
    Match debtors with creditors, largest first.
    
    Each step settles min(creditor, debtor) and moves past whichever side
    (or both) dropped below epsilon, so every step retires at least one entry.
    
    Args:
        net_balances: person_id -> signed balance
        epsilon: settled tolerance; defaults to the configured value
        
    Returns:
        Transfers in the order they were generated
        
    Raises:
        ValueError: If an explicit epsilon is zero or negative
    """
    eps = resolve_epsilon(epsilon)
    creditors, debtors = _partition(net_balances, eps)
    
    transfers: list[SettlementTransfer] = []
    creditor_index = 0
    debtor_index = 0
    
    while creditor_index < len(creditors) and debtor_index < len(debtors):
        creditor = creditors[creditor_index]
        debtor = debtors[debtor_index]
        
        settle = min(creditor[1], debtor[1])
        transfers.append(SettlementTransfer(
            from_person_id=debtor[0],
            to_person_id=creditor[0],
            amount=settle,
        ))
        
        creditor[1] -= settle
        debtor[1] -= settle
        
        if creditor[1] < eps:
            creditor_index += 1
        if debtor[1] < eps:
            debtor_index += 1
    
    return transfers


def compute_balances(
    expenses: Iterable[Expense],
    epsilon: Optional[Numeric] = None,
) -> list[SettlementTransfer]:
    """
    Compute the settlement transfers for a list of expenses.
    
    An empty list gives an empty result.
    """
    expenses = list(expenses)
    net_balances = aggregate_net_balances(expenses)
    transfers = match_settlements(net_balances, epsilon=epsilon)
    
    logger.debug(
        "settlement_computed",
        expense_count=len(expenses),
        person_count=len(net_balances),
        transfer_count=len(transfers),
    )
    
    return transfers
