"""Settlement engine package."""

from giftwise.settlement.engine import (
    aggregate_net_balances,
    compute_balances,
    match_settlements,
    resolve_shares,
)
from giftwise.settlement.money import (
    CENT,
    format_money,
    resolve_epsilon,
    round_money,
    to_decimal,
)

__all__ = [
    "CENT",
    "aggregate_net_balances",
    "compute_balances",
    "format_money",
    "match_settlements",
    "resolve_epsilon",
    "resolve_shares",
    "round_money",
    "to_decimal",
]
