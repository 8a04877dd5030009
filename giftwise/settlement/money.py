"""Money helpers shared by the settlement engine and its callers."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from giftwise.config import get_settings

Numeric = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Numeric) -> Decimal:
    """Convert a numeric value to Decimal (floats go through str)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Numeric) -> Decimal:
    """
    Round to cents, halves away from zero.
    
    The magnitude is rounded and the sign restored, so a debt of -2.005
    rounds to the same 2.01 a credit of 2.005 does.
    """
    amount = to_decimal(value)
    rounded = abs(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return -rounded if amount < 0 else rounded


def resolve_epsilon(epsilon: Optional[Numeric] = None) -> Decimal:
    """
    Return the given tolerance, or the configured one.
    
    Raises:
        ValueError: If an explicit tolerance is zero or negative
    """
    if epsilon is None:
        return get_settings().settlement.epsilon
    value = to_decimal(epsilon)
    if value <= ZERO:
        raise ValueError(f"epsilon must be greater than zero, got {value}")
    return value


def format_money(amount: Numeric, symbol: str = "€") -> str:
    """Format an amount for display, e.g. '€20.00'."""
    return f"{symbol}{round_money(amount):,.2f}"
