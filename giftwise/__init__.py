"""
Giftwise - Source Package

Household gift planning with shared expenses. This package holds the
balance and settlement engine that tells each member of the household
what they owe or are owed.

DESIGN PRINCIPLES:
1. Balances are always recomputed from the expense list, never stored
2. The engine is permissive; validation happens where expenses are created
3. Money is Decimal, rounded to cents only where it is shown or matched
4. Users only see settlements with people they actually share expenses with
"""

__version__ = "1.0.0"
__author__ = "Giftwise Team"
