"""Shared fixtures for Giftwise tests."""

import pytest

from giftwise.config import get_settings
from giftwise.models import Expense
from tests.helpers import build_expense


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings around every test so env overrides don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def dinner() -> Expense:
    """€60 dinner split equally by A, B and C, paid by A."""
    return build_expense("dinner", "60", {"A": None, "B": None, "C": None}, {"A": "60"})


@pytest.fixture
def household() -> list[Expense]:
    """Four balanced expenses between A, B, C and D."""
    return [
        build_expense("e1", "90", {"A": None, "B": None, "C": None}, {"A": "90"}),
        build_expense(
            "e2", "40",
            {"A": None, "B": None, "C": None, "D": None},
            {"B": "25", "C": "15"},
        ),
        build_expense("e3", "100", {"A": "25", "B": None, "D": None}, {"D": "100"}),
        build_expense("e4", "12", {"C": None, "D": None}, {"A": "12"}),
    ]
