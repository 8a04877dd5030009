"""
Tests for the settlement engine.

Covers share resolution, net balance aggregation and greedy matching,
plus the properties every settlement must satisfy.
"""

import logging
from collections import Counter
from decimal import Decimal

import pytest

from giftwise.models import ParticipantShare, SettlementTransfer
from giftwise.settlement import (
    aggregate_net_balances,
    compute_balances,
    match_settlements,
    resolve_shares,
    round_money,
)
from tests.helpers import build_expense


def transfer(from_id: str, to_id: str, amount: str) -> SettlementTransfer:
    return SettlementTransfer(
        from_person_id=from_id,
        to_person_id=to_id,
        amount=Decimal(amount),
    )


def share(person_id: str, amount=None) -> ParticipantShare:
    return ParticipantShare(
        person_id=person_id,
        share_amount=Decimal(amount) if amount is not None else None,
    )


class TestResolveShares:
    """Tests for per-expense share resolution."""
    
    def test_equal_split(self):
        """Test that shares without an amount split the total equally."""
        shares = resolve_shares(Decimal("60"), [share("A"), share("B"), share("C")])
        assert shares == {"A": Decimal("20"), "B": Decimal("20"), "C": Decimal("20")}
    
    def test_mixed_custom_and_equal(self):
        """Test that equal shares split what custom shares leave over."""
        shares = resolve_shares(Decimal("100"), [share("A", "40"), share("B"), share("C")])
        assert shares == {"A": Decimal("40"), "B": Decimal("30"), "C": Decimal("30")}
    
    def test_all_explicit_remainder_is_dropped(self):
        """Test that a remainder with no equal-split takers is attributed to nobody."""
        shares = resolve_shares(Decimal("100"), [share("A", "30"), share("B", "50")])
        assert shares == {"A": Decimal("30"), "B": Decimal("50")}
    
    def test_overcommitted_shares_go_negative(self):
        """Test that overcommitted custom shares make equal shares negative."""
        shares = resolve_shares(Decimal("50"), [share("A", "60"), share("B")])
        assert shares["B"] == Decimal("-10")
    
    def test_no_participants(self):
        """Test that an expense without participants resolves to nothing."""
        assert resolve_shares(Decimal("50"), []) == {}
    
    def test_every_participant_listed_once(self):
        """Test that each participant appears exactly once in the result."""
        participants = [share("A"), share("B", "5"), share("C")]
        shares = resolve_shares(Decimal("25"), participants)
        assert set(shares) == {"A", "B", "C"}
        assert sum(shares.values()) == Decimal("25")
    
    def test_repeated_person_gets_summed_share(self):
        """Test that a person listed twice owes both entries."""
        shares = resolve_shares(Decimal("30"), [share("A"), share("A"), share("B")])
        assert shares == {"A": Decimal("20"), "B": Decimal("10")}


class TestAggregateNetBalances:
    """Tests for folding expenses into net balances."""
    
    def test_single_expense(self, dinner):
        """Test paid-minus-owed for the equal split dinner."""
        balances = aggregate_net_balances([dinner])
        assert balances == {"A": Decimal("40"), "B": Decimal("-20"), "C": Decimal("-20")}
    
    def test_cross_expense_netting(self):
        """Test that debts in opposite directions net out across expenses."""
        expenses = [
            build_expense("e1", "40", {"A": None, "B": None}, {"B": "40"}),
            build_expense("e2", "30", {"A": None, "B": None}, {"A": "30"}),
        ]
        balances = aggregate_net_balances(expenses)
        assert balances == {"A": Decimal("-5"), "B": Decimal("5")}
    
    def test_payer_only_and_participant_only(self):
        """Test a person who pays in one expense and only participates in another."""
        expenses = [
            build_expense("e1", "10", {"B": None}, {"A": "10"}),
            build_expense("e2", "10", {"A": None}, {"B": "10"}),
        ]
        balances = aggregate_net_balances(expenses)
        assert balances == {"B": Decimal("0"), "A": Decimal("0")}
    
    def test_expense_without_participants_is_skipped(self):
        """Test that an expense with no participants changes no balance."""
        expense = build_expense("e1", "50", {}, {"A": "50"})
        assert aggregate_net_balances([expense]) == {}
    
    def test_expense_without_payers(self):
        """Test that every participant ends up a debtor when nobody paid."""
        expense = build_expense("e1", "30", {"A": None, "B": None}, {})
        assert aggregate_net_balances([expense]) == {
            "A": Decimal("-15"),
            "B": Decimal("-15"),
        }
    
    def test_conservation_balanced(self, household):
        """Test that balances sum to zero when every expense is balanced."""
        assert sum(aggregate_net_balances(household).values()) == Decimal("0")
    
    def test_conservation_unbalanced(self):
        """Test that the balance sum equals total paid minus total shares."""
        expense = build_expense("e1", "60", {"A": None, "B": None}, {"A": "50"})
        assert sum(aggregate_net_balances([expense]).values()) == Decimal("-10")
    
    def test_does_not_mutate_input(self, household):
        """Test that aggregation leaves the expenses untouched."""
        before = [e.model_dump() for e in household]
        aggregate_net_balances(household)
        assert [e.model_dump() for e in household] == before
    
    def test_skipped_expense_is_logged(self, caplog):
        """Test that skipping an expense emits a warning."""
        expense = build_expense("lonely", "50", {}, {"A": "50"})
        with caplog.at_level(logging.WARNING):
            aggregate_net_balances([expense])
        assert "expense_skipped_no_participants" in caplog.text
    
    def test_unattributed_remainder_is_logged(self, caplog):
        """Test that explicit shares short of the total emit a warning."""
        expense = build_expense("short", "100", {"A": "30", "B": "50"}, {"A": "100"})
        with caplog.at_level(logging.WARNING):
            balances = aggregate_net_balances([expense])
        assert "expense_remainder_unattributed" in caplog.text
        assert balances == {"A": Decimal("70"), "B": Decimal("-50")}
    
    def test_balanced_explicit_shares_not_logged(self, caplog):
        """Test that explicit shares matching the total log nothing."""
        expense = build_expense("exact", "100", {"A": "50", "B": "50"}, {"A": "100"})
        with caplog.at_level(logging.WARNING):
            aggregate_net_balances([expense])
        assert "expense_remainder_unattributed" not in caplog.text


class TestMatchSettlements:
    """Tests for greedy debtor/creditor matching."""
    
    def test_single_creditor(self):
        """Test two debtors paying one creditor."""
        balances = {"A": Decimal("40"), "B": Decimal("-20"), "C": Decimal("-20")}
        assert match_settlements(balances) == [
            transfer("B", "A", "20"),
            transfer("C", "A", "20"),
        ]
    
    def test_largest_first(self):
        """Test that the largest debtor is matched to the largest creditor first."""
        balances = {
            "A": Decimal("50"),
            "B": Decimal("30"),
            "C": Decimal("-60"),
            "D": Decimal("-20"),
        }
        assert match_settlements(balances) == [
            transfer("C", "A", "50"),
            transfer("C", "B", "10"),
            transfer("D", "B", "20"),
        ]
    
    def test_ties_keep_insertion_order(self):
        """Test that equal amounts keep their original order."""
        balances = {"X": Decimal("-10"), "A": Decimal("20"), "Y": Decimal("-10")}
        assert match_settlements(balances) == [
            transfer("X", "A", "10"),
            transfer("Y", "A", "10"),
        ]
    
    def test_settled_balances_dropped(self):
        """Test that balances within epsilon produce no transfers."""
        balances = {
            "A": Decimal("10.004"),
            "B": Decimal("-10"),
            "C": Decimal("-0.004"),
        }
        result = match_settlements(balances)
        assert result == [transfer("B", "A", "10")]
        assert all(not t.involves("C") for t in result)
    
    def test_only_tiny_balances(self):
        """Test that a 0.004 balance is treated as settled."""
        balances = {"A": Decimal("0.004"), "B": Decimal("-0.004")}
        assert match_settlements(balances) == []
    
    def test_amounts_rounded_to_cents(self):
        """Test that transfer amounts are rounded to two places."""
        balances = {"A": Decimal("10.005"), "B": Decimal("-10.005")}
        assert match_settlements(balances) == [transfer("B", "A", "10.01")]
    
    def test_custom_epsilon(self):
        """Test that a wider epsilon settles larger balances."""
        balances = {"A": Decimal("0.5"), "B": Decimal("-0.5")}
        assert match_settlements(balances, epsilon=Decimal("1")) == []
    
    def test_epsilon_from_settings(self, monkeypatch):
        """Test that the configured epsilon is used by default."""
        monkeypatch.setenv("GIFTWISE_EPSILON", "1")
        balances = {"A": Decimal("0.5"), "B": Decimal("-0.5")}
        assert match_settlements(balances) == []
    
    def test_no_balances(self):
        """Test that nothing in gives nothing out."""
        assert match_settlements({}) == []
    
    @pytest.mark.parametrize("epsilon", [0, "0", Decimal("-1"), "-0.01"])
    def test_rejects_non_positive_epsilon(self, epsilon):
        """Test that a zero or negative epsilon is refused up front."""
        balances = {"A": Decimal("10"), "B": Decimal("-10")}
        with pytest.raises(ValueError, match="epsilon must be greater than zero"):
            match_settlements(balances, epsilon=epsilon)


class TestComputeBalances:
    """End-to-end tests of compute_balances."""
    
    def test_equal_split(self, dinner):
        """Test the €60 dinner example."""
        assert compute_balances([dinner]) == [
            transfer("B", "A", "20"),
            transfer("C", "A", "20"),
        ]
    
    def test_mixed_split(self):
        """Test the custom 40 plus equal split example."""
        expense = build_expense("e1", "100", {"A": "40", "B": None, "C": None}, {"A": "100"})
        assert compute_balances([expense]) == [
            transfer("B", "A", "30"),
            transfer("C", "A", "30"),
        ]
    
    def test_cross_expense_single_transfer(self):
        """Test that opposite debts collapse into one transfer."""
        expenses = [
            build_expense("e1", "40", {"A": None, "B": None}, {"B": "40"}),
            build_expense("e2", "30", {"A": None, "B": None}, {"A": "30"}),
        ]
        assert compute_balances(expenses) == [transfer("A", "B", "5")]
    
    def test_household(self, household):
        """Test a four person household."""
        assert compute_balances(household) == [
            transfer("B", "D", "46.50"),
            transfer("B", "A", "6"),
            transfer("C", "A", "31"),
        ]
    
    def test_empty(self):
        """Test that no expenses means no transfers."""
        assert compute_balances([]) == []
    
    def test_no_payers(self):
        """Test that an expense nobody paid yields debtors but no transfers."""
        expense = build_expense("e1", "30", {"A": None, "B": None}, {})
        assert compute_balances([expense]) == []
    
    def test_accepts_generator(self, household):
        """Test that any iterable of expenses is accepted."""
        assert compute_balances(e for e in household) == compute_balances(household)
    
    def test_idempotent(self, household):
        """Test that two calls give identical output."""
        assert compute_balances(household) == compute_balances(household)
    
    def test_zero_epsilon_rejected(self, dinner):
        """Test that compute_balances refuses a zero epsilon."""
        with pytest.raises(ValueError, match="epsilon must be greater than zero"):
            compute_balances([dinner], epsilon=0)


class TestSettlementProperties:
    """Post-conditions that must hold for every settlement."""
    
    @pytest.fixture
    def balances_and_transfers(self, household):
        balances = aggregate_net_balances(household)
        return balances, compute_balances(household)
    
    def test_debts_reproduced(self, balances_and_transfers):
        """Test that transfers out of each debtor sum to their rounded debt."""
        balances, transfers = balances_and_transfers
        paid_out = Counter()
        for t in transfers:
            paid_out[t.from_person_id] += t.amount
        for person_id, balance in balances.items():
            if balance < Decimal("-0.01"):
                assert paid_out[person_id] == round_money(-balance)
    
    def test_credits_reproduced(self, balances_and_transfers):
        """Test that transfers into each creditor sum to their rounded credit."""
        balances, transfers = balances_and_transfers
        received = Counter()
        for t in transfers:
            received[t.to_person_id] += t.amount
        for person_id, balance in balances.items():
            if balance > Decimal("0.01"):
                assert received[person_id] == round_money(balance)
    
    def test_completeness(self, balances_and_transfers):
        """Test that applying every transfer zeroes every balance."""
        balances, transfers = balances_and_transfers
        remaining = dict(balances)
        for t in transfers:
            remaining[t.from_person_id] += t.amount
            remaining[t.to_person_id] -= t.amount
        assert all(abs(v) <= Decimal("0.01") for v in remaining.values())
    
    def test_completeness_with_thirds(self):
        """Test completeness when an equal split does not divide evenly."""
        expense = build_expense("e1", "100", {"A": None, "B": None, "C": None}, {"A": "100"})
        balances = aggregate_net_balances([expense])
        transfers = compute_balances([expense])
        assert transfers == [
            transfer("B", "A", "33.33"),
            transfer("C", "A", "33.33"),
        ]
        remaining = dict(balances)
        for t in transfers:
            remaining[t.from_person_id] += t.amount
            remaining[t.to_person_id] -= t.amount
        assert all(abs(v) <= Decimal("0.01") for v in remaining.values())
    
    def test_multiset_equal(self, household):
        """Test that repeated runs agree as multisets of transfers."""
        first = Counter(compute_balances(household))
        second = Counter(compute_balances(list(reversed(household))))
        assert first == second


class TestRoundMoney:
    """Tests for cent rounding."""
    
    def test_half_up(self):
        """Test that halves round away from zero."""
        assert round_money(Decimal("2.005")) == Decimal("2.01")
        assert round_money(Decimal("-2.005")) == Decimal("-2.01")
    
    def test_float_input(self):
        """Test that floats are rounded through their repr."""
        assert round_money(0.1 + 0.2) == Decimal("0.30")
