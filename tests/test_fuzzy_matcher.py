"""Tests for fuzzy confidence scoring."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from bank_reconciler.matching.fuzzy_matcher import FuzzyMatcher
from bank_reconciler.models.rule import ReconciliationRule, WithinDaysCondition
from bank_reconciler.models.transaction import LedgerEntry, Transaction

BASE_DATE = date(2024, 2, 1)


def create_transaction(
    amount: str = "100.00",
    trans_date: date = BASE_DATE,
    description: str = "alpha",
) -> Transaction:
    """Helper to create a test bank transaction."""
    return Transaction(date=trans_date, description=description, amount=Decimal(amount))


def create_entry(
    amount: str = "100.00",
    entry_date: date = BASE_DATE,
    description: str = "alpha",
) -> LedgerEntry:
    """Helper to create a test ledger entry."""
    return LedgerEntry(id="L-1", date=entry_date, description=description, amount=Decimal(amount))


def create_rule(priority: int) -> ReconciliationRule:
    """Helper to create a rule with the given priority."""
    return ReconciliationRule(
        id="r1", name="Rule", priority=priority, conditions=[WithinDaysCondition(days=0)]
    )


@pytest.fixture
def matcher() -> FuzzyMatcher:
    return FuzzyMatcher()


class TestScore:
    """Tests for FuzzyMatcher.score."""

    def test_exact_pair_scores_94(self, matcher: FuzzyMatcher) -> None:
        """Test that same amount, same day and identical description score 40 + 30 + 24."""
        txn = create_transaction(description="Rent")
        entry = create_entry(description="Rent")
        assert matcher.score(txn, entry) == 94

    def test_close_pair_with_identical_description(self, matcher: FuzzyMatcher) -> None:
        """Test a 2% amount gap two days apart stays below the default threshold."""
        txn = create_transaction(amount="5000", description="Office rent")
        entry = create_entry(
            amount="-4900", entry_date=BASE_DATE + timedelta(days=2), description="Office rent"
        )
        assert matcher.score(txn, entry) == 20 + 20 + 24

    def test_both_descriptions_empty(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction(description="")
        entry = create_entry(description="")
        assert matcher.score(txn, entry) == 100

    def test_ledger_credit_compared_by_magnitude(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction(amount="5000", description="bravo")
        entry = create_entry(amount="-5000", description="charlie")
        assert matcher.score(txn, entry) == 70

    def test_amount_within_five_percent(self, matcher: FuzzyMatcher) -> None:
        entry = create_entry(description="zulu")
        assert matcher.score(create_transaction(amount="104"), entry) == 20 + 30
        assert matcher.score(create_transaction(amount="106"), entry) == 30

    def test_zero_amounts_are_exact(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction(amount="0")
        entry = create_entry(amount="0", description="zulu")
        assert matcher.score(txn, entry) == 70

    @pytest.mark.parametrize(
        "days_apart, date_points",
        [(0, 30), (1, 20), (3, 20), (4, 10), (7, 10), (8, 0)],
    )
    def test_date_points(self, matcher: FuzzyMatcher, days_apart: int, date_points: int) -> None:
        """Test the day-distance bands for the date component."""
        txn = create_transaction()
        entry = create_entry(entry_date=BASE_DATE + timedelta(days=days_apart), description="zulu")
        assert matcher.score(txn, entry) == 40 + date_points

    def test_description_containment(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction(description="Rent")
        entry = create_entry(description="Rent February")
        assert matcher.score(txn, entry) == 40 + 30 + 24

    def test_score_is_bounded(self, matcher: FuzzyMatcher) -> None:
        pairs = [
            (create_transaction(amount="1"), create_entry(amount="99999", entry_date=date(2020, 1, 1))),
            (create_transaction(), create_entry()),
            (create_transaction(amount="0"), create_entry(amount="-0.001", description="")),
        ]
        for txn, entry in pairs:
            assert 0 <= matcher.score(txn, entry) <= 100


class TestRuleConfidence:
    """Tests for FuzzyMatcher.rule_confidence."""

    def test_priority_bonus_is_capped(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction()
        entry = create_entry(description="zulu")
        assert matcher.rule_confidence(txn, entry, create_rule(100)) == 100

    def test_zero_priority_equals_fuzzy_score(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction()
        entry = create_entry(description="zulu")
        assert matcher.rule_confidence(txn, entry, create_rule(0)) == 70

    def test_negative_priority_floors_at_zero(self, matcher: FuzzyMatcher) -> None:
        txn = create_transaction()
        entry = create_entry(description="zulu")
        assert matcher.rule_confidence(txn, entry, create_rule(-100)) == 0

    def test_custom_priority_bonus(self) -> None:
        matcher = FuzzyMatcher(priority_bonus=1)
        txn = create_transaction()
        entry = create_entry(description="zulu")
        assert matcher.rule_confidence(txn, entry, create_rule(10)) == 80
