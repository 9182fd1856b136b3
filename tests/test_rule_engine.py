"""Tests for rule evaluation."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from bank_reconciler.matching.rule_engine import RuleEngine
from bank_reconciler.models.rule import (
    ContainsCondition,
    EndsWithCondition,
    EqualsCondition,
    ReconciliationRule,
    RuleField,
    StartsWithCondition,
    WithinAmountCondition,
    WithinDaysCondition,
)
from bank_reconciler.models.transaction import (
    EntryDirection,
    LedgerEntry,
    Transaction,
    TransactionDirection,
)


def create_transaction(
    amount: str = "100.00",
    trans_date: date = date(2024, 1, 15),
    description: str = "Office Rent",
    reference: str | None = None,
) -> Transaction:
    """Helper to create a test bank transaction."""
    return Transaction(
        date=trans_date,
        description=description,
        amount=Decimal(amount),
        direction=TransactionDirection.WITHDRAWAL,
        reference=reference,
    )


def create_entry(
    amount: str = "-100.00",
    entry_date: date = date(2024, 1, 15),
    description: str = "Office Rent",
    reference: str | None = None,
) -> LedgerEntry:
    """Helper to create a test ledger entry."""
    return LedgerEntry(
        id="L-1",
        date=entry_date,
        description=description,
        amount=Decimal(amount),
        direction=EntryDirection.CREDIT,
        reference=reference,
    )


def create_rule(*conditions, enabled: bool = True) -> ReconciliationRule:
    """Helper to create a rule from conditions."""
    return ReconciliationRule(id="r1", name="Test", conditions=list(conditions), enabled=enabled)


@pytest.fixture
def engine() -> RuleEngine:
    return RuleEngine()


class TestWithinConditions:
    """Tests for withinDays and withinAmount."""

    def test_within_days_boundary(self, engine: RuleEngine) -> None:
        txn = create_transaction(trans_date=date(2024, 1, 15))
        entry = create_entry(entry_date=date(2024, 1, 18))
        assert engine.matches(create_rule(WithinDaysCondition(days=3)), txn, entry)
        assert not engine.matches(create_rule(WithinDaysCondition(days=2)), txn, entry)

    def test_within_days_is_symmetric(self, engine: RuleEngine) -> None:
        txn = create_transaction(trans_date=date(2024, 1, 18))
        entry = create_entry(entry_date=date(2024, 1, 15))
        assert engine.matches(create_rule(WithinDaysCondition(days=3)), txn, entry)

    def test_within_amount_compares_magnitudes(self, engine: RuleEngine) -> None:
        """Test that a negative ledger credit compares against a positive withdrawal."""
        txn = create_transaction(amount="100.00")
        entry = create_entry(amount="-100.01")
        assert engine.matches(create_rule(WithinAmountCondition(Decimal("0.01"))), txn, entry)
        assert not engine.matches(create_rule(WithinAmountCondition(Decimal("0.001"))), txn, entry)


class TestEqualsCondition:
    """Tests for equals, which requires both sides to equal the literal."""

    def test_description_equals_on_both_sides(self, engine: RuleEngine) -> None:
        rule = create_rule(EqualsCondition(field=RuleField.DESCRIPTION, value="Office Rent"))
        assert engine.matches(rule, create_transaction(), create_entry())

    def test_description_equals_is_exact(self, engine: RuleEngine) -> None:
        rule = create_rule(EqualsCondition(field=RuleField.DESCRIPTION, value="Office Rent"))
        assert not engine.matches(rule, create_transaction(), create_entry(description="office rent"))

    def test_amount_equals_uses_magnitude(self, engine: RuleEngine) -> None:
        rule = create_rule(EqualsCondition(field=RuleField.AMOUNT, value=100))
        assert engine.matches(rule, create_transaction(amount="100.00"), create_entry(amount="-100"))

    def test_date_equals_iso_literal(self, engine: RuleEngine) -> None:
        rule = create_rule(EqualsCondition(field=RuleField.DATE, value=date(2024, 1, 15)))
        assert engine.matches(rule, create_transaction(), create_entry())

    def test_missing_reference_compares_as_empty(self, engine: RuleEngine) -> None:
        rule = create_rule(EqualsCondition(field=RuleField.REFERENCE, value=""))
        assert engine.matches(rule, create_transaction(reference=None), create_entry(reference=None))


class TestTextConditions:
    """Tests for contains, startsWith and endsWith."""

    def test_contains_is_case_insensitive(self, engine: RuleEngine) -> None:
        rule = create_rule(ContainsCondition(field=RuleField.DESCRIPTION, value="RENT"))
        assert engine.matches(rule, create_transaction(), create_entry(description="rent jan"))

    def test_contains_requires_both_sides(self, engine: RuleEngine) -> None:
        rule = create_rule(ContainsCondition(field=RuleField.DESCRIPTION, value="rent"))
        assert not engine.matches(rule, create_transaction(), create_entry(description="Payroll"))

    def test_starts_with(self, engine: RuleEngine) -> None:
        rule = create_rule(StartsWithCondition(field=RuleField.DESCRIPTION, value="office"))
        assert engine.matches(rule, create_transaction(), create_entry())

    def test_ends_with(self, engine: RuleEngine) -> None:
        rule = create_rule(EndsWithCondition(field=RuleField.REFERENCE, value="-42"))
        txn = create_transaction(reference="INV-42")
        entry = create_entry(reference="inv-42")
        assert engine.matches(rule, txn, entry)

    def test_missing_reference_does_not_raise(self, engine: RuleEngine) -> None:
        rule = create_rule(ContainsCondition(field=RuleField.REFERENCE, value="INV"))
        assert not engine.matches(rule, create_transaction(), create_entry())


class TestRuleEvaluation:
    """Tests for rule-level evaluation."""

    def test_disabled_rule_never_matches(self, engine: RuleEngine) -> None:
        rule = create_rule(WithinDaysCondition(days=30), enabled=False)
        assert not engine.matches(rule, create_transaction(), create_entry())

    def test_rule_without_conditions_matches(self, engine: RuleEngine) -> None:
        assert engine.matches(create_rule(), create_transaction(), create_entry())

    def test_all_conditions_must_hold(self, engine: RuleEngine) -> None:
        rule = create_rule(
            WithinAmountCondition(Decimal("0.01")),
            ContainsCondition(field=RuleField.DESCRIPTION, value="payroll"),
        )
        assert not engine.matches(rule, create_transaction(), create_entry())

    def test_short_circuits_on_first_failure(self, engine: RuleEngine) -> None:
        rule = create_rule(WithinDaysCondition(days=0), WithinDaysCondition(days=5))
        with patch.object(RuleEngine, "condition_matches", return_value=False) as mock_condition:
            assert not engine.matches(rule, create_transaction(), create_entry())
        assert mock_condition.call_count == 1
