"""Rule evaluation against transaction/ledger entry pairs."""

from decimal import Decimal

from bank_reconciler.models.rule import (
    Condition,
    ContainsCondition,
    EndsWithCondition,
    EqualsCondition,
    ReconciliationRule,
    RuleField,
    StartsWithCondition,
    WithinAmountCondition,
    WithinDaysCondition,
)
from bank_reconciler.models.transaction import LedgerEntry, Transaction
from bank_reconciler.utils.date_utils import date_to_iso, day_distance
from bank_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


def transaction_field(transaction: Transaction, rule_field: RuleField) -> str | Decimal:
    """Read a rule field from a bank transaction (amount as magnitude)."""
    if rule_field == RuleField.AMOUNT:
        return transaction.amount if transaction.amount is not None else Decimal("0")
    if rule_field == RuleField.DATE:
        return date_to_iso(transaction.date)
    if rule_field == RuleField.DESCRIPTION:
        return transaction.description or ""
    return transaction.reference or ""


def entry_field(entry: LedgerEntry, rule_field: RuleField) -> str | Decimal:
    """Read a rule field from a ledger entry (amount as magnitude)."""
    if rule_field == RuleField.AMOUNT:
        return entry.magnitude if entry.amount is not None else Decimal("0")
    if rule_field == RuleField.DATE:
        return date_to_iso(entry.date)
    if rule_field == RuleField.DESCRIPTION:
        return entry.description or ""
    return entry.reference or ""


class RuleEngine:
    """Evaluates reconciliation rules against candidate pairs.

    A rule matches a pair when every condition holds (logical AND), checked
    in order with short-circuit on the first failure. Missing field values
    compare as empty text or zero; evaluation never raises.
    """

    def matches(
        self,
        rule: ReconciliationRule,
        transaction: Transaction,
        entry: LedgerEntry,
    ) -> bool:
        """Check whether a rule pairs this transaction with this ledger entry.

        Args:
            rule: Rule to evaluate.
            transaction: Bank transaction.
            entry: Ledger entry.

        Returns:
            True if the rule is enabled and all its conditions hold.
        """
        if not rule.enabled:
            return False

        for condition in rule.conditions:
            if not self.condition_matches(condition, transaction, entry):
                return False
        return True

    def condition_matches(
        self,
        condition: Condition,
        transaction: Transaction,
        entry: LedgerEntry,
    ) -> bool:
        """Evaluate a single condition against both sides of a pair."""
        if isinstance(condition, WithinDaysCondition):
            distance = day_distance(transaction.date, entry.date)
            return distance is not None and distance <= condition.days

        if isinstance(condition, WithinAmountCondition):
            txn_amount = transaction_field(transaction, RuleField.AMOUNT)
            entry_amount = entry_field(entry, RuleField.AMOUNT)
            return abs(txn_amount - entry_amount) <= condition.tolerance  # type: ignore[operator]

        if isinstance(condition, EqualsCondition):
            return (
                transaction_field(transaction, condition.field) == condition.value
                and entry_field(entry, condition.field) == condition.value
            )

        if isinstance(condition, (ContainsCondition, StartsWithCondition, EndsWithCondition)):
            literal = str(condition.value).lower()
            txn_text = str(transaction_field(transaction, condition.field)).lower()
            entry_text = str(entry_field(entry, condition.field)).lower()
            if isinstance(condition, ContainsCondition):
                return literal in txn_text and literal in entry_text
            if isinstance(condition, StartsWithCondition):
                return txn_text.startswith(literal) and entry_text.startswith(literal)
            return txn_text.endswith(literal) and entry_text.endswith(literal)

        logger.warning(f"Unsupported condition type {type(condition).__name__}, treating as no match")
        return False
