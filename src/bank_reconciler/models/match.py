"""Reconciliation match model."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from bank_reconciler.models.rule import ActionType, RuleAction
from bank_reconciler.models.transaction import LedgerEntry, Transaction
from bank_reconciler.utils.date_utils import day_distance


class MatchSource(Enum):
    """Which matching pass produced a match."""

    RULE = "rule"
    FUZZY = "fuzzy"


FUZZY_MATCH_REASON = "Fuzzy match (amount + date + description)"


@dataclass(frozen=True)
class ReconciliationMatch:
    """An accepted pairing of one transaction with one ledger entry.

    Attributes:
        transaction: The bank transaction.
        ledger_entry: The ledger entry it was paired with.
        confidence: Score from 0 to 100.
        reason: Human-readable reason ("Rule: <name>" or the fuzzy reason).
        source: Rule pass or fuzzy pass.
        rule_id: Id of the matching rule for rule-driven matches.
        actions: The matching rule's actions (empty for fuzzy matches).
    """

    transaction: Transaction
    ledger_entry: LedgerEntry
    confidence: int
    reason: str
    source: MatchSource
    rule_id: str | None = None
    actions: tuple[RuleAction, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Confidence must be between 0 and 100, got {self.confidence}")

    @property
    def is_rule_match(self) -> bool:
        return self.source == MatchSource.RULE

    @property
    def amount_difference(self) -> Decimal:
        """Absolute difference between the two sides' amounts."""
        return abs(self.transaction.amount - self.ledger_entry.magnitude)

    @property
    def day_difference(self) -> int:
        """Absolute calendar-day distance between the two sides."""
        return day_distance(self.transaction.date, self.ledger_entry.date) or 0

    def has_action(self, action_type: ActionType) -> bool:
        return any(action.type == action_type for action in self.actions)
