"""Weighted fuzzy confidence scoring for transaction/ledger entry pairs."""

from decimal import Decimal, ROUND_HALF_UP

from bank_reconciler.matching.similarity import string_similarity
from bank_reconciler.models.rule import ReconciliationRule
from bank_reconciler.models.transaction import LedgerEntry, Transaction
from bank_reconciler.utils.date_utils import day_distance

# Amount component
AMOUNT_EXACT_POINTS = 40
AMOUNT_CLOSE_POINTS = 20
AMOUNT_EXACT_TOLERANCE = Decimal("0.01")
AMOUNT_CLOSE_RATIO = Decimal("0.05")

# Date component: (max day distance, points), checked in order
DATE_POINTS = [(0, 30), (3, 20), (7, 10)]

# Description component
DESCRIPTION_MAX_POINTS = 30

DEFAULT_PRIORITY_BONUS = 5


class FuzzyMatcher:
    """Scores how likely a transaction and a ledger entry describe the same movement.

    The score sums three independently capped components:
    - amount: 40 points within 0.01, else 20 points under 5% relative difference
    - date: 30 points same day, 20 within 3 days, 10 within 7 days
    - description: 30 points times the description similarity

    The total is rounded half up to an integer in [0, 100].
    """

    def __init__(self, priority_bonus: int = DEFAULT_PRIORITY_BONUS):
        """Initialize fuzzy matcher.

        Args:
            priority_bonus: Confidence points per unit of rule priority
                for rule-driven matches.
        """
        self.priority_bonus = priority_bonus

    def score(self, transaction: Transaction, entry: LedgerEntry) -> int:
        """Compute the fuzzy confidence for a pair.

        Args:
            transaction: Bank transaction.
            entry: Ledger entry.

        Returns:
            Confidence from 0 to 100.
        """
        total = (
            Decimal(self._amount_points(transaction, entry))
            + Decimal(self._date_points(transaction, entry))
            + self._description_points(transaction, entry)
        )
        rounded = int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return max(0, min(100, rounded))

    def rule_confidence(
        self,
        transaction: Transaction,
        entry: LedgerEntry,
        rule: ReconciliationRule,
    ) -> int:
        """Confidence for a rule-driven match: fuzzy score plus a priority bonus.

        Clamped to [0, 100], so negative priorities cannot push it below zero.
        """
        boosted = self.score(transaction, entry) + rule.priority * self.priority_bonus
        return max(0, min(100, boosted))

    def _amount_points(self, transaction: Transaction, entry: LedgerEntry) -> int:
        txn_amount = transaction.amount if transaction.amount is not None else Decimal("0")
        entry_amount = entry.magnitude if entry.amount is not None else Decimal("0")

        difference = abs(txn_amount - entry_amount)
        if difference < AMOUNT_EXACT_TOLERANCE:
            return AMOUNT_EXACT_POINTS

        largest = max(txn_amount, entry_amount)
        if largest > 0 and difference / largest < AMOUNT_CLOSE_RATIO:
            return AMOUNT_CLOSE_POINTS
        return 0

    def _date_points(self, transaction: Transaction, entry: LedgerEntry) -> int:
        distance = day_distance(transaction.date, entry.date)
        if distance is None:
            return 0
        for max_days, points in DATE_POINTS:
            if distance <= max_days:
                return points
        return 0

    def _description_points(self, transaction: Transaction, entry: LedgerEntry) -> Decimal:
        similarity = string_similarity(transaction.description, entry.description)
        return Decimal(str(similarity)) * DESCRIPTION_MAX_POINTS
