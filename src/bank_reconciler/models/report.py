"""Report data models for reconciliation session output."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass
class ReconciliationSummary:
    """Pre-computed totals for one reconciliation session.

    Single source of truth for session figures - used by both CSV and Excel exporters.

    Attributes:
        session_id: Session the summary belongs to.
        period_start: Earliest transaction date (None if no data).
        period_end: Latest transaction date (None if no data).
        total_transactions: Number of bank transactions considered.
        reconciled_count: Transactions paired and reconciled.
        flagged_count: Transactions paired but flagged for review.
        unreconciled_count: Transactions left without a pairing.
        rule_match_count: Pairings produced by the rule pass.
        fuzzy_match_count: Pairings produced by the fuzzy pass.
        unmatched_entry_count: Ledger entries left without a pairing.
        total_deposits: Sum of deposit magnitudes.
        total_withdrawals: Sum of withdrawal magnitudes.
        closing_balance: Running balance of the latest transaction carrying one.
        discrepancies_by_type: Discrepancy counts keyed by type value.
        discrepancies_by_severity: Discrepancy counts keyed by severity value.
    """

    session_id: str
    period_start: date | None = None
    period_end: date | None = None
    total_transactions: int = 0
    reconciled_count: int = 0
    flagged_count: int = 0
    unreconciled_count: int = 0
    rule_match_count: int = 0
    fuzzy_match_count: int = 0
    unmatched_entry_count: int = 0
    total_deposits: Decimal = field(default_factory=lambda: Decimal("0"))
    total_withdrawals: Decimal = field(default_factory=lambda: Decimal("0"))
    closing_balance: Decimal | None = None
    discrepancies_by_type: dict[str, int] = field(default_factory=dict)
    discrepancies_by_severity: dict[str, int] = field(default_factory=dict)

    @property
    def matched_count(self) -> int:
        """Transactions that were paired, reconciled or flagged."""
        return self.reconciled_count + self.flagged_count

    @property
    def reconciliation_rate(self) -> Decimal:
        """Percentage of transactions paired, rounded to one decimal place."""
        if self.total_transactions == 0:
            return Decimal("0")
        rate = Decimal(self.matched_count) * 100 / Decimal(self.total_transactions)
        return rate.quantize(Decimal("0.1"))

    @property
    def net_movement(self) -> Decimal:
        """Deposits minus withdrawals."""
        return self.total_deposits - self.total_withdrawals

    @property
    def total_discrepancies(self) -> int:
        return sum(self.discrepancies_by_type.values())

    def as_rows(self) -> list[tuple[str, object]]:
        """Label/value pairs in display order, shared by the exporters."""
        return [
            ("Session", self.session_id),
            ("Period Start", self.period_start),
            ("Period End", self.period_end),
            ("Total Transactions", self.total_transactions),
            ("Reconciled", self.reconciled_count),
            ("Flagged", self.flagged_count),
            ("Unreconciled", self.unreconciled_count),
            ("Reconciliation Rate (%)", self.reconciliation_rate),
            ("Matched by Rule", self.rule_match_count),
            ("Matched by Fuzzy", self.fuzzy_match_count),
            ("Unmatched Ledger Entries", self.unmatched_entry_count),
            ("Total Deposits", self.total_deposits),
            ("Total Withdrawals", self.total_withdrawals),
            ("Net Movement", self.net_movement),
            ("Closing Bank Balance", self.closing_balance),
            ("Total Discrepancies", self.total_discrepancies),
        ]
