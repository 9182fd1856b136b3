"""Discrepancy model for anomalies surfaced during reconciliation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from bank_reconciler.models.match import ReconciliationMatch
from bank_reconciler.models.transaction import LedgerEntry, Transaction


class DiscrepancyType(Enum):
    """Kind of anomaly."""

    AMOUNT_MISMATCH = "amount_mismatch"
    DATE_MISMATCH = "date_mismatch"
    MISSING_ENTRY = "missing_entry"
    DUPLICATE = "duplicate"


class Severity(Enum):
    """How urgently a discrepancy needs review."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


@dataclass
class Discrepancy:
    """An anomaly flagged for human review.

    Discrepancies are advisory: they never block matching and never change
    the transactions or ledger entries they reference.

    Attributes:
        id: Deterministic identifier derived from type and references.
        type: Kind of anomaly.
        severity: Review urgency.
        description: Human-readable explanation.
        suggested_action: What a reviewer would typically do.
        transaction: Offending bank transaction, if any.
        ledger_entry: Offending ledger entry, if any.
        match: The match the anomaly was found on, if any.
        related_transaction_ids: Members of a duplicate cluster.
        resolved: Whether a reviewer has actioned this discrepancy.
        resolved_by: Reviewer identity.
        resolved_at: When it was resolved.
    """

    id: str
    type: DiscrepancyType
    severity: Severity
    description: str
    suggested_action: str | None = None
    transaction: Transaction | None = None
    ledger_entry: LedgerEntry | None = None
    match: ReconciliationMatch | None = None
    related_transaction_ids: tuple[str, ...] = field(default_factory=tuple)
    resolved: bool = False
    resolved_by: str | None = None
    resolved_at: datetime | None = None

    def mark_resolved(self, resolved_by: str, resolved_at: datetime | None = None) -> None:
        """Record that a reviewer has actioned this discrepancy.

        Args:
            resolved_by: Reviewer identity.
            resolved_at: Resolution time (defaults to now).
        """
        self.resolved = True
        self.resolved_by = resolved_by
        self.resolved_at = resolved_at or datetime.now()

    def __repr__(self) -> str:
        return (
            f"Discrepancy(id={self.id!r}, type={self.type.value}, "
            f"severity={self.severity.value}, resolved={self.resolved})"
        )
