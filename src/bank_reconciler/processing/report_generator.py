"""Summary generation for reconciliation session output."""

from collections import Counter
from collections.abc import Sequence
from decimal import Decimal

from bank_reconciler.models.discrepancy import Discrepancy
from bank_reconciler.models.match import ReconciliationMatch
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.models.transaction import LedgerEntry, ReconciliationStatus, Transaction


def generate_summary(
    session_id: str,
    transactions: Sequence[Transaction],
    matches: Sequence[ReconciliationMatch],
    unmatched_entries: Sequence[LedgerEntry],
    discrepancies: Sequence[Discrepancy],
) -> ReconciliationSummary:
    """Generate the session summary from a completed run.

    Single source of truth for session figures - used by both CSV and Excel exporters.

    Args:
        session_id: Reconciliation session identifier.
        transactions: Status-updated transactions of the run.
        matches: Accepted matches.
        unmatched_entries: Ledger entries left unpaired.
        discrepancies: Detected discrepancies.

    Returns:
        ReconciliationSummary with pre-computed counts and totals.
    """
    if not transactions:
        return ReconciliationSummary(
            session_id=session_id,
            unmatched_entry_count=len(unmatched_entries),
            discrepancies_by_type=dict(Counter(d.type.value for d in discrepancies)),
            discrepancies_by_severity=dict(Counter(d.severity.value for d in discrepancies)),
        )

    statuses = Counter(t.status for t in transactions)

    total_deposits = sum((t.amount for t in transactions if not t.is_withdrawal), Decimal("0"))
    total_withdrawals = sum((t.amount for t in transactions if t.is_withdrawal), Decimal("0"))

    # Closing balance: latest dated transaction that reports one (file order breaks ties).
    # Rows with estimated dates are left out.
    closing_balance = None
    with_balance = [t for t in transactions if t.balance is not None and not t.date_estimated]
    if with_balance:
        latest_date = max(t.date for t in with_balance)
        closing_balance = [t for t in with_balance if t.date == latest_date][-1].balance

    rule_matches = sum(1 for m in matches if m.is_rule_match)

    return ReconciliationSummary(
        session_id=session_id,
        period_start=min(t.date for t in transactions),
        period_end=max(t.date for t in transactions),
        total_transactions=len(transactions),
        reconciled_count=statuses[ReconciliationStatus.RECONCILED],
        flagged_count=statuses[ReconciliationStatus.FLAGGED],
        unreconciled_count=statuses[ReconciliationStatus.UNRECONCILED],
        rule_match_count=rule_matches,
        fuzzy_match_count=len(matches) - rule_matches,
        unmatched_entry_count=len(unmatched_entries),
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        closing_balance=closing_balance,
        discrepancies_by_type=dict(Counter(d.type.value for d in discrepancies)),
        discrepancies_by_severity=dict(Counter(d.severity.value for d in discrepancies)),
    )
