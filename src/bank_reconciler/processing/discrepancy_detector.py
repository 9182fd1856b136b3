"""Discrepancy detection over a completed matching run."""

import hashlib
import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Optional

from bank_reconciler.config import DiscrepancyConfig
from bank_reconciler.models.discrepancy import Discrepancy, DiscrepancyType, Severity
from bank_reconciler.models.match import ReconciliationMatch
from bank_reconciler.models.transaction import LedgerEntry, Transaction
from bank_reconciler.utils.date_utils import date_to_iso
from bank_reconciler.utils.decimal_utils import format_currency, round_cents
from bank_reconciler.utils.logging_config import get_logger, log_event

logger = get_logger(__name__)


def discrepancy_id(discrepancy_type: DiscrepancyType, *references: str) -> str:
    """Stable identifier derived from the discrepancy type and what it references.

    Returns:
        A 16-character hex string; equal inputs always give equal ids.
    """
    data = "|".join([discrepancy_type.value, *references])
    return hashlib.sha256(data.encode()).hexdigest()[:16]


class DiscrepancyDetector:
    """Surfaces anomalies for human review after matching.

    Detected anomalies:
    - Unmatched transactions and unmatched ledger entries (missing entry)
    - Matched pairs whose amounts differ beyond the tolerance
    - Matched pairs whose dates are more than a week apart
    - Clusters of transactions sharing an amount and a calendar date
    - Optionally, transactions whose date was estimated at import

    Detection is a pure function of its inputs: nothing is mutated and two
    runs over the same collections give equal results.
    """

    def __init__(self, config: Optional[DiscrepancyConfig] = None):
        """Initialize discrepancy detector.

        Args:
            config: Thresholds (default DiscrepancyConfig()).
        """
        self.config = config or DiscrepancyConfig()

    def detect(
        self,
        transactions: Sequence[Transaction],
        entries: Sequence[LedgerEntry],
        matches: Sequence[ReconciliationMatch],
    ) -> list[Discrepancy]:
        """Classify the anomalies of one matching run.

        Args:
            transactions: All bank transactions of the run.
            entries: All ledger entries of the run.
            matches: Accepted matches of the run.

        Returns:
            Discrepancies in a deterministic order.
        """
        matched_txn_ids = {m.transaction.id for m in matches}
        matched_entry_ids = {m.ledger_entry.id for m in matches}

        discrepancies: list[Discrepancy] = []
        discrepancies.extend(
            self._missing_transaction(txn) for txn in transactions if txn.id not in matched_txn_ids
        )
        discrepancies.extend(
            self._missing_entry(entry) for entry in entries if entry.id not in matched_entry_ids
        )
        for match in matches:
            discrepancies.extend(self._check_match(match))
        discrepancies.extend(self._detect_duplicates(transactions))
        if self.config.flag_estimated_dates:
            discrepancies.extend(
                self._estimated_date(txn) for txn in transactions if txn.date_estimated
            )

        counts: dict[str, int] = defaultdict(int)
        for d in discrepancies:
            counts[d.type.value] += 1
        log_event(logger, logging.INFO, "discrepancy.detect.complete", total=len(discrepancies), **counts)
        return discrepancies

    def _missing_transaction(self, txn: Transaction) -> Discrepancy:
        return Discrepancy(
            id=discrepancy_id(DiscrepancyType.MISSING_ENTRY, "transaction", txn.id),
            type=DiscrepancyType.MISSING_ENTRY,
            severity=Severity.MEDIUM,
            description=(
                f"Bank transaction on {date_to_iso(txn.date)} for {format_currency(txn.amount)} "
                f"({txn.description}) has no matching ledger entry"
            ),
            suggested_action="Record the missing ledger entry or match manually",
            transaction=txn,
        )

    def _missing_entry(self, entry: LedgerEntry) -> Discrepancy:
        return Discrepancy(
            id=discrepancy_id(DiscrepancyType.MISSING_ENTRY, "ledger", entry.id),
            type=DiscrepancyType.MISSING_ENTRY,
            severity=Severity.MEDIUM,
            description=(
                f"Ledger entry on {date_to_iso(entry.date)} for {format_currency(entry.magnitude)} "
                f"({entry.description}) has no matching bank transaction"
            ),
            suggested_action="Check whether the movement has cleared the bank",
            ledger_entry=entry,
        )

    def _check_match(self, match: ReconciliationMatch) -> list[Discrepancy]:
        found: list[Discrepancy] = []
        txn, entry = match.transaction, match.ledger_entry

        amount_diff = match.amount_difference
        if amount_diff > self.config.amount_tolerance:
            severity = Severity.HIGH if amount_diff > self.config.high_severity_amount else Severity.MEDIUM
            found.append(
                Discrepancy(
                    id=discrepancy_id(DiscrepancyType.AMOUNT_MISMATCH, txn.id, entry.id),
                    type=DiscrepancyType.AMOUNT_MISMATCH,
                    severity=severity,
                    description=(
                        f"Amounts differ by {format_currency(amount_diff)}: bank "
                        f"{format_currency(txn.amount)}, ledger {format_currency(entry.magnitude)}"
                    ),
                    suggested_action="Verify the amount and correct the ledger entry",
                    transaction=txn,
                    ledger_entry=entry,
                    match=match,
                )
            )

        day_diff = match.day_difference
        if day_diff > self.config.date_mismatch_days:
            found.append(
                Discrepancy(
                    id=discrepancy_id(DiscrepancyType.DATE_MISMATCH, txn.id, entry.id),
                    type=DiscrepancyType.DATE_MISMATCH,
                    severity=Severity.LOW,
                    description=(
                        f"Dates are {day_diff} days apart: bank {date_to_iso(txn.date)}, "
                        f"ledger {date_to_iso(entry.date)}"
                    ),
                    suggested_action="Confirm the posting date",
                    transaction=txn,
                    ledger_entry=entry,
                    match=match,
                )
            )

        return found

    def _detect_duplicates(self, transactions: Sequence[Transaction]) -> list[Discrepancy]:
        """One discrepancy per (amount, date) cluster of two or more transactions."""
        by_amount: dict[Decimal, list[Transaction]] = defaultdict(list)
        for txn in transactions:
            by_amount[round_cents(txn.amount)].append(txn)

        found: list[Discrepancy] = []
        for amount, group in by_amount.items():
            if len(group) < 2:
                continue

            by_date: dict[date, list[Transaction]] = defaultdict(list)
            for txn in group:
                by_date[txn.date].append(txn)

            for txn_date, cluster in by_date.items():
                if len(cluster) < 2:
                    continue
                member_ids = tuple(t.id for t in cluster)
                found.append(
                    Discrepancy(
                        id=discrepancy_id(DiscrepancyType.DUPLICATE, *member_ids),
                        type=DiscrepancyType.DUPLICATE,
                        severity=Severity.MEDIUM,
                        description=(
                            f"{len(cluster)} transactions of {format_currency(amount)} "
                            f"on {date_to_iso(txn_date)}"
                        ),
                        suggested_action="Check for a duplicate import or double charge",
                        transaction=cluster[0],
                        related_transaction_ids=member_ids,
                    )
                )

        return found

    def _estimated_date(self, txn: Transaction) -> Discrepancy:
        return Discrepancy(
            id=discrepancy_id(DiscrepancyType.DATE_MISMATCH, "estimated", txn.id),
            type=DiscrepancyType.DATE_MISMATCH,
            severity=Severity.LOW,
            description=(
                f"Statement date for '{txn.description}' could not be read; "
                f"import date {date_to_iso(txn.date)} was used"
            ),
            suggested_action="Check the statement and correct the transaction date",
            transaction=txn,
        )
