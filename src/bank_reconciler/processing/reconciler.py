"""Reconciliation session facade wiring import, matching, detection and history."""

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from bank_reconciler.config import Config
from bank_reconciler.matching.coordinator import MatchCoordinator
from bank_reconciler.matching.fuzzy_matcher import FuzzyMatcher
from bank_reconciler.matching.rule_engine import RuleEngine
from bank_reconciler.models.discrepancy import Discrepancy
from bank_reconciler.models.history import HistoryAction, HistoryEntry
from bank_reconciler.models.match import ReconciliationMatch
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.models.rule import ActionType, ReconciliationRule
from bank_reconciler.models.transaction import (
    ImportedStatement,
    LedgerEntry,
    ReconciliationStatus,
    Transaction,
)
from bank_reconciler.parsers.statement_importer import StatementImporter
from bank_reconciler.processing.discrepancy_detector import DiscrepancyDetector
from bank_reconciler.processing.history import HistoryRecorder
from bank_reconciler.processing.report_generator import generate_summary
from bank_reconciler.storage.repository import (
    HistoryRepository,
    InMemoryHistoryRepository,
    InMemoryRuleRepository,
    RuleRepository,
)
from bank_reconciler.utils.logging_config import LogContext, get_logger, log_event

logger = get_logger(__name__)


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass
class ReconciliationResult:
    """Everything one reconciliation run hands back to the caller.

    Attributes:
        session_id: Session the run belongs to.
        matches: Accepted matches, referencing the status-updated transactions.
        discrepancies: Anomalies for review.
        transactions: Every input transaction as a status-updated copy, in input order.
        unmatched_transactions: Transactions left unreconciled.
        unmatched_entries: Ledger entries left without a pairing.
        summary: Pre-computed counts and totals.
    """

    session_id: str
    matches: list[ReconciliationMatch] = field(default_factory=list)
    discrepancies: list[Discrepancy] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    unmatched_transactions: list[Transaction] = field(default_factory=list)
    unmatched_entries: list[LedgerEntry] = field(default_factory=list)
    summary: Optional[ReconciliationSummary] = None


class Reconciler:
    """Runs reconciliation sessions for a hosting application.

    Rules come from the injected rule repository and every action is
    appended to the injected history repository, so the matching logic
    stays independent of how either is stored.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        rule_repository: Optional[RuleRepository] = None,
        history_repository: Optional[HistoryRepository] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the reconciler.

        Args:
            config: Application configuration (default Config()).
            rule_repository: Rule source (default in-memory default rules).
            history_repository: History sink (default in-memory).
            clock: Timestamp source, injectable for tests.
        """
        self.config = config or Config()
        self.rule_repository = rule_repository or InMemoryRuleRepository()
        self.clock = clock
        self.recorder = HistoryRecorder(history_repository or InMemoryHistoryRepository(), clock=clock)
        self.importer = StatementImporter(self.config.importing, clock=clock)
        self.coordinator = MatchCoordinator(
            rule_engine=RuleEngine(),
            fuzzy_matcher=FuzzyMatcher(priority_bonus=self.config.matching.rule_priority_bonus),
            fuzzy_threshold=self.config.matching.fuzzy_threshold,
        )
        self.detector = DiscrepancyDetector(self.config.discrepancies)

    def import_statement(
        self,
        content: str,
        filename: str,
        operator: str,
        session_id: str,
    ) -> ImportedStatement:
        """Import statement text and record the import in history."""
        statement = self.importer.import_text(content, filename, operator)
        self._record_import(statement, session_id)
        return statement

    def import_statement_file(self, path: Path, operator: str, session_id: str) -> ImportedStatement:
        """Import a statement file and record the import in history."""
        statement = self.importer.import_file(path, operator)
        self._record_import(statement, session_id)
        return statement

    def _record_import(self, statement: ImportedStatement, session_id: str) -> None:
        self.recorder.log(
            session_id,
            HistoryAction.IMPORTED,
            statement.imported_by,
            statement_id=statement.id,
            filename=statement.filename,
            format=statement.format.value,
            transaction_count=statement.transaction_count,
            skipped_rows=statement.skipped_rows,
            estimated_dates=statement.estimated_date_count,
        )

    def rules(self) -> list[ReconciliationRule]:
        return self.rule_repository.load_rules()

    def reconcile(
        self,
        transactions: Sequence[Transaction],
        entries: Sequence[LedgerEntry],
        session_id: str,
        operator: str,
    ) -> ReconciliationResult:
        """Run one reconciliation session.

        Args:
            transactions: Bank transactions to reconcile (not modified).
            entries: Ledger entries to reconcile against (not modified).
            session_id: Session identifier for history.
            operator: Identity recorded on history entries.

        Returns:
            ReconciliationResult with status-updated transaction copies.
        """
        with LogContext(logger, "reconcile", session_id=session_id):
            rules = self.rules()
            raw_matches = self.coordinator.run(transactions, entries, rules)

            updated: dict[str, Transaction] = {}
            matches: list[ReconciliationMatch] = []
            for match in raw_matches:
                status = (
                    ReconciliationStatus.FLAGGED
                    if match.has_action(ActionType.FLAG)
                    else ReconciliationStatus.RECONCILED
                )
                txn = replace(match.transaction, status=status)
                updated[txn.id] = txn
                matches.append(replace(match, transaction=txn))

            result_transactions = [
                updated.get(t.id) or replace(t, status=ReconciliationStatus.UNRECONCILED)
                for t in transactions
            ]
            matched_entry_ids = {m.ledger_entry.id for m in matches}
            unmatched_transactions = [t for t in result_transactions if t.id not in updated]
            unmatched_entries = [e for e in entries if e.id not in matched_entry_ids]

            discrepancies = self.detector.detect(result_transactions, entries, matches)

            for match in matches:
                self._record_match(match, session_id, operator)
            for txn in unmatched_transactions:
                self.recorder.log(
                    session_id,
                    HistoryAction.UNMATCHED,
                    operator,
                    transaction_id=txn.id,
                    reason="No rule or fuzzy candidate",
                )
            for discrepancy in discrepancies:
                self.recorder.log(
                    session_id,
                    HistoryAction.DISCREPANCY_FOUND,
                    operator,
                    discrepancy_id=discrepancy.id,
                    type=discrepancy.type.value,
                    severity=discrepancy.severity.value,
                    description=discrepancy.description,
                )

            summary = generate_summary(
                session_id, result_transactions, matches, unmatched_entries, discrepancies
            )

        logger.info(
            f"Session {session_id}: {summary.matched_count}/{summary.total_transactions} transactions "
            f"matched ({summary.reconciliation_rate}%), {len(discrepancies)} discrepancies"
        )
        return ReconciliationResult(
            session_id=session_id,
            matches=matches,
            discrepancies=discrepancies,
            transactions=result_transactions,
            unmatched_transactions=unmatched_transactions,
            unmatched_entries=unmatched_entries,
            summary=summary,
        )

    def _record_match(self, match: ReconciliationMatch, session_id: str, operator: str) -> None:
        txn, entry = match.transaction, match.ledger_entry
        self.recorder.log(
            session_id,
            HistoryAction.MATCHED,
            operator,
            transaction_id=txn.id,
            ledger_entry_id=entry.id,
            confidence=match.confidence,
            reason=match.reason,
            source=match.source.value,
        )
        if not match.is_rule_match:
            return

        self.recorder.log(
            session_id,
            HistoryAction.RULE_APPLIED,
            operator,
            rule_id=match.rule_id,
            transaction_id=txn.id,
            ledger_entry_id=entry.id,
            actions=[action.to_dict() for action in match.actions],
        )
        for action in match.actions:
            if action.type == ActionType.ALERT:
                message = action.params.get("message", match.reason)
                log_event(
                    logger,
                    logging.WARNING,
                    "rule.alert",
                    rule_id=match.rule_id,
                    transaction_id=txn.id,
                    ledger_entry_id=entry.id,
                    message=message,
                )

    def unmatch(
        self,
        match: ReconciliationMatch,
        session_id: str,
        operator: str,
        reason: str = "",
    ) -> Transaction:
        """Undo a match by hand.

        Args:
            match: The match being reverted.
            session_id: Session identifier for history.
            operator: Who reverted it.
            reason: Free-text reason.

        Returns:
            An unreconciled copy of the transaction.
        """
        self.recorder.log(
            session_id,
            HistoryAction.UNMATCHED,
            operator,
            transaction_id=match.transaction.id,
            ledger_entry_id=match.ledger_entry.id,
            reason=reason or "Manual unmatch",
        )
        return replace(match.transaction, status=ReconciliationStatus.UNRECONCILED)

    def resolve_discrepancy(self, discrepancy: Discrepancy, session_id: str, operator: str) -> Discrepancy:
        """Mark a discrepancy as reviewed and record it in history."""
        discrepancy.mark_resolved(operator, self.clock())
        self.recorder.log(
            session_id,
            HistoryAction.DISCREPANCY_RESOLVED,
            operator,
            discrepancy_id=discrepancy.id,
            type=discrepancy.type.value,
        )
        return discrepancy

    def history(self, session_id: Optional[str] = None) -> list[HistoryEntry]:
        return self.recorder.entries(session_id)
