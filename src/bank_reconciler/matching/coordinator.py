"""Two-pass matching: priority-ordered rules, then fuzzy fallback."""

import logging
from collections.abc import Sequence
from typing import Optional

from bank_reconciler.matching.fuzzy_matcher import FuzzyMatcher
from bank_reconciler.matching.rule_engine import RuleEngine
from bank_reconciler.models.match import FUZZY_MATCH_REASON, MatchSource, ReconciliationMatch
from bank_reconciler.models.rule import ReconciliationRule
from bank_reconciler.models.transaction import LedgerEntry, Transaction
from bank_reconciler.utils.logging_config import get_logger, log_event

logger = get_logger(__name__)

DEFAULT_FUZZY_THRESHOLD = 70


def active_rules(rules: Sequence[ReconciliationRule]) -> list[ReconciliationRule]:
    """Enabled rules ordered by descending priority, keeping input order for ties."""
    return sorted((r for r in rules if r.enabled), key=lambda r: r.priority, reverse=True)


class MatchCoordinator:
    """Pairs bank transactions with ledger entries one-to-one.

    Pass 1 tries each enabled rule in priority order against every
    unmatched transaction and every unmatched entry; the first entry the
    rule accepts wins. Pass 2 scores each still-unmatched transaction
    against every still-unmatched entry and accepts the best candidate when
    it reaches the fuzzy threshold, the first candidate winning ties.

    Neither input collection is modified; each run keeps its own matched-id
    sets.
    """

    def __init__(
        self,
        rule_engine: Optional[RuleEngine] = None,
        fuzzy_matcher: Optional[FuzzyMatcher] = None,
        fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD,
    ):
        """Initialize the coordinator.

        Args:
            rule_engine: Rule evaluator (default RuleEngine()).
            fuzzy_matcher: Confidence scorer (default FuzzyMatcher()).
            fuzzy_threshold: Minimum fuzzy confidence accepted as a match.
        """
        self.rule_engine = rule_engine or RuleEngine()
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.fuzzy_threshold = fuzzy_threshold

    def run(
        self,
        transactions: Sequence[Transaction],
        entries: Sequence[LedgerEntry],
        rules: Sequence[ReconciliationRule],
    ) -> list[ReconciliationMatch]:
        """Match transactions against ledger entries.

        Args:
            transactions: Bank transactions, in significant order.
            entries: Ledger entries, in significant order.
            rules: Rules in any order; disabled ones are ignored.

        Returns:
            Accepted matches, rule matches first in discovery order.
        """
        matched_txn_ids: set[str] = set()
        matched_entry_ids: set[str] = set()

        matches = self._rule_pass(transactions, entries, active_rules(rules), matched_txn_ids, matched_entry_ids)
        rule_count = len(matches)
        matches.extend(self._fuzzy_pass(transactions, entries, matched_txn_ids, matched_entry_ids))

        log_event(
            logger,
            logging.INFO,
            "match.run.complete",
            transactions=len(transactions),
            entries=len(entries),
            rule_matches=rule_count,
            fuzzy_matches=len(matches) - rule_count,
            unmatched=len(transactions) - len(matched_txn_ids),
        )
        return matches

    def _rule_pass(
        self,
        transactions: Sequence[Transaction],
        entries: Sequence[LedgerEntry],
        rules: list[ReconciliationRule],
        matched_txn_ids: set[str],
        matched_entry_ids: set[str],
    ) -> list[ReconciliationMatch]:
        matches: list[ReconciliationMatch] = []

        for rule in rules:
            for txn in transactions:
                if txn.id in matched_txn_ids:
                    continue

                for entry in entries:
                    if entry.id in matched_entry_ids:
                        continue

                    if self.rule_engine.matches(rule, txn, entry):
                        match = ReconciliationMatch(
                            transaction=txn,
                            ledger_entry=entry,
                            confidence=self.fuzzy_matcher.rule_confidence(txn, entry, rule),
                            reason=f"Rule: {rule.name}",
                            source=MatchSource.RULE,
                            rule_id=rule.id,
                            actions=tuple(rule.actions),
                        )
                        matches.append(match)
                        matched_txn_ids.add(txn.id)
                        matched_entry_ids.add(entry.id)
                        log_event(
                            logger,
                            logging.DEBUG,
                            "match.rule",
                            rule_id=rule.id,
                            transaction_id=txn.id,
                            entry_id=entry.id,
                            confidence=match.confidence,
                        )
                        break

        return matches

    def _fuzzy_pass(
        self,
        transactions: Sequence[Transaction],
        entries: Sequence[LedgerEntry],
        matched_txn_ids: set[str],
        matched_entry_ids: set[str],
    ) -> list[ReconciliationMatch]:
        matches: list[ReconciliationMatch] = []

        for txn in transactions:
            if txn.id in matched_txn_ids:
                continue

            best_entry: Optional[LedgerEntry] = None
            best_confidence = -1

            for entry in entries:
                if entry.id in matched_entry_ids:
                    continue
                confidence = self.fuzzy_matcher.score(txn, entry)
                if confidence > best_confidence:
                    best_confidence = confidence
                    best_entry = entry

            if best_entry is None or best_confidence < self.fuzzy_threshold:
                log_event(
                    logger,
                    logging.DEBUG,
                    "match.fuzzy.rejected",
                    transaction_id=txn.id,
                    best_confidence=max(best_confidence, 0),
                )
                continue

            matches.append(
                ReconciliationMatch(
                    transaction=txn,
                    ledger_entry=best_entry,
                    confidence=best_confidence,
                    reason=FUZZY_MATCH_REASON,
                    source=MatchSource.FUZZY,
                )
            )
            matched_txn_ids.add(txn.id)
            matched_entry_ids.add(best_entry.id)
            log_event(
                logger,
                logging.DEBUG,
                "match.fuzzy",
                transaction_id=txn.id,
                entry_id=best_entry.id,
                confidence=best_confidence,
            )

        return matches
