"""Matching of bank transactions to ledger entries."""

from bank_reconciler.matching.coordinator import MatchCoordinator, active_rules
from bank_reconciler.matching.fuzzy_matcher import FuzzyMatcher
from bank_reconciler.matching.rule_engine import RuleEngine
from bank_reconciler.matching.similarity import string_similarity

__all__ = [
    "MatchCoordinator",
    "active_rules",
    "FuzzyMatcher",
    "RuleEngine",
    "string_similarity",
]
