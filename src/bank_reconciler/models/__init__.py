"""Data models for bank transactions, ledger entries, rules and reconciliation results."""

from bank_reconciler.models.discrepancy import Discrepancy, DiscrepancyType, Severity
from bank_reconciler.models.history import HistoryAction, HistoryEntry
from bank_reconciler.models.match import MatchSource, ReconciliationMatch
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.models.rule import (
    ActionType,
    Condition,
    ContainsCondition,
    EndsWithCondition,
    EqualsCondition,
    ReconciliationRule,
    RuleAction,
    RuleError,
    RuleField,
    StartsWithCondition,
    WithinAmountCondition,
    WithinDaysCondition,
    default_rules,
)
from bank_reconciler.models.transaction import (
    EntryDirection,
    ImportedStatement,
    LedgerEntry,
    ReconciliationStatus,
    StatementFormat,
    Transaction,
    TransactionDirection,
)

__all__ = [
    "Transaction",
    "TransactionDirection",
    "ReconciliationStatus",
    "LedgerEntry",
    "EntryDirection",
    "ImportedStatement",
    "StatementFormat",
    "ReconciliationRule",
    "Condition",
    "EqualsCondition",
    "ContainsCondition",
    "StartsWithCondition",
    "EndsWithCondition",
    "WithinDaysCondition",
    "WithinAmountCondition",
    "RuleAction",
    "ActionType",
    "RuleField",
    "RuleError",
    "default_rules",
    "ReconciliationMatch",
    "MatchSource",
    "Discrepancy",
    "DiscrepancyType",
    "Severity",
    "HistoryEntry",
    "HistoryAction",
    "ReconciliationSummary",
]
