"""Rule and history storage."""

from bank_reconciler.storage.repository import (
    HistoryRepository,
    InMemoryHistoryRepository,
    InMemoryRuleRepository,
    JsonlHistoryRepository,
    RuleRepository,
    YamlRuleRepository,
)

__all__ = [
    "RuleRepository",
    "HistoryRepository",
    "InMemoryRuleRepository",
    "YamlRuleRepository",
    "InMemoryHistoryRepository",
    "JsonlHistoryRepository",
]
