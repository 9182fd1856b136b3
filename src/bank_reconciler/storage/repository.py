"""Storage interfaces for reconciliation rules and audit history.

The reconciler depends only on the abstract repositories; the concrete
classes here cover in-memory use (tests, embedding applications) and
simple file persistence (YAML rules, JSON-lines history).
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import yaml

from bank_reconciler.models.history import HistoryEntry
from bank_reconciler.models.rule import ReconciliationRule, RuleError, default_rules
from bank_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


class RuleRepository(ABC):
    """Where reconciliation rules are kept."""

    @abstractmethod
    def load_rules(self) -> list[ReconciliationRule]:
        """Return every stored rule."""
        ...

    @abstractmethod
    def save_rules(self, rules: Sequence[ReconciliationRule]) -> None:
        """Replace the stored rules."""
        ...


class HistoryRepository(ABC):
    """Append-only store of audit history entries."""

    @abstractmethod
    def append_history(self, entry: HistoryEntry) -> None:
        """Store one entry."""
        ...

    @abstractmethod
    def query_history(self, session_id: Optional[str] = None) -> list[HistoryEntry]:
        """Return one session's entries, or all entries, in insertion order."""
        ...


class InMemoryRuleRepository(RuleRepository):
    """Rule repository held in memory."""

    def __init__(self, rules: Optional[Sequence[ReconciliationRule]] = None):
        self._rules = list(rules) if rules is not None else default_rules()

    def load_rules(self) -> list[ReconciliationRule]:
        return list(self._rules)

    def save_rules(self, rules: Sequence[ReconciliationRule]) -> None:
        self._rules = list(rules)


class YamlRuleRepository(RuleRepository):
    """Rule repository backed by a YAML file.

    The file holds a ``rules`` list of rule records. When the file does not
    exist yet the built-in default rules are returned.
    """

    def __init__(self, path: Path):
        """Initialize YAML rule repository.

        Args:
            path: Path to the rules file.
        """
        self.path = path

    def load_rules(self) -> list[ReconciliationRule]:
        """Load rules from the YAML file.

        Returns:
            Stored rules, or the default rules if the file is absent.

        Raises:
            RuleError: If the file or any rule record is malformed.
        """
        if not self.path.exists():
            logger.info(f"Rules file not found: {self.path}, using default rules")
            return default_rules()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleError(f"Invalid YAML in {self.path}: {e}") from e

        if not data:
            return []
        if isinstance(data, dict):
            data = data.get("rules") or []
        if not isinstance(data, list):
            raise RuleError(f"'rules' must be a list, got {type(data).__name__}")

        rules = []
        for record in data:
            if not isinstance(record, dict):
                raise RuleError(f"Rule record must be a mapping, got {type(record).__name__}")
            rules.append(ReconciliationRule.from_dict(record))

        logger.info(f"Loaded {len(rules)} rules from {self.path}")
        return rules

    def save_rules(self, rules: Sequence[ReconciliationRule]) -> None:
        """Write rules to the YAML file, creating parent directories."""
        data = {"rules": [rule.to_dict() for rule in rules]}

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved {len(rules)} rules to {self.path}")


class InMemoryHistoryRepository(HistoryRepository):
    """History repository held in memory."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def append_history(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def query_history(self, session_id: Optional[str] = None) -> list[HistoryEntry]:
        if session_id is None:
            return list(self._entries)
        return [e for e in self._entries if e.session_id == session_id]


class JsonlHistoryRepository(HistoryRepository):
    """History repository appending one JSON object per line to a file."""

    def __init__(self, path: Path):
        """Initialize JSON-lines history repository.

        Args:
            path: Path to the history file (created on first append).
        """
        self.path = path

    def append_history(self, entry: HistoryEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")

    def query_history(self, session_id: Optional[str] = None) -> list[HistoryEntry]:
        """Read entries back from the file.

        Raises:
            ValueError: If a line is not a valid history record.
        """
        if not self.path.exists():
            return []

        entries: list[HistoryEntry] = []
        with open(self.path, encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    entry = HistoryEntry.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    raise ValueError(f"Invalid history record at {self.path}:{line_num}: {e}") from e
                if session_id is None or entry.session_id == session_id:
                    entries.append(entry)
        return entries
