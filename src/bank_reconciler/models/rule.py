"""Reconciliation rule, condition and action models.

Conditions form a closed set of operator classes. Each class carries only the
data its operator needs and validates it at construction, so a rule loaded
from storage either yields well-formed conditions or raises RuleError.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from bank_reconciler.utils.decimal_utils import safe_decimal
from bank_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


class RuleError(Exception):
    """Exception raised for malformed rule, condition or action records."""

    def __init__(self, message: str, rule_id: str | None = None):
        """Initialize RuleError.

        Args:
            message: Error message.
            rule_id: Optional id of the rule being built.
        """
        self.rule_id = rule_id
        super().__init__(message if rule_id is None else f"Rule '{rule_id}': {message}")


class RuleField(Enum):
    """Field a condition inspects on both the transaction and the ledger entry."""

    AMOUNT = "amount"
    DATE = "date"
    DESCRIPTION = "description"
    REFERENCE = "reference"


class ActionType(Enum):
    """What happens when a rule pairs a transaction with a ledger entry."""

    AUTO_MATCH = "autoMatch"
    FLAG = "flag"  # Pair, but leave the transaction flagged for review
    CREATE_ENTRY = "createEntry"  # Suggest a ledger entry (recorded in history only)
    ALERT = "alert"  # Pair and raise a warning


LiteralValue = Union[str, Decimal]


def _parse_field(raw: object) -> RuleField:
    try:
        return RuleField(str(raw))
    except ValueError:
        raise RuleError(f"Unknown condition field: {raw!r}") from None


def _normalize_literal(rule_field: RuleField, value: object) -> LiteralValue:
    """Coerce a literal to the type its field compares against."""
    if rule_field == RuleField.AMOUNT:
        if isinstance(value, bool):
            raise RuleError(f"Amount literal must be numeric, got {value!r}")
        amount = safe_decimal(value, default=Decimal("NaN"))
        if amount.is_nan():
            raise RuleError(f"Amount literal must be numeric, got {value!r}")
        return amount
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    return str(value)


def _literal_to_record(value: LiteralValue) -> str | int | float:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


@dataclass(frozen=True)
class Condition:
    """Base class of all rule conditions."""

    operator: ClassVar[str] = ""

    def to_dict(self) -> dict[str, object]:
        raise NotImplementedError

    @staticmethod
    def from_dict(data: dict[str, object]) -> "Condition":
        """Build the condition class named by ``data["operator"]``.

        Args:
            data: Mapping with operator, field and value keys.

        Returns:
            The matching Condition subclass instance.

        Raises:
            RuleError: If the operator is unknown or the record is malformed.
        """
        if not isinstance(data, dict):
            raise RuleError(f"Condition must be a mapping, got {type(data).__name__}")
        operator = str(data.get("operator", ""))
        condition_cls = CONDITION_TYPES.get(operator)
        if condition_cls is None:
            raise RuleError(f"Unknown condition operator: {operator!r}")
        if "value" not in data:
            raise RuleError(f"Condition '{operator}' is missing a value")
        value = data["value"]

        if condition_cls is WithinDaysCondition:
            return WithinDaysCondition(days=_parse_threshold_days(value))
        if condition_cls is WithinAmountCondition:
            return WithinAmountCondition(tolerance=safe_decimal(value, default=Decimal("NaN")))

        rule_field = _parse_field(data.get("field", ""))
        return condition_cls(field=rule_field, value=value)  # type: ignore[call-arg]


def _parse_threshold_days(value: object) -> int:
    if isinstance(value, bool):
        raise RuleError(f"Day threshold must be a whole number, got {value!r}")
    days = safe_decimal(value, default=Decimal("NaN"))
    if days.is_nan() or days != days.to_integral_value():
        raise RuleError(f"Day threshold must be a whole number, got {value!r}")
    return int(days)


_ENABLED_STRINGS = {"true": True, "yes": True, "on": True, "false": False, "no": False, "off": False}


def _parse_enabled(value: object, rule_id: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _ENABLED_STRINGS:
        return _ENABLED_STRINGS[value.strip().lower()]
    raise RuleError(f"'enabled' must be true or false, got {value!r}", rule_id)


@dataclass(frozen=True)
class _FieldCondition(Condition):
    """Condition comparing one field on both sides against a literal."""

    field: RuleField
    value: LiteralValue

    def __post_init__(self) -> None:
        rule_field = self.field if isinstance(self.field, RuleField) else _parse_field(self.field)
        object.__setattr__(self, "field", rule_field)
        object.__setattr__(self, "value", _normalize_literal(rule_field, self.value))

    def to_dict(self) -> dict[str, object]:
        return {
            "field": self.field.value,
            "operator": self.operator,
            "value": _literal_to_record(self.value),
        }


@dataclass(frozen=True)
class EqualsCondition(_FieldCondition):
    """Both sides' field equals the literal exactly."""

    operator: ClassVar[str] = "equals"


@dataclass(frozen=True)
class _TextCondition(_FieldCondition):
    """Case-insensitive text test; the literal is always a string."""

    def __post_init__(self) -> None:
        rule_field = self.field if isinstance(self.field, RuleField) else _parse_field(self.field)
        object.__setattr__(self, "field", rule_field)
        value = self.value
        if isinstance(value, date):
            value = value.isoformat()
        object.__setattr__(self, "value", "" if value is None else str(value))


@dataclass(frozen=True)
class ContainsCondition(_TextCondition):
    operator: ClassVar[str] = "contains"


@dataclass(frozen=True)
class StartsWithCondition(_TextCondition):
    operator: ClassVar[str] = "startsWith"


@dataclass(frozen=True)
class EndsWithCondition(_TextCondition):
    operator: ClassVar[str] = "endsWith"


@dataclass(frozen=True)
class WithinDaysCondition(Condition):
    """Transaction and entry dates are at most ``days`` calendar days apart."""

    days: int
    operator: ClassVar[str] = "withinDays"

    def __post_init__(self) -> None:
        if isinstance(self.days, bool) or not isinstance(self.days, int):
            raise RuleError(f"Day threshold must be a whole number, got {self.days!r}")
        if self.days < 0:
            raise RuleError(f"Day threshold cannot be negative: {self.days}")

    def to_dict(self) -> dict[str, object]:
        return {"field": RuleField.DATE.value, "operator": self.operator, "value": self.days}


@dataclass(frozen=True)
class WithinAmountCondition(Condition):
    """Transaction and entry amounts differ by at most ``tolerance``."""

    tolerance: Decimal
    operator: ClassVar[str] = "withinAmount"

    def __post_init__(self) -> None:
        tolerance = safe_decimal(self.tolerance, default=Decimal("NaN"))
        if tolerance.is_nan():
            raise RuleError(f"Amount tolerance must be numeric, got {self.tolerance!r}")
        if tolerance < 0:
            raise RuleError(f"Amount tolerance cannot be negative: {tolerance}")
        object.__setattr__(self, "tolerance", tolerance)

    def to_dict(self) -> dict[str, object]:
        return {
            "field": RuleField.AMOUNT.value,
            "operator": self.operator,
            "value": _literal_to_record(self.tolerance),
        }


CONDITION_TYPES: dict[str, type[Condition]] = {
    cls.operator: cls
    for cls in (
        EqualsCondition,
        ContainsCondition,
        StartsWithCondition,
        EndsWithCondition,
        WithinDaysCondition,
        WithinAmountCondition,
    )
}


@dataclass(frozen=True)
class RuleAction:
    """Action attached to a rule.

    Attributes:
        type: Action kind.
        params: Optional free-form parameters (e.g. an alert message).
    """

    type: ActionType
    params: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "RuleAction":
        if not isinstance(data, dict):
            raise RuleError(f"Action must be a mapping, got {type(data).__name__}")
        try:
            action_type = ActionType(str(data.get("type", "")))
        except ValueError:
            raise RuleError(f"Unknown action type: {data.get('type')!r}") from None
        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise RuleError(f"Action params must be a mapping, got {type(params).__name__}")
        return cls(type=action_type, params=dict(params))

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"type": self.type.value}
        if self.params:
            data["params"] = dict(self.params)
        return data


@dataclass
class ReconciliationRule:
    """User-configured rule that pairs transactions with ledger entries.

    All conditions must hold for a pair to match (logical AND).

    Attributes:
        id: Unique identifier for this rule.
        name: Display name, used as the match reason.
        conditions: Ordered conditions, evaluated with short-circuit.
        actions: Actions applied when the rule pairs two records.
        priority: Higher priorities are evaluated first.
        enabled: Disabled rules are ignored.
    """

    id: str
    name: str
    conditions: list[Condition] = field(default_factory=list)
    actions: list[RuleAction] = field(default_factory=lambda: [RuleAction(ActionType.AUTO_MATCH)])
    priority: int = 0
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.conditions:
            logger.warning(f"Rule '{self.id}' has no conditions and will match any pair")

    def has_action(self, action_type: ActionType) -> bool:
        return any(action.type == action_type for action in self.actions)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReconciliationRule":
        """Create a rule from a stored record (e.g. YAML).

        Args:
            data: Mapping with id, name, priority, enabled, conditions, actions.

        Returns:
            A new ReconciliationRule.

        Raises:
            RuleError: If the record or any condition/action is malformed.
        """
        if not isinstance(data, dict):
            raise RuleError(f"Rule record must be a mapping, got {type(data).__name__}")
        if "id" not in data:
            raise RuleError("Rule record is missing an id")
        rule_id = str(data["id"])

        raw_conditions = data.get("conditions") or []
        raw_actions = data.get("actions")
        if not isinstance(raw_conditions, list):
            raise RuleError("'conditions' must be a list", rule_id)
        if raw_actions is not None and not isinstance(raw_actions, list):
            raise RuleError("'actions' must be a list", rule_id)

        try:
            conditions = [Condition.from_dict(c) for c in raw_conditions]
            if raw_actions is None:
                actions = [RuleAction(ActionType.AUTO_MATCH)]
            else:
                actions = [RuleAction.from_dict(a) for a in raw_actions]
        except RuleError as e:
            raise RuleError(str(e), rule_id) from e

        try:
            priority = int(data.get("priority", 0))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise RuleError(f"Priority must be an integer, got {data.get('priority')!r}", rule_id) from None

        return cls(
            id=rule_id,
            name=str(data.get("name", rule_id)),
            conditions=conditions,
            actions=actions,
            priority=priority,
            enabled=_parse_enabled(data.get("enabled", True), rule_id),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "enabled": self.enabled,
            "priority": self.priority,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
        }

    def __repr__(self) -> str:
        return f"ReconciliationRule(id={self.id!r}, name={self.name!r}, priority={self.priority})"


def default_rules() -> list[ReconciliationRule]:
    """Built-in rules used when no rules have been saved yet."""
    return [
        ReconciliationRule(
            id="rule-exact-match",
            name="Exact Amount & Date Match",
            priority=100,
            conditions=[
                WithinAmountCondition(tolerance=Decimal("0.01")),
                WithinDaysCondition(days=0),
            ],
        ),
        ReconciliationRule(
            id="rule-amount-tolerance",
            name="Amount Within Tolerance",
            priority=80,
            conditions=[
                WithinAmountCondition(tolerance=Decimal("10")),
                WithinDaysCondition(days=3),
            ],
        ),
    ]
