"""Audit history entry model."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class HistoryAction(Enum):
    """Kind of reconciliation action being audited."""

    MATCHED = "matched"
    UNMATCHED = "unmatched"
    IMPORTED = "imported"
    RULE_APPLIED = "rule_applied"
    DISCREPANCY_FOUND = "discrepancy_found"
    DISCREPANCY_RESOLVED = "discrepancy_resolved"


@dataclass(frozen=True)
class HistoryEntry:
    """Append-only audit record of one reconciliation action.

    Attributes:
        session_id: Reconciliation session the action belongs to.
        action: Kind of action.
        performed_by: Operator identity.
        performed_at: When the action happened.
        details: Structured payload (ids, confidence, reasons, ...).
        id: Unique identifier for this entry.
    """

    session_id: str
    action: HistoryAction
    performed_by: str
    performed_at: datetime = field(default_factory=datetime.now)
    details: dict[str, object] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "action": self.action.value,
            "performed_by": self.performed_by,
            "performed_at": self.performed_at.isoformat(),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "HistoryEntry":
        """Create a HistoryEntry from a stored mapping.

        Raises:
            ValueError: If the action or timestamp is invalid.
            KeyError: If a required key is missing.
        """
        details = data.get("details") or {}
        return cls(
            id=str(data["id"]),
            session_id=str(data["session_id"]),
            action=HistoryAction(str(data["action"])),
            performed_by=str(data.get("performed_by", "")),
            performed_at=datetime.fromisoformat(str(data["performed_at"])),
            details=dict(details) if isinstance(details, dict) else {},
        )
