"""Tests for history entries and the history recorder."""

from datetime import datetime

import pytest

from bank_reconciler.models.history import HistoryAction, HistoryEntry
from bank_reconciler.processing.history import HistoryRecorder
from bank_reconciler.storage.repository import InMemoryHistoryRepository

FIXED_TIME = datetime(2024, 3, 1, 12, 0, 0)


class TestHistoryEntry:
    """Tests for HistoryEntry serialization."""

    def test_to_dict(self) -> None:
        entry = HistoryEntry(
            session_id="s1",
            action=HistoryAction.RULE_APPLIED,
            performed_by="alice",
            performed_at=FIXED_TIME,
            details={"rule_id": "r1"},
            id="h1",
        )
        assert entry.to_dict() == {
            "id": "h1",
            "session_id": "s1",
            "action": "rule_applied",
            "performed_by": "alice",
            "performed_at": "2024-03-01T12:00:00",
            "details": {"rule_id": "r1"},
        }

    def test_from_dict_rebuilds_entry(self) -> None:
        entry = HistoryEntry(session_id="s1", action=HistoryAction.IMPORTED, performed_by="bob")
        assert HistoryEntry.from_dict(entry.to_dict()) == entry

    def test_from_dict_unknown_action(self) -> None:
        with pytest.raises(ValueError):
            HistoryEntry.from_dict(
                {"id": "h1", "session_id": "s1", "action": "deleted", "performed_at": "2024-03-01T12:00:00"}
            )

    def test_entries_are_immutable(self) -> None:
        entry = HistoryEntry(session_id="s1", action=HistoryAction.MATCHED, performed_by="alice")
        with pytest.raises(AttributeError):
            entry.performed_by = "mallory"  # type: ignore[misc]


class TestHistoryRecorder:
    """Tests for HistoryRecorder."""

    def test_log_uses_clock(self) -> None:
        recorder = HistoryRecorder(clock=lambda: FIXED_TIME)

        entry = recorder.log("s1", HistoryAction.MATCHED, "alice", transaction_id="t1")

        assert entry.performed_at == FIXED_TIME
        assert entry.details == {"transaction_id": "t1"}
        assert recorder.entries("s1") == [entry]

    def test_entries_are_appended_in_order(self) -> None:
        repository = InMemoryHistoryRepository()
        recorder = HistoryRecorder(repository)

        recorder.log("s1", HistoryAction.IMPORTED, "alice")
        recorder.log("s2", HistoryAction.IMPORTED, "bob")
        recorder.log("s1", HistoryAction.MATCHED, "alice")

        assert [e.action for e in recorder.entries("s1")] == [
            HistoryAction.IMPORTED,
            HistoryAction.MATCHED,
        ]
        assert len(recorder.entries()) == 3
        assert repository.query_history() == recorder.entries()
