"""Append-only audit history of reconciliation actions."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from bank_reconciler.models.history import HistoryAction, HistoryEntry
from bank_reconciler.storage.repository import HistoryRepository, InMemoryHistoryRepository
from bank_reconciler.utils.logging_config import get_logger, log_event

logger = get_logger(__name__)


class HistoryRecorder:
    """Records history entries per reconciliation session.

    Entries are only ever appended; corrections are new entries.
    """

    def __init__(
        self,
        repository: Optional[HistoryRepository] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize history recorder.

        Args:
            repository: Where entries are stored (default in-memory).
            clock: Timestamp source for entries created via ``log()``.
        """
        self.repository = repository or InMemoryHistoryRepository()
        self.clock = clock

    def record(self, entry: HistoryEntry) -> HistoryEntry:
        """Append an entry."""
        self.repository.append_history(entry)
        log_event(
            logger,
            logging.DEBUG,
            "history.record",
            session_id=entry.session_id,
            action=entry.action.value,
            performed_by=entry.performed_by,
        )
        return entry

    def log(
        self,
        session_id: str,
        action: HistoryAction,
        performed_by: str,
        **details: object,
    ) -> HistoryEntry:
        """Create and append an entry stamped with the recorder's clock."""
        return self.record(
            HistoryEntry(
                session_id=session_id,
                action=action,
                performed_by=performed_by,
                performed_at=self.clock(),
                details=dict(details),
            )
        )

    def entries(self, session_id: Optional[str] = None) -> list[HistoryEntry]:
        """Return one session's entries, or every entry when no session is given."""
        return self.repository.query_history(session_id)
