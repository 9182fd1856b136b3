"""Discrepancy detection, history recording and reconciliation sessions."""

from bank_reconciler.processing.discrepancy_detector import DiscrepancyDetector
from bank_reconciler.processing.history import HistoryRecorder
from bank_reconciler.processing.reconciler import Reconciler, ReconciliationResult, new_session_id
from bank_reconciler.processing.report_generator import generate_summary

__all__ = [
    "DiscrepancyDetector",
    "HistoryRecorder",
    "Reconciler",
    "ReconciliationResult",
    "new_session_id",
    "generate_summary",
]
