"""Bank statement reconciliation against internal ledger entries."""

__version__ = "1.0.0"
