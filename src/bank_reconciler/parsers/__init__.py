"""Importers for bank statements and ledger exports."""

from bank_reconciler.parsers.base import BaseImporter, ParseError
from bank_reconciler.parsers.ledger_parser import LedgerParser
from bank_reconciler.parsers.statement_importer import StatementImporter

__all__ = [
    "BaseImporter",
    "ParseError",
    "StatementImporter",
    "LedgerParser",
]
