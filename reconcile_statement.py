#!/usr/bin/env python3
"""Bank Statement Reconciliation Tool.

This is the main entry point script for the bank reconciler.
It wraps the package CLI for convenient execution.

Usage:
    python reconcile_statement.py --statement statement.csv --ledger ledger.csv

For full documentation and options:
    python reconcile_statement.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from bank_reconciler.cli import main

if __name__ == "__main__":
    sys.exit(main())
