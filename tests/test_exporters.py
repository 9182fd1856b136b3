"""Tests for CSV and Excel output."""

import csv
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from openpyxl import load_workbook

from bank_reconciler.config import OutputConfig
from bank_reconciler.models.transaction import LedgerEntry, Transaction, TransactionDirection
from bank_reconciler.output import CSVExporter, ExcelWriter
from bank_reconciler.processing.reconciler import ReconciliationResult, Reconciler
from bank_reconciler.storage.repository import InMemoryRuleRepository


def read_csv(path: Path) -> list[list[str]]:
    """Helper to read a CSV file into rows."""
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


@pytest.fixture
def result() -> ReconciliationResult:
    transactions = [
        Transaction(
            id="t1",
            date=date(2024, 2, 1),
            description="Rent",
            amount=Decimal("5000.00"),
            direction=TransactionDirection.WITHDRAWAL,
            balance=Decimal("1250.00"),
        ),
        Transaction(
            id="t2",
            date=date(2024, 2, 3),
            description="=HYPERLINK(\"http://x\")",
            amount=Decimal("20.00"),
        ),
    ]
    entries = [
        LedgerEntry(id="e1", date=date(2024, 2, 1), description="Rent", amount=Decimal("-5000.00")),
        LedgerEntry(id="e2", date=date(2024, 2, 20), description="Payroll", amount=Decimal("-900.00")),
    ]
    reconciler = Reconciler(rule_repository=InMemoryRuleRepository())
    return reconciler.reconcile(transactions, entries, "s1", "alice")


class TestCSVExporter:
    """Tests for CSVExporter."""

    def test_writes_all_files(self, tmp_path: Path, result: ReconciliationResult) -> None:
        files = CSVExporter().export(tmp_path / "out", result)

        assert [f.name for f in files] == [
            "summary.csv",
            "matches.csv",
            "discrepancies.csv",
            "transactions.csv",
        ]
        assert all(f.exists() for f in files)

    def test_matches_file(self, tmp_path: Path, result: ReconciliationResult) -> None:
        CSVExporter().export(tmp_path, result)
        rows = read_csv(tmp_path / "matches.csv")

        assert rows[0][0] == "Transaction ID"
        assert len(rows) == 2
        assert rows[1][0] == "t1"
        assert rows[1][3] == "-5000.00"
        assert rows[1][4] == "e1"
        assert rows[1][-1] == "reconciled"

    def test_discrepancies_file(self, tmp_path: Path, result: ReconciliationResult) -> None:
        CSVExporter().export(tmp_path, result)
        rows = read_csv(tmp_path / "discrepancies.csv")

        types = sorted(row[1] for row in rows[1:])
        assert types == ["missing_entry", "missing_entry"]

    def test_descriptions_are_sanitized(self, tmp_path: Path, result: ReconciliationResult) -> None:
        CSVExporter().export(tmp_path, result)
        rows = read_csv(tmp_path / "transactions.csv")
        assert rows[2][2].startswith("'=")

    def test_summary_file(self, tmp_path: Path, result: ReconciliationResult) -> None:
        CSVExporter().export(tmp_path, result)
        summary = {row[0]: row[1] for row in read_csv(tmp_path / "summary.csv") if len(row) == 2}

        assert summary["Total Transactions"] == "2"
        assert summary["Closing Bank Balance"] == "1250.00"
        assert summary["Period Start"] == "2024-02-01"
        assert summary["missing_entry"] == "2"

    def test_date_format_setting(self, tmp_path: Path, result: ReconciliationResult) -> None:
        CSVExporter(OutputConfig(date_format="%d/%m/%Y")).export(tmp_path, result)
        rows = read_csv(tmp_path / "transactions.csv")
        assert rows[1][1] == "01/02/2024"


class TestExcelWriter:
    """Tests for ExcelWriter."""

    def test_workbook_sheets(self, tmp_path: Path, result: ReconciliationResult) -> None:
        path = tmp_path / "out" / "reconciliation.xlsx"

        ExcelWriter().write(path, result)

        wb = load_workbook(path)
        assert wb.sheetnames == ["Summary", "Matches", "Discrepancies", "Transactions"]
        assert wb["Matches"].cell(row=2, column=4).value == "e1"
        assert wb["Matches"].cell(row=1, column=1).font.bold
        assert wb["Transactions"].max_row == 3
        assert wb["Discrepancies"].max_row == 3

    def test_currency_symbol_in_money_format(self, tmp_path: Path, result: ReconciliationResult) -> None:
        path = tmp_path / "reconciliation.xlsx"

        ExcelWriter(OutputConfig(currency_symbol="€")).write(path, result)

        cell = load_workbook(path)["Matches"].cell(row=2, column=3)
        assert cell.value == -5000.0
        assert "€" in cell.number_format
