"""CSV exporter for reconciliation session results."""

import csv
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from bank_reconciler.config import OutputConfig
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.processing.reconciler import ReconciliationResult
from bank_reconciler.utils.decimal_utils import format_currency
from bank_reconciler.utils.logging_config import get_logger
from bank_reconciler.utils.sanitize import sanitize_cell

logger = get_logger(__name__)


class CSVExporter:
    """Exports a reconciliation session to CSV files.

    Creates in the output directory:
    - summary.csv
    - matches.csv
    - discrepancies.csv
    - transactions.csv (status-updated)
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize CSV exporter.

        Args:
            output_config: Output formatting settings.
        """
        self.output_config = output_config or OutputConfig()

    def export(self, output_dir: Path, result: ReconciliationResult) -> list[Path]:
        """Export all session data to CSV files.

        Args:
            output_dir: Directory to write into (created if missing).
            result: Reconciliation session result.

        Returns:
            List of paths to created CSV files.
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        created_files = [
            self._export_summary(output_dir, result.summary or ReconciliationSummary(result.session_id)),
            self._export_matches(output_dir, result),
            self._export_discrepancies(output_dir, result),
            self._export_transactions(output_dir, result),
        ]

        logger.info(f"Exported {len(created_files)} CSV files to {output_dir}")
        return created_files

    def _money(self, amount: Optional[Decimal]) -> str:
        return format_currency(amount, self.output_config.decimal_places)

    def _date(self, value: Optional[date]) -> str:
        if value is None:
            return ""
        return value.strftime(self.output_config.date_format)

    def _format_value(self, value: object) -> str:
        if value is None:
            return ""
        if isinstance(value, Decimal):
            return self._money(value)
        if isinstance(value, date):
            return self._date(value)
        return sanitize_cell(value)

    def _export_summary(self, output_dir: Path, summary: ReconciliationSummary) -> Path:
        output_path = output_dir / "summary.csv"

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["Metric", "Value"])
            for label, value in summary.as_rows():
                writer.writerow([label, self._format_value(value)])

            writer.writerow([])
            writer.writerow(["Discrepancy Type", "Count"])
            for type_name, count in sorted(summary.discrepancies_by_type.items()):
                writer.writerow([type_name, count])

            writer.writerow([])
            writer.writerow(["Severity", "Count"])
            for severity, count in sorted(summary.discrepancies_by_severity.items()):
                writer.writerow([severity, count])

        return output_path

    def _export_matches(self, output_dir: Path, result: ReconciliationResult) -> Path:
        output_path = output_dir / "matches.csv"

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow([
                "Transaction ID", "Transaction Date", "Transaction Description", "Transaction Amount",
                "Ledger Entry ID", "Ledger Date", "Ledger Description", "Ledger Amount",
                "Confidence", "Source", "Rule ID", "Reason", "Status",
            ])
            for match in result.matches:
                txn, entry = match.transaction, match.ledger_entry
                writer.writerow([
                    sanitize_cell(txn.id),
                    self._date(txn.date),
                    sanitize_cell(txn.description),
                    self._money(txn.signed_amount),
                    sanitize_cell(entry.id),
                    self._date(entry.date),
                    sanitize_cell(entry.description),
                    self._money(entry.amount),
                    match.confidence,
                    match.source.value,
                    sanitize_cell(match.rule_id),
                    sanitize_cell(match.reason),
                    txn.status.value,
                ])

        return output_path

    def _export_discrepancies(self, output_dir: Path, result: ReconciliationResult) -> Path:
        output_path = output_dir / "discrepancies.csv"

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow([
                "ID", "Type", "Severity", "Description", "Suggested Action",
                "Transaction ID", "Ledger Entry ID", "Related Transactions", "Resolved",
            ])
            for d in result.discrepancies:
                writer.writerow([
                    d.id,
                    d.type.value,
                    d.severity.value,
                    sanitize_cell(d.description),
                    sanitize_cell(d.suggested_action),
                    sanitize_cell(d.transaction.id if d.transaction else None),
                    sanitize_cell(d.ledger_entry.id if d.ledger_entry else None),
                    sanitize_cell(";".join(d.related_transaction_ids)),
                    "yes" if d.resolved else "no",
                ])

        return output_path

    def _export_transactions(self, output_dir: Path, result: ReconciliationResult) -> Path:
        output_path = output_dir / "transactions.csv"

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow([
                "ID", "Date", "Description", "Direction", "Amount", "Balance",
                "Reference", "Status", "Date Estimated", "Source File", "Source Line",
            ])
            for txn in result.transactions:
                writer.writerow([
                    sanitize_cell(txn.id),
                    self._date(txn.date),
                    sanitize_cell(txn.description),
                    txn.direction.value,
                    self._money(txn.amount),
                    self._money(txn.balance),
                    sanitize_cell(txn.reference),
                    txn.status.value,
                    "yes" if txn.date_estimated else "no",
                    sanitize_cell(txn.source_file),
                    txn.source_line if txn.source_line is not None else "",
                ])

        return output_path
