"""Excel workbook writer for reconciliation session results."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from bank_reconciler.config import OutputConfig
from bank_reconciler.models.discrepancy import Severity
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.processing.reconciler import ReconciliationResult
from bank_reconciler.utils.logging_config import get_logger
from bank_reconciler.utils.sanitize import sanitize_cell

logger = get_logger(__name__)


class ExcelWriter:
    """Writes a reconciliation session to a multi-sheet Excel workbook.

    Generates sheets:
    - Summary
    - Matches
    - Discrepancies (most severe first)
    - Transactions (status-updated)
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize Excel writer.

        Args:
            output_config: Output formatting settings.
        """
        self.output_config = output_config or OutputConfig()

        # Style definitions
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        self.bold = Font(bold=True)
        self.centered = Alignment(horizontal="center")
        self.severity_fills = {
            Severity.CRITICAL: PatternFill(start_color="C00000", end_color="C00000", fill_type="solid"),
            Severity.HIGH: PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"),
            Severity.MEDIUM: PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
        }

    def write(self, output_path: Path, result: ReconciliationResult) -> None:
        """Write all session data to an Excel workbook.

        Args:
            output_path: Path for output file.
            result: Reconciliation session result.
        """
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, result.summary or ReconciliationSummary(result.session_id))
        self._create_matches(wb, result)
        self._create_discrepancies(wb, result)
        self._create_transactions(wb, result)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")

    def _write_header(self, ws: Worksheet, headers: list[str], widths: list[int]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.centered
        for i, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(i)].width = width
        ws.freeze_panes = "A2"

    def _money_cell(self, ws: Worksheet, row: int, column: int, amount: Optional[Decimal]) -> None:
        cell = ws.cell(row=row, column=column, value=float(amount) if amount is not None else None)
        cell.number_format = self._money_format()

    def _create_summary(self, wb: Workbook, summary: ReconciliationSummary) -> None:
        ws = wb.create_sheet("Summary")

        title = ws.cell(row=1, column=1, value="Reconciliation Summary")
        title.font = Font(bold=True, size=14)

        money_labels = {
            "Total Deposits", "Total Withdrawals", "Net Movement", "Closing Bank Balance",
        }
        row = 3
        for label, value in summary.as_rows():
            ws.cell(row=row, column=1, value=label).font = self.bold
            if label in money_labels:
                self._money_cell(ws, row, 2, value)  # type: ignore[arg-type]
            elif isinstance(value, Decimal):
                ws.cell(row=row, column=2, value=float(value))
            elif isinstance(value, str):
                ws.cell(row=row, column=2, value=sanitize_cell(value))
            else:
                ws.cell(row=row, column=2, value=value)
            row += 1

        row += 1
        ws.cell(row=row, column=1, value="Discrepancies by Type").font = self.bold
        row += 1
        for type_name, count in sorted(summary.discrepancies_by_type.items()):
            ws.cell(row=row, column=1, value=type_name)
            ws.cell(row=row, column=2, value=count)
            row += 1

        row += 1
        ws.cell(row=row, column=1, value="Discrepancies by Severity").font = self.bold
        row += 1
        for severity, count in sorted(summary.discrepancies_by_severity.items()):
            ws.cell(row=row, column=1, value=severity)
            ws.cell(row=row, column=2, value=count)
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matches(self, wb: Workbook, result: ReconciliationResult) -> None:
        ws = wb.create_sheet("Matches")
        self._write_header(
            ws,
            ["Txn Date", "Txn Description", "Txn Amount", "Ledger ID", "Ledger Date",
             "Ledger Description", "Ledger Amount", "Confidence", "Source", "Reason", "Status"],
            [12, 40, 14, 16, 12, 40, 14, 12, 10, 40, 12],
        )

        for row, match in enumerate(result.matches, 2):
            txn, entry = match.transaction, match.ledger_entry
            ws.cell(row=row, column=1, value=txn.date)
            ws.cell(row=row, column=2, value=sanitize_cell(txn.description))
            self._money_cell(ws, row, 3, txn.signed_amount)
            ws.cell(row=row, column=4, value=sanitize_cell(entry.id))
            ws.cell(row=row, column=5, value=entry.date)
            ws.cell(row=row, column=6, value=sanitize_cell(entry.description))
            self._money_cell(ws, row, 7, entry.amount)
            ws.cell(row=row, column=8, value=match.confidence)
            ws.cell(row=row, column=9, value=match.source.value)
            ws.cell(row=row, column=10, value=sanitize_cell(match.reason))
            ws.cell(row=row, column=11, value=txn.status.value)

    def _create_discrepancies(self, wb: Workbook, result: ReconciliationResult) -> None:
        ws = wb.create_sheet("Discrepancies")
        self._write_header(
            ws,
            ["Severity", "Type", "Description", "Suggested Action", "Transaction ID",
             "Ledger Entry ID", "Related Transactions", "Resolved"],
            [10, 18, 60, 40, 38, 16, 40, 10],
        )

        ordered = sorted(result.discrepancies, key=lambda d: d.severity.rank, reverse=True)
        for row, d in enumerate(ordered, 2):
            severity_cell = ws.cell(row=row, column=1, value=d.severity.value)
            fill = self.severity_fills.get(d.severity)
            if fill is not None:
                severity_cell.fill = fill
            ws.cell(row=row, column=2, value=d.type.value)
            ws.cell(row=row, column=3, value=sanitize_cell(d.description))
            ws.cell(row=row, column=4, value=sanitize_cell(d.suggested_action))
            ws.cell(row=row, column=5, value=sanitize_cell(d.transaction.id if d.transaction else None))
            ws.cell(row=row, column=6, value=sanitize_cell(d.ledger_entry.id if d.ledger_entry else None))
            ws.cell(row=row, column=7, value=sanitize_cell(", ".join(d.related_transaction_ids)))
            ws.cell(row=row, column=8, value="yes" if d.resolved else "no")

    def _create_transactions(self, wb: Workbook, result: ReconciliationResult) -> None:
        ws = wb.create_sheet("Transactions")
        self._write_header(
            ws,
            ["Date", "Description", "Amount", "Balance", "Reference", "Status",
             "Date Estimated", "Source File", "Line"],
            [12, 40, 14, 14, 18, 12, 14, 25, 8],
        )

        for row, txn in enumerate(result.transactions, 2):
            ws.cell(row=row, column=1, value=txn.date)
            ws.cell(row=row, column=2, value=sanitize_cell(txn.description))
            self._money_cell(ws, row, 3, txn.signed_amount)
            self._money_cell(ws, row, 4, txn.balance)
            ws.cell(row=row, column=5, value=sanitize_cell(txn.reference))
            ws.cell(row=row, column=6, value=txn.status.value)
            ws.cell(row=row, column=7, value="yes" if txn.date_estimated else "no")
            ws.cell(row=row, column=8, value=sanitize_cell(txn.source_file))
            ws.cell(row=row, column=9, value=txn.source_line)

        if result.transactions:
            ws.auto_filter.ref = f"A1:I{len(result.transactions) + 1}"

    def _money_format(self) -> str:
        """Get number format for money values.

        Returns:
            Excel number format string.
        """
        symbol = self.output_config.currency_symbol
        return f'{symbol}#,##0.00_);[Red]({symbol}#,##0.00)'
