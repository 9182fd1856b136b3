"""Output generation for Excel and CSV exports."""

from bank_reconciler.output.csv_exporter import CSVExporter
from bank_reconciler.output.excel_writer import ExcelWriter

__all__ = ["ExcelWriter", "CSVExporter"]
