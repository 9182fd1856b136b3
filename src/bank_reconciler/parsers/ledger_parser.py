"""Ledger entry CSV reader for command-line reconciliation runs."""

import csv
from pathlib import Path

from bank_reconciler.models.transaction import LedgerEntry
from bank_reconciler.parsers.base import BaseImporter, ParseError
from bank_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = {"id", "date", "amount"}


class LedgerParser(BaseImporter):
    """Reads ledger entries exported by the ledger subsystem as CSV.

    Expected columns: id, date, description, amount, and optionally
    type (debit/credit), account, reference and source.
    """

    def __init__(self, strict: bool = False):
        """Initialize ledger parser.

        Args:
            strict: If True, raise ParseError on malformed rows.
                   If False, log warnings and skip them.
        """
        self.strict = strict

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".csv"]

    def parse(self, file_path: Path) -> list[LedgerEntry]:
        """Parse a ledger CSV file.

        Args:
            file_path: Path to the ledger file.

        Returns:
            Ledger entries in file order.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If required columns are missing, or a row is
                malformed in strict mode.
        """
        self._check_file(file_path)

        reader = csv.DictReader(self._iter_file_lines(file_path))
        if reader.fieldnames is None:
            raise ParseError(f"Ledger file {file_path.name} is empty", file_path)

        columns = {name.strip().lower() for name in reader.fieldnames if name}
        missing = REQUIRED_COLUMNS - columns
        if missing:
            raise ParseError(
                f"Ledger file {file_path.name} is missing columns: {', '.join(sorted(missing))}",
                file_path,
            )

        entries: list[LedgerEntry] = []
        skipped_count = 0
        for row_num, row in enumerate(reader, start=2):
            record = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
            if not any(record.values()):
                continue
            try:
                entries.append(LedgerEntry.from_dict(record))  # type: ignore[arg-type]
            except ValueError as e:
                if self.strict:
                    raise ParseError(f"Row {row_num}: {e}", file_path) from e
                logger.warning(f"Skipping ledger row {row_num} in {file_path.name}: {e}")
                skipped_count += 1

        logger.info(f"Read {len(entries)} ledger entries from {file_path.name} ({skipped_count} rows skipped)")
        return entries
