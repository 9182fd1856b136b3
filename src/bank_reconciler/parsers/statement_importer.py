"""Delimited-text bank statement importer with header alias detection."""

import csv
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from bank_reconciler.config import ImportConfig
from bank_reconciler.models.transaction import (
    ImportedStatement,
    StatementFormat,
    Transaction,
    TransactionDirection,
)
from bank_reconciler.parsers.base import BaseImporter, ParseError
from bank_reconciler.utils.date_utils import parse_statement_date
from bank_reconciler.utils.decimal_utils import parse_amount, parse_signed_amount
from bank_reconciler.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

CANDIDATE_DELIMITERS = [",", "\t", ";", "|"]

# Header aliases per logical field, tried in order. A header matches an
# alias when its lowercased text contains the alias.
DATE_ALIASES = ["date", "transaction date", "posted date"]
AMOUNT_ALIASES = ["amount", "transaction amount", "debit/credit"]
DESCRIPTION_ALIASES = ["description", "details", "memo", "narration"]
BALANCE_ALIASES = ["balance", "running balance"]
REFERENCE_ALIASES = ["reference", "ref", "check number", "transaction id"]

# Column positions used when a required field matches no header
DEFAULT_DATE_COL = 0
DEFAULT_AMOUNT_COL = 1
DEFAULT_DESCRIPTION_COL = 2

MIN_FIELDS_PER_ROW = 3


@dataclass
class ColumnMapping:
    """Mapping of statement columns to transaction fields."""

    date_col: int
    amount_col: int
    description_col: int
    balance_col: Optional[int] = None
    reference_col: Optional[int] = None


def find_column_index(headers: list[str], aliases: list[str]) -> Optional[int]:
    """Find the first header containing one of the aliases.

    Aliases are tried in order; for each alias the headers are scanned left
    to right.

    Args:
        headers: Lowercased, stripped header names.
        aliases: Candidate substrings for one logical field.

    Returns:
        Column index, or None if no header matches.
    """
    for alias in aliases:
        for idx, header in enumerate(headers):
            if alias in header:
                return idx
    return None


def detect_delimiter(header_line: str) -> str:
    """Detect the field delimiter from the header line.

    The candidate occurring most often wins; ties (including no candidate
    at all) go to the comma.
    """
    best_delimiter = ","
    best_count = header_line.count(",")
    for delimiter in CANDIDATE_DELIMITERS[1:]:
        count = header_line.count(delimiter)
        if count > best_count:
            best_delimiter = delimiter
            best_count = count
    return best_delimiter


def split_line(line: str, delimiter: str) -> list[str]:
    """Split one line on the delimiter, honoring double-quoted segments.

    A quoted segment may contain the delimiter; a doubled quote inside it is
    a literal quote character. Fields are stripped of surrounding whitespace.
    """
    reader = csv.reader([line], delimiter=delimiter, quotechar='"', skipinitialspace=True)
    try:
        fields = next(reader)
    except (StopIteration, csv.Error):
        fields = line.split(delimiter)
    return [f.strip() for f in fields]


def build_column_mapping(headers: list[str]) -> ColumnMapping:
    """Locate columns by alias, falling back to fixed positions for required fields."""
    normalized = [h.strip().lower() for h in headers]

    date_col = find_column_index(normalized, DATE_ALIASES)
    amount_col = find_column_index(normalized, AMOUNT_ALIASES)
    description_col = find_column_index(normalized, DESCRIPTION_ALIASES)

    if date_col is None:
        logger.debug(f"No date column in header, using column {DEFAULT_DATE_COL}")
        date_col = DEFAULT_DATE_COL
    if amount_col is None:
        logger.debug(f"No amount column in header, using column {DEFAULT_AMOUNT_COL}")
        amount_col = DEFAULT_AMOUNT_COL
    if description_col is None:
        logger.debug(f"No description column in header, using column {DEFAULT_DESCRIPTION_COL}")
        description_col = DEFAULT_DESCRIPTION_COL

    return ColumnMapping(
        date_col=date_col,
        amount_col=amount_col,
        description_col=description_col,
        balance_col=find_column_index(normalized, BALANCE_ALIASES),
        reference_col=find_column_index(normalized, REFERENCE_ALIASES),
    )


class StatementImporter(BaseImporter):
    """Importer for delimited bank statement files (CSV, TSV, ; and | separated).

    Rows are processed one at a time, so file input is streamed rather than
    held in memory. Malformed rows are skipped and counted; unparseable
    dates fall back to the import date and are marked ``date_estimated``;
    unparseable amounts become zero.
    """

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the statement importer.

        Args:
            config: Import settings (delimiter override and limits).
            clock: Source of the import timestamp, injectable for tests.
        """
        self.config = config or ImportConfig()
        self.max_file_size = self.config.max_file_size
        self.clock = clock

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".csv", ".tsv", ".txt"]

    def import_text(self, content: str, filename: str, imported_by: str) -> ImportedStatement:
        """Import a statement held in memory.

        Args:
            content: Raw delimited text.
            filename: Name recorded on the import.
            imported_by: Operator identity.

        Returns:
            ImportedStatement with the produced transactions.

        Raises:
            ParseError: If the text has no header row or too many rows.
        """
        return self.import_lines(content.splitlines(), filename, imported_by)

    def import_file(self, file_path: Path, imported_by: str) -> ImportedStatement:
        """Import a statement file, streaming it line by line.

        Args:
            file_path: Path to the statement file.
            imported_by: Operator identity.

        Returns:
            ImportedStatement with the produced transactions.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file is too large, undecodable, headerless or
                has too many rows.
        """
        self._check_file(file_path)
        with LogContext(logger, "import.file", file=file_path.name):
            return self.import_lines(
                self._iter_file_lines(file_path),
                file_path.name,
                imported_by,
                file_path=file_path,
            )

    def import_lines(
        self,
        lines: Iterable[str],
        filename: str,
        imported_by: str,
        file_path: Optional[Path] = None,
    ) -> ImportedStatement:
        """Import a statement from an iterable of text lines.

        Args:
            lines: Lines of delimited text (line terminators optional).
            filename: Name recorded on the import.
            imported_by: Operator identity.
            file_path: Source path, attached to any ParseError.

        Returns:
            ImportedStatement with the produced transactions.

        Raises:
            ParseError: If no header row is found or the row limit is exceeded.
        """
        imported_at = self.clock()
        line_iter = iter(lines)

        header_line = None
        line_number = 0
        for raw_line in line_iter:
            line_number += 1
            if raw_line.strip():
                header_line = raw_line.lstrip("\ufeff")
                break

        if header_line is None:
            raise ParseError(f"No header row found in {filename}", file_path)

        delimiter = self.config.delimiter or detect_delimiter(header_line)
        mapping = build_column_mapping(split_line(header_line, delimiter))

        logger.info(
            f"Importing {filename} (delimiter={delimiter!r}, date={mapping.date_col}, "
            f"amount={mapping.amount_col}, description={mapping.description_col})"
        )

        transactions: list[Transaction] = []
        skipped_count = 0
        row_count = 0

        for raw_line in line_iter:
            line_number += 1
            if not raw_line.strip():
                continue

            row_count += 1
            if row_count > self.config.max_rows:
                raise ParseError(
                    f"File exceeds maximum row limit ({self.config.max_rows:,} rows). "
                    f"Split file into smaller chunks.",
                    file_path,
                )

            values = split_line(raw_line, delimiter)
            if len(values) < MIN_FIELDS_PER_ROW:
                logger.debug(f"Skipping line {line_number} in {filename}: {len(values)} fields")
                skipped_count += 1
                continue

            transactions.append(
                self._parse_row(values, mapping, filename, line_number, imported_at)
            )

        statement = ImportedStatement(
            filename=filename,
            format=StatementFormat.from_delimiter(delimiter),
            imported_by=imported_by,
            imported_at=imported_at,
            transactions=tuple(transactions),
            skipped_rows=skipped_count,
        )

        logger.info(
            f"Imported {statement.transaction_count} transactions from {filename} "
            f"({skipped_count} rows skipped)"
        )
        if statement.estimated_date_count:
            logger.warning(
                f"{statement.estimated_date_count} rows in {filename} had unparseable dates; "
                f"import date {imported_at.date().isoformat()} used instead"
            )
        return statement

    def _parse_row(
        self,
        values: list[str],
        mapping: ColumnMapping,
        filename: str,
        line_number: int,
        imported_at: datetime,
    ) -> Transaction:
        """Build a Transaction from one split row.

        Args:
            values: Row fields.
            mapping: Column mapping.
            filename: Source file name.
            line_number: Line number in the source.
            imported_at: Import timestamp (also the date fallback).

        Returns:
            A new unreconciled Transaction.
        """
        date_str = self._safe_get(values, mapping.date_col)
        parsed_date = parse_statement_date(date_str)
        date_estimated = parsed_date is None
        if parsed_date is None:
            logger.debug(f"Line {line_number} in {filename}: unparseable date {date_str!r}")
            parsed_date = imported_at.date()

        amount_str = self._safe_get(values, mapping.amount_col)
        amount, is_withdrawal = parse_amount(amount_str)
        if amount == 0 and amount_str.strip() not in ("", "0", "0.00"):
            logger.debug(f"Line {line_number} in {filename}: unparseable amount {amount_str!r}")

        balance: Optional[Decimal] = None
        if mapping.balance_col is not None:
            balance_str = self._safe_get(values, mapping.balance_col)
            if balance_str:
                balance = parse_signed_amount(balance_str)

        reference = None
        if mapping.reference_col is not None:
            reference = self._safe_get(values, mapping.reference_col) or None

        return Transaction(
            date=parsed_date,
            description=self._safe_get(values, mapping.description_col),
            amount=amount,
            direction=TransactionDirection.WITHDRAWAL if is_withdrawal else TransactionDirection.DEPOSIT,
            balance=balance,
            reference=reference,
            created_at=imported_at,
            date_estimated=date_estimated,
            source_file=filename,
            source_line=line_number,
        )

    def _safe_get(self, row: list[str], idx: Optional[int], default: str = "") -> str:
        """Safely get a value from a row.

        Args:
            row: Row values.
            idx: Index to get.
            default: Default value if index is out of bounds.

        Returns:
            Value at index or default.
        """
        if idx is None or idx < 0 or idx >= len(row):
            return default
        return row[idx]
