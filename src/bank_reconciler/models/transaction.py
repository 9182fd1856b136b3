"""Bank transaction, ledger entry and statement import models."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from bank_reconciler.utils.date_utils import parse_statement_date
from bank_reconciler.utils.decimal_utils import safe_decimal


class TransactionDirection(Enum):
    """Direction of a bank-reported cash movement."""

    DEPOSIT = "deposit"  # Money in
    WITHDRAWAL = "withdrawal"  # Money out


class ReconciliationStatus(Enum):
    """Reconciliation state of a bank transaction."""

    UNRECONCILED = "unreconciled"
    RECONCILED = "reconciled"
    FLAGGED = "flagged"


class EntryDirection(Enum):
    """Debit/credit side of a ledger entry."""

    DEBIT = "debit"
    CREDIT = "credit"


class StatementFormat(Enum):
    """Delimited text layout detected for an imported statement."""

    CSV = "csv"
    TSV = "tsv"
    SEMICOLON = "semicolon"
    PIPE = "pipe"

    @classmethod
    def from_delimiter(cls, delimiter: str) -> "StatementFormat":
        return {
            ",": cls.CSV,
            "\t": cls.TSV,
            ";": cls.SEMICOLON,
            "|": cls.PIPE,
        }.get(delimiter, cls.CSV)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Transaction:
    """A single bank-reported cash movement.

    Attributes:
        id: Unique identifier (UUID for imported rows).
        date: Transaction date.
        description: Free-text description from the statement.
        amount: Non-negative magnitude of the movement.
        direction: Deposit or withdrawal.
        balance: Running balance reported by the bank, if any.
        reference: External reference (check number, bank ref, ...).
        status: Reconciliation status.
        created_at: When this record was created.
        date_estimated: True when the statement date could not be parsed
            and the import-time date was used instead.
        source_file: Name of the statement file this row came from.
        source_line: Line number in the statement file.
    """

    date: date
    description: str
    amount: Decimal
    direction: TransactionDirection = TransactionDirection.DEPOSIT
    id: str = field(default_factory=_new_id)
    balance: Decimal | None = None
    reference: str | None = None
    status: ReconciliationStatus = ReconciliationStatus.UNRECONCILED
    created_at: datetime = field(default_factory=datetime.now)
    date_estimated: bool = False
    source_file: str = ""
    source_line: int | None = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with withdrawals negative and deposits positive."""
        if self.direction == TransactionDirection.WITHDRAWAL:
            return -self.amount
        return self.amount

    @property
    def is_withdrawal(self) -> bool:
        return self.direction == TransactionDirection.WITHDRAWAL

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, date={self.date}, "
            f"description={self.description[:30]!r}, "
            f"amount={self.signed_amount})"
        )


@dataclass
class LedgerEntry:
    """An internally recorded accounting movement, supplied read-only.

    Attributes:
        id: Identifier assigned by the ledger subsystem.
        date: Posting date.
        description: Entry description.
        amount: Signed amount as recorded in the ledger.
        direction: Debit or credit.
        account: Ledger account label.
        reference: Optional reference shared with the bank side.
        source: Optional tag naming the subsystem that produced the entry.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    direction: EntryDirection = EntryDirection.DEBIT
    account: str = ""
    reference: str | None = None
    source: str | None = None

    @property
    def magnitude(self) -> Decimal:
        """Absolute amount, comparable with a Transaction's amount."""
        return abs(self.amount)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LedgerEntry":
        """Create a LedgerEntry from a record handed over by the ledger.

        Args:
            data: Mapping with id, date, description, amount and optional
                type/direction, account, reference and source.

        Returns:
            A new LedgerEntry.

        Raises:
            ValueError: If id or date is missing or the date is unparseable.
        """
        if not data.get("id"):
            raise ValueError("Ledger entry is missing an id")

        raw_date = data.get("date")
        if isinstance(raw_date, datetime):
            entry_date = raw_date.date()
        elif isinstance(raw_date, date):
            entry_date = raw_date
        else:
            parsed = parse_statement_date(str(raw_date) if raw_date is not None else None)
            if parsed is None:
                raise ValueError(f"Ledger entry {data['id']} has an unparseable date: {raw_date!r}")
            entry_date = parsed

        amount = safe_decimal(data.get("amount"))

        direction_str = str(data.get("direction", data.get("type", "")) or "").strip().lower()
        try:
            direction = EntryDirection(direction_str)
        except ValueError:
            direction = EntryDirection.CREDIT if amount < 0 else EntryDirection.DEBIT

        reference = data.get("reference")
        source = data.get("source")
        return cls(
            id=str(data["id"]),
            date=entry_date,
            description=str(data.get("description", "") or ""),
            amount=amount,
            direction=direction,
            account=str(data.get("account", "") or ""),
            reference=str(reference) if reference not in (None, "") else None,
            source=str(source) if source not in (None, "") else None,
        )

    def __repr__(self) -> str:
        return (
            f"LedgerEntry(id={self.id!r}, date={self.date}, "
            f"description={self.description[:30]!r}, amount={self.amount})"
        )


@dataclass(frozen=True)
class ImportedStatement:
    """Record of one statement file import.

    Attributes:
        filename: Name of the imported file.
        format: Detected delimited layout.
        imported_by: Operator identity.
        imported_at: Import timestamp.
        transactions: Transactions produced by the import, in file order.
        skipped_rows: Number of data rows that were skipped as malformed.
        id: Unique identifier for this import.
    """

    filename: str
    format: StatementFormat
    imported_by: str
    imported_at: datetime
    transactions: tuple[Transaction, ...] = ()
    skipped_rows: int = 0
    id: str = field(default_factory=_new_id)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def estimated_date_count(self) -> int:
        """Number of transactions whose date fell back to the import date."""
        return sum(1 for t in self.transactions if t.date_estimated)
