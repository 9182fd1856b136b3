"""Command-line interface for the bank reconciler."""

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from bank_reconciler import __version__
from bank_reconciler.config import Config, ConfigError, load_config
from bank_reconciler.models.report import ReconciliationSummary
from bank_reconciler.models.rule import RuleError
from bank_reconciler.utils.decimal_utils import format_currency
from bank_reconciler.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

OPERATOR_ENV_VAR = "RECONCILER_OPERATOR"
DEFAULT_OPERATOR = "cli"


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="bank-reconciler",
        description="Reconcile a bank statement against internal ledger entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -s statement.csv -l ledger.csv
  %(prog)s -s statement.csv -l ledger.csv --rules config/rules.yaml -o out/ --xlsx
  %(prog)s --show-history --history-file out/history.jsonl --session-id 1234
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-s", "--statement",
        type=Path,
        default=None,
        help="Bank statement file (CSV, TSV, ; or | delimited)",
    )

    parser.add_argument(
        "-l", "--ledger",
        type=Path,
        default=None,
        help="Ledger entries CSV (id, date, description, amount, ...)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output directory (default: reconciliation/YYYYMMDD_HHMMSS)",
    )

    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Path to rules.yaml (default: config/rules.yaml, built-in rules if absent)",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )

    parser.add_argument(
        "--xlsx",
        action="store_true",
        help="Also write an Excel workbook next to the CSV files",
    )

    # Session options
    parser.add_argument(
        "--session-id",
        default=None,
        help="Reconciliation session identifier (default: new UUID)",
    )

    parser.add_argument(
        "--operator",
        default=None,
        help=f"Operator identity recorded in history (default: ${OPERATOR_ENV_VAR} or '{DEFAULT_OPERATOR}')",
    )

    parser.add_argument(
        "--history-file",
        type=Path,
        default=None,
        help="JSON-lines audit history file (default: <output>/history.jsonl)",
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Reconcile but write neither output files nor history",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate configuration and rules files only",
    )

    parser.add_argument(
        "--show-history",
        action="store_true",
        help="Print the audit history (optionally for --session-id) and exit",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def generate_default_output_dir() -> Path:
    """Generate default output directory with timestamp.

    Returns:
        Path with format reconciliation/YYYYMMDD_HHMMSS
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(f"reconciliation/{timestamp}")


def resolve_operator(cli_value: Optional[str]) -> str:
    """Operator identity: the flag, then the environment, then a fixed default."""
    return cli_value or os.environ.get(OPERATOR_ENV_VAR) or DEFAULT_OPERATOR


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration and rules files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    from bank_reconciler.storage import YamlRuleRepository

    console.print("[bold]Validating configuration files...[/bold]\n")

    errors = []
    warnings = []

    config_dir = args.config_dir
    if not config_dir.exists():
        warnings.append(f"Config directory not found: {config_dir}")

    settings_path = config_dir / "settings.yaml"
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        warnings.append(f"Settings file not found: {settings_path}")

    rules_path = args.rules or (config_dir / "rules.yaml")
    if rules_path.exists():
        console.print(f"[green]✓[/green] Rules: {rules_path}")
    else:
        warnings.append(f"Rules file not found: {rules_path} (built-in rules will be used)")

    try:
        load_config(config_dir=config_dir)
        console.print("\n[green]✓[/green] Configuration loaded successfully")
    except ConfigError as e:
        errors.append(f"Failed to load configuration: {e}")

    try:
        rules = YamlRuleRepository(rules_path).load_rules()
        enabled = sum(1 for r in rules if r.enabled)
        console.print(f"  - {len(rules)} rules ({enabled} enabled)")
    except RuleError as e:
        errors.append(f"Failed to load rules: {e}")

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for w in warnings:
            console.print(f"  - {escape(w)}")

    if errors:
        console.print("\n[red]Errors:[/red]")
        for err in errors:
            console.print(f"  - {escape(err)}")
        return 1

    console.print("\n[green]Configuration is valid.[/green]")
    return 0


def show_history(args: argparse.Namespace) -> int:
    """Print audit history entries from the history file.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 on success, 1 if the history file is missing or unreadable.
    """
    from bank_reconciler.storage import JsonlHistoryRepository

    if args.history_file is None:
        console.print("[red]Error: --history-file is required with --show-history[/red]")
        return 1
    if not args.history_file.exists():
        console.print(f"[red]Error: History file not found: {args.history_file}[/red]")
        return 1

    try:
        entries = JsonlHistoryRepository(args.history_file).query_history(args.session_id)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    scope = f"session {args.session_id}" if args.session_id else "all sessions"
    console.print(f"[bold]History for {scope}[/bold] ({len(entries)} entries)\n")
    for entry in entries:
        details = ", ".join(f"{k}={v}" for k, v in entry.details.items())
        console.print(
            f"  {entry.performed_at.isoformat(timespec='seconds')}  "
            f"[cyan]{entry.action.value:<20}[/cyan] {entry.performed_by}  [dim]{escape(details)}[/dim]",
            markup=True,
            highlight=False,
        )
    return 0


def display_summary(summary: ReconciliationSummary, config: Config, skipped_rows: int) -> None:
    """Display reconciliation summary.

    Args:
        summary: Session summary.
        config: Application configuration (currency symbol).
        skipped_rows: Statement rows skipped at import.
    """
    symbol = config.output.currency_symbol
    console.print("\n[bold]Reconciliation Summary[/bold]")
    console.print(f"  Session: {summary.session_id}")
    console.print(f"  Transactions: {summary.total_transactions}")
    console.print(f"  Reconciled: {summary.reconciled_count}")
    console.print(f"  Flagged: {summary.flagged_count}")
    console.print(f"  Unreconciled: {summary.unreconciled_count}")
    console.print(f"  Reconciliation rate: {summary.reconciliation_rate}%")
    console.print(f"  Matched by rule / fuzzy: {summary.rule_match_count} / {summary.fuzzy_match_count}")
    console.print(f"  Unmatched ledger entries: {summary.unmatched_entry_count}")
    if summary.closing_balance is not None:
        console.print(f"  Closing bank balance: {symbol}{format_currency(summary.closing_balance)}")

    if skipped_rows:
        console.print(f"\n[yellow]Skipped statement rows: {skipped_rows}[/yellow]")

    if summary.total_discrepancies:
        console.print(f"\n[yellow]Discrepancies ({summary.total_discrepancies}):[/yellow]")
        for type_name, count in sorted(summary.discrepancies_by_type.items()):
            console.print(f"  - {type_name}: {count}")


def create_progress() -> Progress:
    """Create a progress display.

    Returns:
        Rich Progress instance.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Argument list (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, console_output=args.verbose > 0)

    if args.validate_only:
        return validate_config(args)

    if args.show_history:
        return show_history(args)

    if args.statement is None or args.ledger is None:
        console.print("[red]Error: --statement and --ledger are required[/red]")
        parser.print_usage()
        return 1

    for label, path in (("Statement", args.statement), ("Ledger", args.ledger)):
        if not path.is_file():
            console.print(f"[red]Error: {label} file not found: {path}[/red]")
            return 1

    try:
        config = load_config(config_dir=args.config_dir)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("Run with --validate-only to check configuration files.")
        return 1

    # -v flags override the configured level
    setup_logging(
        level=log_level if args.verbose else config.logging.level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )

    from bank_reconciler.output import CSVExporter, ExcelWriter
    from bank_reconciler.parsers import LedgerParser, ParseError
    from bank_reconciler.processing import Reconciler, new_session_id
    from bank_reconciler.storage import (
        HistoryRepository,
        InMemoryHistoryRepository,
        JsonlHistoryRepository,
        YamlRuleRepository,
    )

    if args.output is None:
        args.output = generate_default_output_dir()
        if not args.dry_run:
            console.print(f"[dim]Using default output: {args.output}[/dim]")

    operator = resolve_operator(args.operator)
    session_id = args.session_id or new_session_id()
    rules_path = args.rules or (args.config_dir / "rules.yaml")

    history_repository: HistoryRepository
    if args.dry_run:
        history_repository = InMemoryHistoryRepository()
    else:
        history_repository = JsonlHistoryRepository(args.history_file or (args.output / "history.jsonl"))

    reconciler = Reconciler(
        config=config,
        rule_repository=YamlRuleRepository(rules_path),
        history_repository=history_repository,
    )

    console.print(f"[bold]Bank Reconciler v{__version__}[/bold]\n")
    console.print(f"Statement: {args.statement}")
    console.print(f"Ledger: {args.ledger}")
    console.print(f"Session: {session_id} (operator: {operator})")

    try:
        with console.status("[bold green]Importing statement..."):
            statement = reconciler.import_statement_file(args.statement, operator, session_id)
        with console.status("[bold green]Reading ledger..."):
            entries = LedgerParser().parse(args.ledger)
    except ParseError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    console.print(
        f"Imported {statement.transaction_count} transactions "
        f"and {len(entries)} ledger entries"
    )

    try:
        with console.status("[bold green]Matching transactions..."):
            result = reconciler.reconcile(list(statement.transactions), entries, session_id, operator)
    except RuleError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    if not args.dry_run:
        with create_progress() as progress:
            task = progress.add_task("Writing CSV files...", total=1)
            CSVExporter(config.output).export(args.output, result)
            progress.update(task, advance=1)

            if args.xlsx:
                task = progress.add_task("Writing Excel output...", total=1)
                ExcelWriter(config.output).write(args.output / "reconciliation.xlsx", result)
                progress.update(task, advance=1)

        console.print(f"\n[green]Output written to {args.output}[/green]")
    else:
        console.print("\n[yellow]Dry run - no output or history written[/yellow]")

    if result.summary is not None:
        display_summary(result.summary, config, statement.skipped_rows)

    return 0


if __name__ == "__main__":
    sys.exit(main())
