"""Logging configuration for the bank reconciler."""

import logging
import sys
from pathlib import Path

# Default log file name
DEFAULT_LOG_FILE = "bank_reconciler.log"

# Field names masked in log output
SENSITIVE_FIELDS = {'password', 'token', 'account_number', 'card_number', 'iban', 'secret', 'api_key'}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _sanitize_context(context: dict[str, object]) -> dict[str, object]:
    """Mask sensitive fields in a context dict.

    Args:
        context: Dictionary of context values.

    Returns:
        Dictionary with sensitive fields masked.
    """
    return {k: '***' if k.lower() in SENSITIVE_FIELDS else v for k, v in context.items()}


def _format_fields(fields: dict[str, object]) -> str:
    return " ".join(f"{k}={v}" for k, v in _sanitize_context(fields).items())


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, uses DEFAULT_LOG_FILE.
        console_output: Whether to also output to console.

    Returns:
        The package logger configured for the application.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("bank_reconciler")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file is None:
        log_file = DEFAULT_LOG_FILE

    file_handler = logging.FileHandler(Path(log_file), encoding="utf-8")
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__).

    Returns:
        A logger instance under the bank_reconciler hierarchy.
    """
    if name.startswith("bank_reconciler"):
        return logging.getLogger(name)
    return logging.getLogger(f"bank_reconciler.{name}")


def log_event(logger: logging.Logger, level: int, event: str, **fields: object) -> None:
    """Emit a structured log record.

    The message renders as ``event key=value ...``; the raw event name and
    fields are also attached to the record (``record.event`` and
    ``record.fields``) so handlers can route them to an observability sink.

    Args:
        logger: Logger to emit on.
        level: Numeric log level (e.g. logging.INFO).
        event: Dotted event name, e.g. ``"match.rule"``.
        **fields: Structured context for the event.
    """
    if not logger.isEnabledFor(level):
        return
    sanitized = _sanitize_context(fields)
    message = f"{event} {_format_fields(fields)}" if fields else event
    logger.log(level, message, extra={"event": event, "fields": sanitized})


class LogContext:
    """Context manager that logs the start, completion or failure of an operation."""

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        """Initialize log context.

        Args:
            logger: Logger instance to use.
            operation: Name of the operation being performed.
            **context: Additional context to include in log messages.
        """
        self.logger = logger
        self.operation = operation
        self.context = context

    def __enter__(self) -> "LogContext":
        log_event(self.logger, logging.DEBUG, f"{self.operation}.start", **self.context)
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        if exc_type is not None:
            self.logger.error(
                f"Error in {self.operation}: {exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            log_event(self.logger, logging.DEBUG, f"{self.operation}.complete")
        return False
