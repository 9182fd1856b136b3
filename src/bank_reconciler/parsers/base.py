"""Abstract base class for delimited-text importers."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import Optional

from bank_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


class ParseError(Exception):
    """Exception raised when parsing fails."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


class BaseImporter(ABC):
    """Abstract base class for file importers.

    Subclasses must implement:
    - supported_extensions: List of file extensions this importer handles
    - import_lines(): Build a result from an iterable of text lines
    """

    # Maximum file size to prevent memory exhaustion (100 MB)
    max_file_size: int = 100 * 1024 * 1024

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this importer supports.

        Returns:
            List of extensions like ['.csv', '.tsv'].
        """
        pass

    @property
    def name(self) -> str:
        """Return importer name for logging."""
        return self.__class__.__name__

    def can_import(self, file_path: Path) -> bool:
        """Check if this importer can handle the given file by extension."""
        return self._check_extension(file_path)

    def _check_extension(self, file_path: Path) -> bool:
        """Check if file extension matches supported extensions.

        Args:
            file_path: Path to check.

        Returns:
            True if extension is supported.
        """
        return file_path.suffix.lower() in self.supported_extensions

    def _check_file(self, file_path: Path) -> None:
        """Validate that a file exists and is within the size limit.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file is too large.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise ParseError(
                f"File too large ({file_size / 1024 / 1024:.1f} MB). "
                f"Maximum allowed is {self.max_file_size / 1024 / 1024:.0f} MB",
                file_path,
            )

        if not self._check_extension(file_path):
            logger.warning(
                f"{self.name}: unexpected extension '{file_path.suffix}' for {file_path.name}, "
                f"importing as delimited text"
            )

    def _iter_file_lines(self, file_path: Path) -> Iterator[str]:
        """Stream a text file line by line without loading it whole.

        A UTF-8 byte order mark is dropped from the first line.

        Raises:
            ParseError: If the file cannot be decoded as UTF-8.
        """
        try:
            with open(file_path, encoding="utf-8-sig", newline="") as f:
                for line in f:
                    yield line.rstrip("\r\n")
        except UnicodeDecodeError as e:
            raise ParseError(f"File is not valid UTF-8 text: {e}", file_path) from e
