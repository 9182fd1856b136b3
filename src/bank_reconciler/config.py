"""Configuration loading and validation for the bank reconciler."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

import yaml

from bank_reconciler.utils.decimal_utils import safe_decimal
from bank_reconciler.utils.logging_config import DEFAULT_LOG_FILE, get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


# Statement file limits (prevent memory exhaustion on hostile input)
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
DEFAULT_MAX_ROWS = 1_000_000

SUPPORTED_DELIMITERS = {",", "\t", ";", "|"}


def _to_int(section: str, key: str, value: object) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}")
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}") from None


def _to_decimal(section: str, key: str, value: object) -> Decimal:
    amount = safe_decimal(value, default=Decimal("NaN"))
    if amount.is_nan():
        raise ConfigError(f"{section}.{key} must be numeric, got {value!r}")
    return amount


def _require_mapping(name: str, value: object) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


@dataclass
class MatchingConfig:
    """Configuration for the matching passes.

    Attributes:
        fuzzy_threshold: Minimum fuzzy score (0-100) accepted as a match.
        rule_priority_bonus: Confidence points added per unit of rule priority.
    """

    fuzzy_threshold: int = 70
    rule_priority_bonus: int = 5

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "MatchingConfig":
        """Create from dictionary."""
        threshold = _to_int("matching", "fuzzy_threshold", data.get("fuzzy_threshold", 70))
        if not 0 <= threshold <= 100:
            raise ConfigError(f"matching.fuzzy_threshold must be between 0 and 100, got {threshold}")
        return cls(
            fuzzy_threshold=threshold,
            rule_priority_bonus=_to_int("matching", "rule_priority_bonus", data.get("rule_priority_bonus", 5)),
        )


@dataclass
class DiscrepancyConfig:
    """Configuration for discrepancy detection.

    Attributes:
        amount_tolerance: Amount differences above this are mismatches.
        high_severity_amount: Mismatches above this are high severity.
        date_mismatch_days: Day distances above this are date mismatches.
        flag_estimated_dates: Report transactions whose date was estimated.
    """

    amount_tolerance: Decimal = field(default_factory=lambda: Decimal("0.01"))
    high_severity_amount: Decimal = field(default_factory=lambda: Decimal("1000"))
    date_mismatch_days: int = 7
    flag_estimated_dates: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DiscrepancyConfig":
        """Create from dictionary."""
        return cls(
            amount_tolerance=_to_decimal("discrepancies", "amount_tolerance", data.get("amount_tolerance", "0.01")),
            high_severity_amount=_to_decimal(
                "discrepancies", "high_severity_amount", data.get("high_severity_amount", "1000")
            ),
            date_mismatch_days=_to_int("discrepancies", "date_mismatch_days", data.get("date_mismatch_days", 7)),
            flag_estimated_dates=bool(data.get("flag_estimated_dates", False)),
        )


@dataclass
class ImportConfig:
    """Configuration for statement import.

    Attributes:
        delimiter: Fixed field delimiter, or None to detect from the header.
        max_file_size: Largest statement file accepted, in bytes.
        max_rows: Largest number of data rows accepted.
    """

    delimiter: Optional[str] = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_rows: int = DEFAULT_MAX_ROWS

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ImportConfig":
        """Create from dictionary."""
        delimiter = data.get("delimiter")
        if delimiter in (None, "", "auto"):
            delimiter = None
        else:
            delimiter = "\t" if delimiter in ("tab", "\\t") else str(delimiter)
            if delimiter not in SUPPORTED_DELIMITERS:
                raise ConfigError(f"import.delimiter must be one of , ; | tab or auto, got {delimiter!r}")
        return cls(
            delimiter=delimiter,
            max_file_size=_to_int("import", "max_file_size", data.get("max_file_size", DEFAULT_MAX_FILE_SIZE)),
            max_rows=_to_int("import", "max_rows", data.get("max_rows", DEFAULT_MAX_ROWS)),
        )


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        date_format: Date format for output.
        currency_symbol: Currency symbol for display.
        decimal_places: Number of decimal places.
    """

    date_format: str = "%Y-%m-%d"
    currency_symbol: str = "$"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            date_format=str(data.get("date_format", "%Y-%m-%d")),
            currency_symbol=str(data.get("currency_symbol", "$")),
            decimal_places=_to_int("output", "decimal_places", data.get("decimal_places", 2)),
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = DEFAULT_LOG_FILE

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", DEFAULT_LOG_FILE)),
        )


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        matching: Matching pass configuration.
        discrepancies: Discrepancy detection configuration.
        importing: Statement import configuration.
        output: Output generation configuration.
        logging: Logging configuration.
    """

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    discrepancies: DiscrepancyConfig = field(default_factory=DiscrepancyConfig)
    importing: ImportConfig = field(default_factory=ImportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not content:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def load_settings(path: Path) -> Config:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Config with every section present in the file applied.
    """
    data = load_yaml_file(path)

    return Config(
        matching=MatchingConfig.from_dict(_require_mapping("matching", data.get("matching"))),
        discrepancies=DiscrepancyConfig.from_dict(_require_mapping("discrepancies", data.get("discrepancies"))),
        importing=ImportConfig.from_dict(_require_mapping("import", data.get("import"))),
        output=OutputConfig.from_dict(_require_mapping("output", data.get("output"))),
        logging=LoggingConfig.from_dict(_require_mapping("logging", data.get("logging"))),
    )


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load configuration, falling back to defaults for a missing file.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the settings file is malformed.
    """
    if config_dir is None:
        config_dir = Path("config")

    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    if settings_path.exists():
        config = load_settings(settings_path)
        logger.info(f"Loaded settings from {settings_path}")
    else:
        config = Config()
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    return config
