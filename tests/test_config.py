"""Tests for configuration loading."""

from decimal import Decimal
from pathlib import Path

import pytest

from bank_reconciler.config import (
    Config,
    ConfigError,
    ImportConfig,
    MatchingConfig,
    load_config,
    load_settings,
    load_yaml_file,
)


def write_settings(tmp_path: Path, content: str) -> Path:
    """Helper to write a settings.yaml file."""
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config and load_settings."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(config_dir=tmp_path)
        assert config == Config()
        assert config.matching.fuzzy_threshold == 70
        assert config.discrepancies.amount_tolerance == Decimal("0.01")

    def test_values_from_file(self, tmp_path: Path) -> None:
        write_settings(
            tmp_path,
            "matching:\n"
            "  fuzzy_threshold: 80\n"
            "discrepancies:\n"
            "  high_severity_amount: 250.50\n"
            "  flag_estimated_dates: true\n"
            "import:\n"
            "  delimiter: tab\n"
            "output:\n"
            "  currency_symbol: EUR\n",
        )

        config = load_config(config_dir=tmp_path)

        assert config.matching.fuzzy_threshold == 80
        assert config.matching.rule_priority_bonus == 5
        assert config.discrepancies.high_severity_amount == Decimal("250.5")
        assert config.discrepancies.flag_estimated_dates is True
        assert config.importing.delimiter == "\t"
        assert config.output.currency_symbol == "EUR"

    def test_sample_settings_file(self) -> None:
        config = load_settings(Path(__file__).parent.parent / "config" / "settings.yaml")
        assert config.importing.delimiter is None
        assert config.matching.fuzzy_threshold == 70

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_settings(write_settings(tmp_path, "")) == Config()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, "matching: [oops\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(settings_path=path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, "matching: 70\n")
        with pytest.raises(ConfigError, match="'matching' must be a mapping"):
            load_settings(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_yaml_file(path)

    def test_load_yaml_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "nope.yaml")


class TestSectionValidation:
    """Tests for per-section validation."""

    @pytest.mark.parametrize("threshold", [-1, 101, "high"])
    def test_invalid_fuzzy_threshold(self, threshold: object) -> None:
        with pytest.raises(ConfigError, match="fuzzy_threshold"):
            MatchingConfig.from_dict({"fuzzy_threshold": threshold})

    @pytest.mark.parametrize("raw, expected", [("auto", None), (None, None), (";", ";"), ("\\t", "\t")])
    def test_delimiter(self, raw: object, expected: str | None) -> None:
        assert ImportConfig.from_dict({"delimiter": raw}).delimiter == expected

    def test_unsupported_delimiter(self) -> None:
        with pytest.raises(ConfigError, match="import.delimiter"):
            ImportConfig.from_dict({"delimiter": ":"})

    def test_non_numeric_tolerance(self, tmp_path: Path) -> None:
        path = write_settings(tmp_path, "discrepancies:\n  amount_tolerance: lots\n")
        with pytest.raises(ConfigError, match="amount_tolerance"):
            load_settings(path)
