"""Tests for the command-line interface."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from bank_reconciler.cli import create_parser, get_log_level, main, resolve_operator

STATEMENT = """Date,Description,Amount,Balance
2024-02-01,Rent,-5000.00,1250.00
2024-02-03,Coffee,-4.50,1245.50
"""

LEDGER = """id,date,description,amount,type
L-1,2024-02-01,Rent,-5000.00,credit
L-2,2024-02-15,Payroll,-900.00,credit
"""


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Directory holding a statement and a ledger file, used as the working directory."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "statement.csv").write_text(STATEMENT, encoding="utf-8")
    (tmp_path / "ledger.csv").write_text(LEDGER, encoding="utf-8")
    return tmp_path


def base_args(workspace: Path) -> list[str]:
    """Helper to build the common statement/ledger arguments."""
    return [
        "-s", str(workspace / "statement.csv"),
        "-l", str(workspace / "ledger.csv"),
        "--config-dir", str(workspace / "config"),
    ]


class TestHelpers:
    """Tests for CLI helper functions."""

    def test_get_log_level(self) -> None:
        assert get_log_level(0) == "WARNING"
        assert get_log_level(1) == "INFO"
        assert get_log_level(3) == "DEBUG"

    def test_resolve_operator_precedence(self) -> None:
        with patch.dict(os.environ, {"RECONCILER_OPERATOR": "carol"}):
            assert resolve_operator("alice") == "alice"
            assert resolve_operator(None) == "carol"
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_operator(None) == "cli"

    def test_parser_defaults(self) -> None:
        args = create_parser().parse_args(["-s", "a.csv", "-l", "b.csv"])
        assert args.statement == Path("a.csv")
        assert args.config_dir == Path("config")
        assert args.xlsx is False
        assert args.dry_run is False


class TestMain:
    """Tests for the main reconciliation command."""

    def test_reconcile_writes_outputs(self, workspace: Path) -> None:
        out = workspace / "out"

        exit_code = main(
            base_args(workspace)
            + ["-o", str(out), "--xlsx", "--session-id", "sess-1", "--operator", "alice"]
        )

        assert exit_code == 0
        for name in ("summary.csv", "matches.csv", "discrepancies.csv", "transactions.csv"):
            assert (out / name).exists()
        assert (out / "reconciliation.xlsx").exists()

        history = [
            json.loads(line)
            for line in (out / "history.jsonl").read_text(encoding="utf-8").splitlines()
        ]
        assert history[0]["action"] == "imported"
        assert {h["session_id"] for h in history} == {"sess-1"}
        assert {h["performed_by"] for h in history} == {"alice"}
        assert "matched" in {h["action"] for h in history}

    def test_custom_history_file(self, workspace: Path) -> None:
        history_file = workspace / "audit" / "history.jsonl"
        exit_code = main(
            base_args(workspace) + ["-o", str(workspace / "out"), "--history-file", str(history_file)]
        )
        assert exit_code == 0
        assert history_file.exists()
        assert not (workspace / "out" / "history.jsonl").exists()

    def test_dry_run_writes_nothing(self, workspace: Path) -> None:
        out = workspace / "out"
        exit_code = main(base_args(workspace) + ["-o", str(out), "--dry-run"])
        assert exit_code == 0
        assert not out.exists()

    def test_missing_arguments(self, workspace: Path) -> None:
        assert main(["-s", str(workspace / "statement.csv")]) == 1

    def test_missing_statement_file(self, workspace: Path) -> None:
        args = ["-s", str(workspace / "missing.csv"), "-l", str(workspace / "ledger.csv")]
        assert main(args) == 1

    def test_unreadable_statement(self, workspace: Path) -> None:
        (workspace / "statement.csv").write_text("\n\n", encoding="utf-8")
        assert main(base_args(workspace) + ["--dry-run"]) == 1

    def test_ledger_missing_columns(self, workspace: Path) -> None:
        (workspace / "ledger.csv").write_text("id,description\nL-1,Rent\n", encoding="utf-8")
        assert main(base_args(workspace) + ["--dry-run"]) == 1

    def test_invalid_settings(self, workspace: Path) -> None:
        config_dir = workspace / "config"
        config_dir.mkdir()
        (config_dir / "settings.yaml").write_text("matching:\n  fuzzy_threshold: 500\n", encoding="utf-8")
        assert main(base_args(workspace) + ["--dry-run"]) == 1

    def test_invalid_rules(self, workspace: Path) -> None:
        rules = workspace / "rules.yaml"
        rules.write_text("rules:\n  - id: bad\n    actions: [{type: explode}]\n", encoding="utf-8")
        assert main(base_args(workspace) + ["--dry-run", "--rules", str(rules)]) == 1

    def test_non_mapping_condition_in_rules(self, workspace: Path) -> None:
        rules = workspace / "rules.yaml"
        rules.write_text("rules:\n  - id: typo\n    conditions: [amount]\n", encoding="utf-8")
        assert main(base_args(workspace) + ["--dry-run", "--rules", str(rules)]) == 1


class TestValidateOnly:
    """Tests for --validate-only."""

    def test_valid_without_files(self, workspace: Path) -> None:
        assert main(["--validate-only", "--config-dir", str(workspace / "config")]) == 0

    def test_sample_config_is_valid(self, workspace: Path) -> None:
        config_dir = Path(__file__).parent.parent / "config"
        assert main(["--validate-only", "--config-dir", str(config_dir)]) == 0

    def test_bad_rules_file(self, workspace: Path) -> None:
        rules = workspace / "rules.yaml"
        rules.write_text("rules: [\n", encoding="utf-8")
        assert main(["--validate-only", "--rules", str(rules)]) == 1


class TestShowHistory:
    """Tests for --show-history."""

    def test_show_history(self, workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        out = workspace / "out"
        main(base_args(workspace) + ["-o", str(out), "--session-id", "sess-9"])
        capsys.readouterr()

        exit_code = main(
            ["--show-history", "--history-file", str(out / "history.jsonl"), "--session-id", "sess-9"]
        )

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "sess-9" in output
        assert "imported" in output

    def test_history_file_required(self, workspace: Path) -> None:
        assert main(["--show-history"]) == 1

    def test_missing_history_file(self, workspace: Path) -> None:
        assert main(["--show-history", "--history-file", str(workspace / "none.jsonl")]) == 1
