"""Tests for CLI main module."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from src.cli.main import main
from src.layers.l1_intelligence.risk.context import SecurityContext
from src.layers.l1_intelligence.secrets.patterns import SECRET_PATTERNS
from src.layers.l1_intelligence.workflow.repo_scan import RepoScanResult


def scan_result(success: bool = True, **kwargs) -> RepoScanResult:
    context = SecurityContext() if success else None
    return RepoScanResult(success=success, context=context, source_path="repo", **kwargs)


class TestMainCommand:
    """Test main CLI group."""

    def test_version_flag(self) -> None:
        """Test version flag."""
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "scan" in result.output
        assert "patterns" in result.output

    def test_patterns_command(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["patterns"])
        assert result.exit_code == 0
        assert f"Secret Patterns ({len(SECRET_PATTERNS)})" in result.output

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("- just\n- a list\n")

        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config), "patterns"])
        assert result.exit_code != 0
        assert "mapping" in result.output


class TestScanCommand:
    """Test scan subcommand."""

    @patch("src.cli.main.RepositoryScanner")
    def test_scan_options(self, mock_scanner_cls: MagicMock, tmp_path: Path) -> None:
        """Test flags are mapped onto the scan config."""
        mock_scanner_cls.return_value.scan = AsyncMock(return_value=scan_result())

        runner = CliRunner()
        result = runner.invoke(
            main,
            ["scan", str(tmp_path), "--depth", "2", "--no-vulns", "--no-secrets", "--prod-only"],
        )

        assert result.exit_code == 0
        config = mock_scanner_cls.call_args.kwargs["config"]
        assert config.max_depth == 2
        assert config.resolve_vulnerabilities is False
        assert config.scan_secrets is False
        assert config.build_supply_chain is True
        assert config.include_dev_dependencies is False
        mock_scanner_cls.return_value.scan.assert_awaited_once_with(tmp_path)

    @patch("src.cli.main.RepositoryScanner")
    def test_scan_renders_report(self, mock_scanner_cls: MagicMock, tmp_path: Path) -> None:
        mock_scanner_cls.return_value.scan = AsyncMock(
            return_value=scan_result(warnings=["2 package lookups failed"])
        )

        runner = CliRunner()
        result = runner.invoke(main, ["scan", str(tmp_path)])

        assert result.exit_code == 0
        assert "Risk Score" in result.output
        assert "Secure" in result.output
        assert "2 package lookups failed" in result.output

    @patch("src.cli.main.RepositoryScanner")
    def test_scan_json(self, mock_scanner_cls: MagicMock, tmp_path: Path) -> None:
        """Test JSON output is machine readable."""
        mock_scanner_cls.return_value.scan = AsyncMock(return_value=scan_result())

        runner = CliRunner()
        result = runner.invoke(main, ["scan", str(tmp_path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["report"]["overall_risk_score"] == 0
        assert data["report"]["risk_level"] == "Secure"

    @patch("src.cli.main.RepositoryScanner")
    def test_scan_failure_exit_code(self, mock_scanner_cls: MagicMock, tmp_path: Path) -> None:
        mock_scanner_cls.return_value.scan = AsyncMock(
            return_value=scan_result(success=False, errors=["boom"])
        )

        runner = CliRunner()
        result = runner.invoke(main, ["scan", str(tmp_path)])

        assert result.exit_code == 1
        assert "boom" in result.output

    def test_scan_missing_path(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 2
