"""Tests for CodeFixer CLI."""
from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from codefixer.cli import cli
from codefixer.constants import __version__


_CLEAN_SOURCE: str = "import path from 'path';\nconsole.log(path.sep);\n"
_MISSING_SOURCE: str = "const total = sum([1, 2]);\n"
_UNUSED_SOURCE: str = "import fs from 'fs';\nconsole.log(1);\n"


def _write_config(tmp_path: Path, body: str = "") -> Path:
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(f"[tool.codefixer]\n{body}")
    return config_path


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_help_shows_usage(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "CodeFixer" in result.output
        assert "lint" in result.output
        assert "fix" in result.output
        assert "apply" in result.output

    def test_version_shows_version(self) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCommand:
    """Test the config command."""

    def test_config_shows_resolved_config(self, tmp_path: Path) -> None:
        config_path: Path = _write_config(tmp_path)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "config"])

        assert result.exit_code == 0
        assert "CodeFixer Configuration" in result.output
        assert "Rule Severities:" in result.output
        assert "R2: ERROR" in result.output
        assert "Provider: none" in result.output

    def test_config_json_outputs_valid_json(self, tmp_path: Path) -> None:
        config_path: Path = _write_config(
            tmp_path, '[tool.codefixer.rules.R2]\nglobals = ["jest"]\n',
        )
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "config", "--json"])

        assert result.exit_code == 0
        data: dict[str, object] = json.loads(result.output)
        assert data["rules"]["R2"] == {"globals": ["jest"]}  # type: ignore[index]
        assert data["generator"]["provider"] == "none"  # type: ignore[index]

    def test_config_validate_succeeds(self, tmp_path: Path) -> None:
        config_path: Path = _write_config(tmp_path)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "config", "--validate"])

        assert result.exit_code == 0
        assert "Configuration valid" in result.output


class TestLintCommand:
    """Test the lint command."""

    def test_lint_clean_directory(self, tmp_path: Path) -> None:
        (tmp_path / "clean.js").write_text(_CLEAN_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", str(tmp_path)])

        assert result.exit_code == 0
        assert "No issues found." in result.output
        assert "Checked 1 file." in result.output

    def test_lint_reports_missing_import(self, tmp_path: Path) -> None:
        (tmp_path / "app.js").write_text(_MISSING_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", str(tmp_path)])

        assert result.exit_code == 1
        assert "app.js:1:15: ERROR [R2] Missing import for 'sum'" in result.output
        assert "Found 1 error." in result.output

    def test_lint_info_only_exits_zero(self, tmp_path: Path) -> None:
        (tmp_path / "app.ts").write_text(_UNUSED_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", str(tmp_path)])

        assert result.exit_code == 0
        assert "INFO [R1] Unused import: 'fs' (fixable)" in result.output
        assert "Found 1 info." in result.output

    def test_lint_syntax_error(self, tmp_path: Path) -> None:
        (tmp_path / "broken.js").write_text("function (\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", str(tmp_path)])

        assert result.exit_code == 1
        assert "[syntax]" in result.output
        assert "1 syntax error" in result.output

    def test_lint_empty_directory(self, tmp_path: Path) -> None:
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", str(tmp_path)])

        assert result.exit_code == 0
        assert "Checked 0 files." in result.output

    def test_lint_json_format(self, tmp_path: Path) -> None:
        (tmp_path / "app.js").write_text(_MISSING_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", "--format", "json", str(tmp_path)])

        json_text: str = result.output.split("\nFound")[0]
        items: list[dict[str, object]] = json.loads(json_text)
        assert items[0]["ruleId"] == "R2"
        assert items[0]["line"] == 1
        assert items[0]["quickFixable"] is False

    def test_lint_no_show_source(self, tmp_path: Path) -> None:
        (tmp_path / "app.js").write_text(_MISSING_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", "--no-show-source", str(tmp_path)])

        assert "const total" not in result.output

    def test_lint_show_source(self, tmp_path: Path) -> None:
        (tmp_path / "app.js").write_text(_MISSING_SOURCE)
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["lint", "--show-source", str(tmp_path)])

        assert "    const total = sum([1, 2]);" in result.output
        assert "    " + " " * 14 + "^" in result.output

    def test_lint_respects_rule_severity(self, tmp_path: Path) -> None:
        (tmp_path / "app.js").write_text(_MISSING_SOURCE)
        config_path: Path = _write_config(tmp_path, "[tool.codefixer.rules]\nR2 = \"off\"\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "lint", str(tmp_path)])

        assert result.exit_code == 0
        assert "No issues found." in result.output


class TestApplyCommand:
    """Test the apply command."""

    def _setup(self, tmp_path: Path, diff_text: str) -> tuple[Path, Path]:
        target: Path = tmp_path / "app.js"
        target.write_text("a\nb\nc\n")
        patch: Path = tmp_path / "fix.diff"
        patch.write_text(diff_text)
        return target, patch

    def test_apply_writes_file(self, tmp_path: Path) -> None:
        target, patch = self._setup(tmp_path, "@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["apply", str(target), str(patch)])

        assert result.exit_code == 0
        assert target.read_text() == "a\nB\nc\n"

    def test_apply_check_does_not_write(self, tmp_path: Path) -> None:
        target, patch = self._setup(tmp_path, "@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["apply", "--check", str(target), str(patch)])

        assert result.exit_code == 0
        assert "applies cleanly" in result.output
        assert target.read_text() == "a\nb\nc\n"

    def test_apply_edits_json(self, tmp_path: Path) -> None:
        target, patch = self._setup(tmp_path, "@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["apply", "--edits", str(target), str(patch)])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"start_line": 1, "end_line": 2, "new_text": "B"},
        ]

    def test_apply_mismatch_fails(self, tmp_path: Path) -> None:
        target, patch = self._setup(tmp_path, "@@ -1,3 +1,3 @@\n x\n-y\n+Y\n z\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["apply", str(target), str(patch)])

        assert result.exit_code == 1
        assert "does not apply" in result.output
        assert target.read_text() == "a\nb\nc\n"


class TestCLIErrors:
    """Test CLI error handling."""

    def test_invalid_config_exits_with_error(self, tmp_path: Path) -> None:
        config_path: Path = _write_config(tmp_path, 'output_format = "invalid"\n')
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "config"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        config_path: Path = _write_config(tmp_path, "show_source = false\n")
        runner: CliRunner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_path), "config"])

        assert result.exit_code == 0
        assert "Show source: False" in result.output
