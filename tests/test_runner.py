"""Tests for CodeFixer lint and fix runner."""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from codefixer.constants import OutputFormat
from codefixer.runner import (
    FixResult,
    LintResult,
    fix_paths,
    format_diff,
    format_results,
    lint_paths,
)
from codefixer.types import CodeFixerConfig


def _write_file(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


class TestLintPaths:
    def test_valid_files_no_errors(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "good.js", "const x = 1;\nconsole.log(x);\n")
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_checked == 1
        assert result.exit_code == 0
        assert not result.diagnostics.has_errors

    def test_syntax_error_detected(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "bad.js", "function broken(\n")
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_checked == 1
        assert result.exit_code == 1
        assert result.diagnostics.has_errors
        assert len(result.diagnostics) == 0
        assert len(result.diagnostics.syntax_errors) == 1

    def test_mixed_files(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "good.js", "const x = 1;\n")
        _write_file(tmp_path / "missing.ts", "export const y = z;\n")
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_checked == 2
        assert result.exit_code == 1
        assert result.diagnostics.error_count == 1

    def test_empty_directory(self, tmp_path: Path) -> None:
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_checked == 0
        assert result.exit_code == 0

    def test_locations_are_one_based(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "a.js", "// é\nconst v = data.value;\n")
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        r3 = [d for d in result.diagnostics.sorted if d.diagnostic.rule_id == "R3"]
        assert len(r3) == 1
        assert (r3[0].location.line, r3[0].location.column) == (2, 11)
        assert (r3[0].location.end_line, r3[0].location.end_column) == (2, 21)
        assert r3[0].source_line == "const v = data.value;"

    def test_node_modules_excluded(self, tmp_path: Path) -> None:
        (tmp_path / "node_modules" / "dep").mkdir(parents=True)
        _write_file(tmp_path / "node_modules" / "dep" / "index.js", "broken(\n")
        _write_file(tmp_path / "a.js", "const x = 1;\n")
        result: LintResult = lint_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_checked == 1


class TestFormatResults:
    def test_text_output(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "a.js", "missing();\n")
        config: CodeFixerConfig = CodeFixerConfig(show_source=False)
        output: str = format_results(
            result=lint_paths(paths=(tmp_path,), config=config), config=config,
        )

        assert "[R2] Missing import for 'missing'" in output
        assert "Found 1 error." in output
        assert output.endswith("Checked 1 file.")

    def test_json_output(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "a.js", "missing();\n")
        config: CodeFixerConfig = replace(
            CodeFixerConfig(), output_format=OutputFormat.JSON,
        )
        output: str = format_results(
            result=lint_paths(paths=(tmp_path,), config=config), config=config,
        )

        assert output.startswith("[")
        assert '"ruleId": "R2"' in output


class TestFixPaths:
    def test_rule_based_fix(self, tmp_path: Path) -> None:
        target: Path = _write_file(tmp_path / "a.js", "import a from 'a';\nrun();\n")
        result: FixResult = fix_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_changed == 1
        assert result.changes[target.resolve()] == (
            "import a from 'a';\nrun();\n",
            "run();\n",
        )
        assert target.read_text() == "import a from 'a';\nrun();\n"

    def test_unparseable_file_is_skipped(self, tmp_path: Path) -> None:
        _write_file(tmp_path / "a.js", "import a from 'a';\nfunction (\n")
        result: FixResult = fix_paths(paths=(tmp_path,), config=CodeFixerConfig())

        assert result.files_changed == 0

    def test_generator_mode_records_outcomes(self, tmp_path: Path) -> None:
        target: Path = _write_file(tmp_path / "a.js", "value();\n")
        result: FixResult = fix_paths(
            paths=(tmp_path,), config=CodeFixerConfig(), use_generator=True,
        )

        assert result.files_changed == 0
        assert result.outcomes[target.resolve()].error == "No generator configured."


class TestFormatDiff:
    def test_labels(self) -> None:
        diff_text: str = format_diff(path=Path("src/a.js"), old="a\n", new="b\n")

        assert diff_text.startswith("--- a/src/a.js\n+++ b/src/a.js\n")
        assert "-a\n+b\n" in diff_text
