"""Output formatters for CodeFixer diagnostics."""
from __future__ import annotations

import json
from typing import Protocol

from codefixer.constants import OutputFormat
from codefixer.diagnostics import DiagnosticCollection
from codefixer.types import CodeFixerConfig


class Formatter(Protocol):
    def format(
        self,
        *,
        diagnostics: DiagnosticCollection,
        config: CodeFixerConfig,
    ) -> str: ...


class TextFormatter:
    def format(
        self,
        *,
        diagnostics: DiagnosticCollection,
        config: CodeFixerConfig,
    ) -> str:
        lines: list[str] = []

        for error in diagnostics.syntax_errors:
            lines.append(
                f"{error.file}:{error.location.line}:{error.location.column}: "
                f"ERROR [syntax] {error.message}"
            )
            if config.show_source and error.source_line is not None:
                lines.append(f"    {error.source_line}")
                lines.append(f"    {' ' * max(0, error.location.column - 1)}^")
                lines.append("")

        for item in diagnostics.sorted:
            diag = item.diagnostic
            line: str = (
                f"{item.file}:{item.location.line}:{item.location.column}: "
                f"{diag.severity.value.upper()} [{diag.rule_id}] {diag.message}"
            )
            if diag.quick_fixable:
                line += " (fixable)"
            lines.append(line)

            if config.show_source and item.source_line is not None:
                lines.append(f"    {item.source_line}")
                caret_pos: int = max(0, item.location.column - 1)
                lines.append(f"    {' ' * caret_pos}^")
                lines.append("")

        return "\n".join(lines)


class JsonFormatter:
    def format(
        self,
        *,
        diagnostics: DiagnosticCollection,
        config: CodeFixerConfig,
    ) -> str:
        items: list[dict[str, object]] = []

        for error in diagnostics.syntax_errors:
            items.append({
                "file": str(error.file),
                "line": error.location.line,
                "column": error.location.column,
                "ruleId": "syntax",
                "severity": "error",
                "message": error.message,
            })

        for diag in diagnostics.sorted:
            item: dict[str, object] = {
                "file": str(diag.file),
                "line": diag.location.line,
                "column": diag.location.column,
                "end_line": diag.location.end_line,
                "end_column": diag.location.end_column,
                **diag.diagnostic.to_dict(),
            }
            if config.show_source:
                item["source_line"] = diag.source_line
            items.append(item)

        return json.dumps(items, indent=2)


def get_formatter(*, output_format: OutputFormat) -> Formatter:
    if output_format == OutputFormat.JSON:
        return JsonFormatter()
    return TextFormatter()


def format_summary(*, diagnostics: DiagnosticCollection) -> str:
    counts: list[tuple[int, str]] = [
        (len(diagnostics.syntax_errors), "syntax error"),
        (diagnostics.error_count, "error"),
        (diagnostics.warning_count, "warning"),
        (diagnostics.info_count, "info"),
    ]

    parts: list[str] = [
        f"{count} {label}{'s' if count != 1 else ''}"
        for count, label in counts
        if count > 0
    ]

    if not parts:
        return "No issues found."

    return f"Found {', '.join(parts)}."
