"""Diagnostic data model for CodeFixer."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codefixer.constants import Severity


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single issue found by the rule engine.

    ``start`` and ``end`` are UTF-8 byte offsets into the analyzed text.
    """

    rule_id: str
    message: str
    start: int
    end: int
    severity: Severity
    quick_fixable: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Render the wire form used by JSON output and generator prompts."""
        return {
            "ruleId": self.rule_id,
            "message": self.message,
            "start": self.start,
            "end": self.end,
            "severity": self.severity.value,
            "quickFixable": self.quick_fixable,
        }


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source code location. All values are 1-based."""

    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None


@dataclass(frozen=True, slots=True)
class FileDiagnostic:
    """A diagnostic attached to the file it was found in."""

    file: Path
    diagnostic: Diagnostic
    location: SourceLocation
    source_line: str | None = None


@dataclass(frozen=True, slots=True)
class FileSyntaxError:
    """A file the parser rejected. Line/column are 1-based."""

    file: Path
    location: SourceLocation
    message: str
    source_line: str | None = None


def offset_to_location(*, source: bytes, offset: int) -> SourceLocation:
    """Map a byte offset to a 1-based line and (character) column."""
    offset = max(0, min(offset, len(source)))
    line_start: int = source.rfind(b"\n", 0, offset) + 1
    line: int = source.count(b"\n", 0, offset) + 1
    column: int = len(source[line_start:offset].decode("utf-8", errors="replace")) + 1
    return SourceLocation(line=line, column=column)


def locate(
    *, file: Path, source: bytes, diagnostic: Diagnostic,
) -> FileDiagnostic:
    """Attach file and line/column information to a diagnostic."""
    start: SourceLocation = offset_to_location(source=source, offset=diagnostic.start)
    end: SourceLocation = offset_to_location(source=source, offset=diagnostic.end)
    lines: list[bytes] = source.split(b"\n")
    source_line: str | None = None
    if 1 <= start.line <= len(lines):
        source_line = lines[start.line - 1].decode("utf-8", errors="replace").rstrip("\r")
    return FileDiagnostic(
        file=file,
        diagnostic=diagnostic,
        location=SourceLocation(
            line=start.line,
            column=start.column,
            end_line=end.line,
            end_column=end.column,
        ),
        source_line=source_line,
    )


@dataclass(slots=True)
class DiagnosticCollection:
    """Mutable collection of file diagnostics with sorting and counting."""

    _diagnostics: list[FileDiagnostic] = field(default_factory=list)
    _syntax_errors: list[FileSyntaxError] = field(default_factory=list)

    def add(self, *, diagnostic: FileDiagnostic) -> None:
        """Add a single diagnostic."""
        self._diagnostics.append(diagnostic)

    def add_all(self, *, diagnostics: list[FileDiagnostic]) -> None:
        """Add multiple diagnostics."""
        self._diagnostics.extend(diagnostics)

    def add_syntax_error(self, *, error: FileSyntaxError) -> None:
        """Record a file that could not be parsed."""
        self._syntax_errors.append(error)

    @property
    def sorted(self) -> list[FileDiagnostic]:
        """Return diagnostics sorted by file, line, column."""
        return sorted(
            self._diagnostics,
            key=lambda d: (str(d.file), d.location.line, d.location.column),
        )

    @property
    def syntax_errors(self) -> list[FileSyntaxError]:
        """Return syntax errors sorted by file."""
        return sorted(self._syntax_errors, key=lambda e: str(e.file))

    @property
    def has_errors(self) -> bool:
        """Return True if any diagnostic has ERROR severity or a file failed to parse."""
        return bool(self._syntax_errors) or self.error_count > 0

    @property
    def error_count(self) -> int:
        """Count of ERROR severity diagnostics."""
        return self._count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of WARNING severity diagnostics."""
        return self._count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        """Count of INFO severity diagnostics."""
        return self._count(Severity.INFO)

    def _count(self, severity: Severity) -> int:
        return sum(1 for d in self._diagnostics if d.diagnostic.severity == severity)

    def __len__(self) -> int:
        return len(self._diagnostics)

    def __iter__(self) -> Iterator[FileDiagnostic]:
        return iter(self._diagnostics)
