"""Lint and fix orchestrator for CodeFixer."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from codefixer.analyzer import analyze_parsed
from codefixer.constants import Language
from codefixer.diagnostics import (
    Diagnostic,
    DiagnosticCollection,
    FileSyntaxError,
    SourceLocation,
    locate,
)
from codefixer.diff import apply_patch, create_unified_diff
from codefixer.fixers.pipeline import fix_all
from codefixer.fixing import FixOutcome, generate_validated_fix
from codefixer.formatters import Formatter, format_summary, get_formatter
from codefixer.generator import FixGenerator, RepoContext
from codefixer.parser import ParseResult, SyntaxErrorInfo, parse_file
from codefixer.scanner import scan_files
from codefixer.types import CodeFixerConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LintResult:
    diagnostics: DiagnosticCollection
    files_checked: int
    exit_code: int


@dataclass(frozen=True, slots=True)
class FixResult:
    """Files whose content would change: path -> (old, new)."""

    changes: dict[Path, tuple[str, str]] = field(default_factory=dict)
    outcomes: dict[Path, FixOutcome] = field(default_factory=dict)

    @property
    def files_changed(self) -> int:
        return len(self.changes)


def _syntax_error_for(*, parse_result: ParseResult, file: Path) -> FileSyntaxError:
    err: SyntaxErrorInfo | None = parse_result.syntax_error
    if err is None:
        raise ValueError("parse_result must have a syntax_error")
    return FileSyntaxError(
        file=file,
        location=SourceLocation(line=err.line, column=err.column),
        message=err.message,
        source_line=err.source_line,
    )


def lint_paths(*, paths: tuple[Path, ...], config: CodeFixerConfig) -> LintResult:
    start_time: float = time.monotonic()
    files: list[Path] = scan_files(paths=paths, config=config)
    log.info("Found %d files", len(files))
    collection: DiagnosticCollection = DiagnosticCollection()

    for file in files:
        log.debug("Checking %s", file)
        result: ParseResult = parse_file(file=file)
        if result.tree is None:
            collection.add_syntax_error(
                error=_syntax_error_for(parse_result=result, file=file),
            )
            continue

        diagnostics: list[Diagnostic] = analyze_parsed(parse_result=result, config=config)
        log.debug("%s: %d diagnostics", file, len(diagnostics))
        collection.add_all(diagnostics=[
            locate(file=file, source=result.source_bytes, diagnostic=d)
            for d in diagnostics
        ])

    log.info("Completed in %.2fs", time.monotonic() - start_time)
    exit_code: int = 1 if collection.has_errors else 0
    return LintResult(
        diagnostics=collection,
        files_checked=len(files),
        exit_code=exit_code,
    )


def format_results(*, result: LintResult, config: CodeFixerConfig) -> str:
    formatter: Formatter = get_formatter(output_format=config.output_format)
    output: str = formatter.format(diagnostics=result.diagnostics, config=config)

    summary: str = format_summary(diagnostics=result.diagnostics)
    suffix: str = "s" if result.files_checked != 1 else ""
    file_count: str = f"Checked {result.files_checked} file{suffix}."

    parts: list[str] = []
    if output:
        parts.append(output)
    parts.append(summary)
    parts.append(file_count)

    return "\n".join(parts)


def fix_paths(
    *,
    paths: tuple[Path, ...],
    config: CodeFixerConfig,
    generator: FixGenerator | None = None,
    use_generator: bool = False,
) -> FixResult:
    """Compute fixed content for every file under ``paths``.

    Rule-based ``fix_all`` is used unless ``use_generator`` is set, in which
    case each file goes through the validated generator path (which itself
    falls back to the rule-based fixer).
    """
    start_time: float = time.monotonic()
    files: list[Path] = scan_files(paths=paths, config=config)
    log.info("Found %d files to fix", len(files))
    changes: dict[Path, tuple[str, str]] = {}
    outcomes: dict[Path, FixOutcome] = {}

    for file in files:
        log.debug("Fixing %s", file)
        parsed: ParseResult = parse_file(file=file)
        if parsed.tree is None:
            log.debug("Skipping %s: cannot parse", file)
            continue

        old: str = parsed.source
        if use_generator:
            outcome: FixOutcome = _generate_for_file(
                file=file, parsed=parsed, config=config, generator=generator,
            )
            outcomes[file] = outcome
            new: str | None = (
                apply_patch(old, outcome.diff) if outcome.diff is not None else None
            )
            if new is None:
                log.info("%s: %s", file, outcome.message)
                continue
        else:
            new = fix_all(source=old, language=parsed.language, config=config)

        if new != old:
            changes[file] = (old, new)

    log.info("Completed in %.2fs", time.monotonic() - start_time)
    return FixResult(changes=changes, outcomes=outcomes)


def _generate_for_file(
    *,
    file: Path,
    parsed: ParseResult,
    config: CodeFixerConfig,
    generator: FixGenerator | None,
) -> FixOutcome:
    diagnostics: list[Diagnostic] = analyze_parsed(parse_result=parsed, config=config)
    language: Language = parsed.language
    return generate_validated_fix(
        source=parsed.source,
        language=language,
        file_path=str(file),
        diagnostics=diagnostics,
        generator=generator,
        repo_context=find_repo_context(start=file.parent),
        config=config,
    )


def find_repo_context(*, start: Path) -> RepoContext:
    """Collect ``package.json`` and tsconfig presence from the nearest project root."""
    for directory in [start, *start.parents]:
        package_json: Path = directory / "package.json"
        tsconfig: Path = directory / "tsconfig.json"
        if package_json.is_file() or tsconfig.is_file():
            manifest: str | None = None
            if package_json.is_file():
                try:
                    manifest = package_json.read_text(encoding="utf-8")
                except OSError as e:
                    log.debug("Cannot read %s: %s", package_json, e)
            return RepoContext(package_json=manifest, has_tsconfig=tsconfig.is_file())
    return RepoContext()


def format_diff(*, path: Path, old: str, new: str) -> str:
    return create_unified_diff(old, new, f"a/{path}", f"b/{path}")
