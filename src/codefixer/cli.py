"""Command-line interface for CodeFixer using Click."""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import click

from codefixer.config import load_config
from codefixer.constants import DEFAULT_SEVERITIES, OutputFormat, Severity, __version__
from codefixer.diff import TextEdit, apply_patch, diff_to_edits
from codefixer.explain import RULE_CATALOG, format_rule_detail, format_rule_table
from codefixer.generator import FixGenerator, create_generator
from codefixer.runner import FixResult, fix_paths, format_diff, format_results, lint_paths
from codefixer.types import CodeFixerConfig, ConfigError


def _or_default(value: object, default: str = "(provider default)") -> str:
    return default if value in (None, "") else str(value)


def _names(names: frozenset[str]) -> str:
    return ", ".join(sorted(names)) or "(none)"


def format_config_text(*, config: CodeFixerConfig) -> str:
    """Format configuration as human-readable text."""
    exclude: str = ", ".join(config.exclude[:5])
    if len(config.exclude) > 5:
        exclude += f", ... ({len(config.exclude) - 5} more)"

    sections: list[tuple[str, list[str]]] = [
        ("Files", [
            f"Include: {', '.join(config.include)}",
            f"Exclude: {exclude}",
        ]),
        ("Output", [
            f"Format: {config.output_format.value}",
            f"Show source: {config.show_source}",
        ]),
        ("Rule Severities", [
            f"{code}: {severity.value.upper()}"
            for code, severity in sorted(config.rules.severities.items())
        ]),
        ("Rule Options", [
            f"R2 globals: {_names(config.rules.r2.globals)}",
            f"R3 allow: {_names(config.rules.r3.allow)}",
        ]),
        ("Generator", [
            f"Provider: {config.generator.provider.value}",
            f"Model: {_or_default(config.generator.model)}",
            f"Base URL: {_or_default(config.generator.base_url)}",
            f"Timeout: {config.generator.timeout}s",
        ]),
    ]

    lines: list[str] = [
        "CodeFixer Configuration",
        f"Config file: {config.config_path or '(defaults)'}",
    ]
    for title, rows in sections:
        lines += ["", f"{title}:", *(f"  {row}" for row in rows)]
    return "\n".join(lines)


def format_config_json(*, config: CodeFixerConfig) -> str:
    """Format configuration as JSON."""
    rules: dict[str, Any] = {
        "severities": {code: sev.value for code, sev in config.rules.severities.items()},
        "R2": {"globals": sorted(config.rules.r2.globals)},
        "R3": {"allow": sorted(config.rules.r3.allow)},
    }
    generator: dict[str, Any] = asdict(config.generator)
    generator["provider"] = config.generator.provider.value
    data: dict[str, Any] = {
        "config_path": None if config.config_path is None else str(config.config_path),
        "include": list(config.include),
        "exclude": list(config.exclude),
        "output_format": config.output_format.value,
        "show_source": config.show_source,
        "rules": rules,
        "generator": generator,
    }
    return json.dumps(data, indent=2)


def _plural(count: int, noun: str = "file") -> str:
    return f"{count} {noun}" + ("" if count == 1 else "s")


def _configure_logging(*, verbose: bool, debug: bool) -> None:
    if debug:
        level: int = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(name)s: %(message)s", stream=sys.stderr)


@click.group()
@click.version_option(version=__version__, prog_name="codefixer")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to pyproject.toml (default: nearest one above the current directory)",
)
@click.option("--verbose", is_flag=True, help="Log file counts and timing")
@click.option("--debug", is_flag=True, help="Log per-file detail")
@click.pass_context
def cli(
    ctx: click.Context,
    *,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
) -> None:
    """CodeFixer - diagnose and fix JavaScript/TypeScript imports and async misuse."""
    _configure_logging(verbose=verbose, debug=debug)

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(path=config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        if e.path is not None:
            click.echo(f"  in: {e.path}", err=True)
        ctx.exit(1)


@cli.command()
@click.option("--validate", is_flag=True, help="Check the configuration and exit")
@click.option("--json", "as_json", is_flag=True, help="Print the configuration as JSON")
@click.pass_context
def config(ctx: click.Context, *, validate: bool, as_json: bool) -> None:
    """Show or validate configuration."""
    cfg: CodeFixerConfig = ctx.obj["config"]

    if validate:
        click.echo(f"Configuration valid: {cfg.config_path or '(defaults)'}")
    elif as_json:
        click.echo(format_config_json(config=cfg))
    else:
        click.echo(format_config_text(config=cfg))


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Output format (overrides config)",
)
@click.option(
    "--show-source/--no-show-source",
    default=None,
    help="Print the offending line under each diagnostic",
)
@click.pass_context
def lint(
    ctx: click.Context,
    paths: tuple[Path, ...],
    *,
    output_format: str | None,
    show_source: bool | None,
) -> None:
    """Report diagnostics for JavaScript/TypeScript files."""
    cfg: CodeFixerConfig = ctx.obj["config"]
    if output_format is not None:
        cfg = replace(cfg, output_format=OutputFormat(output_format))
    if show_source is not None:
        cfg = replace(cfg, show_source=show_source)

    result = lint_paths(paths=paths or (Path("."),), config=cfg)
    output: str = format_results(result=result, config=cfg)
    if output:
        click.echo(output)
    ctx.exit(result.exit_code)


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--diff", "show_diff", is_flag=True, help="Print unified diffs instead of writing")
@click.option("--check", "check_only", is_flag=True, help="Exit 1 if any file would change")
@click.option(
    "--generator/--no-generator",
    "use_generator",
    default=False,
    help="Ask the configured generator for fixes (falls back to rule-based fixes)",
)
@click.pass_context
def fix(
    ctx: click.Context,
    paths: tuple[Path, ...],
    *,
    show_diff: bool,
    check_only: bool,
    use_generator: bool,
) -> None:
    """Apply fixes to JavaScript/TypeScript files."""
    cfg: CodeFixerConfig = ctx.obj["config"]

    generator: FixGenerator | None = None
    if use_generator:
        generator = create_generator(cfg.generator)
        if generator is None:
            click.echo("Warning: no generator available; using rule-based fixes only.", err=True)

    result: FixResult = fix_paths(
        paths=paths or (Path("."),),
        config=cfg,
        generator=generator,
        use_generator=use_generator,
    )
    pending: str = f"{_plural(result.files_changed)} would be changed."

    if show_diff:
        for path, (old, new) in sorted(result.changes.items()):
            click.echo(format_diff(path=path, old=old, new=new), nl=False)
        click.echo(pending)
    elif check_only:
        click.echo(pending if result.files_changed else "No changes needed.")
        ctx.exit(1 if result.files_changed else 0)
    else:
        for path, (_, new) in result.changes.items():
            path.write_text(new, encoding="utf-8")
        click.echo(f"Fixed {_plural(result.files_changed)}.")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("patch", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--check", "check_only", is_flag=True, help="Only validate the patch")
@click.option("--edits", "as_edits", is_flag=True, help="Print line edits as JSON")
@click.pass_context
def apply(
    ctx: click.Context,
    file: Path,
    patch: Path,
    *,
    check_only: bool,
    as_edits: bool,
) -> None:
    """Apply a unified diff PATCH to FILE."""
    original: str = file.read_text(encoding="utf-8")
    diff_text: str = patch.read_text(encoding="utf-8")

    patched: str | None = apply_patch(original, diff_text)
    if patched is None:
        click.echo(f"Error: patch does not apply to {file}", err=True)
        ctx.exit(1)
        return

    if check_only:
        click.echo(f"Patch applies cleanly to {file}")
    elif as_edits:
        edits: list[TextEdit] = diff_to_edits(original, diff_text) or []
        click.echo(json.dumps([asdict(edit) for edit in edits], indent=2))
    else:
        file.write_text(patched, encoding="utf-8")
        click.echo(f"Patched {file}")


@cli.command()
@click.argument("rule_code", required=False, default=None)
@click.option("--all", "show_all", is_flag=True, help="List every rule with its severity")
@click.pass_context
def explain(ctx: click.Context, rule_code: str | None, *, show_all: bool) -> None:
    """Show rule documentation and examples."""
    cfg: CodeFixerConfig = ctx.obj["config"]

    if show_all:
        click.echo(format_rule_table(
            catalog=RULE_CATALOG,
            severities={code: sev.value for code, sev in cfg.rules.severities.items()},
        ))
        return

    if rule_code is None:
        click.echo("Usage: codefixer explain <RULE_CODE> or codefixer explain --all")
        ctx.exit(1)
        return

    info = RULE_CATALOG.get(rule_code.upper())
    if info is None:
        click.echo(f"Error: Unknown rule code '{rule_code.upper()}'.", err=True)
        ctx.exit(1)
        return

    default: Severity = DEFAULT_SEVERITIES.get(info.code, Severity.OFF)
    click.echo(format_rule_detail(info=info, default_severity=default.value))


def main() -> None:
    """Main entry point for the codefixer CLI."""
    cli()


if __name__ == "__main__":
    main()
