"""Rule documentation catalog for the codefixer explain command."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class RuleInfo:
    code: str
    name: str
    category: str
    description: str
    bad_example: str
    good_example: str
    has_autofix: bool
    fix_description: str
    config_options: str


RULE_CATALOG: Final[dict[str, RuleInfo]] = {
    "R1": RuleInfo(
        code="R1",
        name="Unused Import",
        category="imports",
        description=(
            "A name bound by an import statement is never referenced.\n"
            "Type-only references in TypeScript count as uses.\n"
            "The whole import statement is reported, once per unused name."
        ),
        bad_example="import { readFile } from 'fs';\nconsole.log(1);",
        good_example="console.log(1);",
        has_autofix=True,
        fix_description="Deletes the line holding the import statement.",
        config_options="",
    ),
    "R2": RuleInfo(
        code="R2",
        name="Missing Import",
        category="imports",
        description=(
            "An identifier is referenced but never declared, imported,\n"
            "or known as a runtime global. Each reference is reported\n"
            "at its own position."
        ),
        bad_example="const x = lodash.map(items, f);",
        good_example="import lodash from 'lodash';\nconst x = lodash.map(items, f);",
        has_autofix=False,
        fix_description="",
        config_options=(
            "[tool.codefixer.rules.R2]\n"
            "globals = [\"describe\", \"it\"]  # Extra names treated as defined"
        ),
    ),
    "R3": RuleInfo(
        code="R3",
        name="Possible Null/Undefined Access",
        category="safety",
        description=(
            "A property is read from an identifier that has not been\n"
            "declared earlier in the file. Optional chaining (a?.b)\n"
            "is never reported; console and process are always allowed."
        ),
        bad_example="const n = user.name;",
        good_example="const n = user?.name;",
        has_autofix=False,
        fix_description="",
        config_options=(
            "[tool.codefixer.rules.R3]\n"
            "allow = [\"window\", \"document\"]  # Bases that are never null"
        ),
    ),
    "R4": RuleInfo(
        code="R4",
        name="Missing Await",
        category="async",
        description=(
            "A .then() call inside an async function is not awaited.\n"
            "Only the nearest enclosing function decides whether the\n"
            "call is in an async context."
        ),
        bad_example="async function f() {\n  fetch(u).then(r => r.json());\n}",
        good_example="async function f() {\n  await fetch(u).then(r => r.json());\n}",
        has_autofix=False,
        fix_description="",
        config_options="",
    ),
}


def _indented(text: str, prefix: str = "      ") -> list[str]:
    return [f"{prefix}{line}" for line in text.splitlines()]


def format_rule_detail(*, info: RuleInfo, default_severity: str) -> str:
    """Format a single rule's full documentation."""
    autofix: str = "Yes" if info.has_autofix else "No"
    lines: list[str] = [
        f"{info.code}: {info.name}",
        f"Category: {info.category} | Default severity: {default_severity} | Autofix: {autofix}",
        "",
        *_indented(info.description, "  "),
        "",
        "  Bad:",
        *_indented(info.bad_example),
        "  Good:",
        *_indented(info.good_example),
    ]
    if info.fix_description:
        lines += ["", f"  Fix: {info.fix_description}"]
    if info.config_options:
        lines += ["", "  Config:", *_indented(info.config_options)]
    lines += ["", f"  Disable: [tool.codefixer.rules] {info.code} = \"off\""]
    return "\n".join(lines)


def format_rule_table(*, catalog: dict[str, RuleInfo], severities: dict[str, str]) -> str:
    """One row per rule: code, configured severity, name and autofix marker."""
    width: int = max(len(info.name) for info in catalog.values())
    rows: list[tuple[str, str, str, str]] = [("CODE", "SEVERITY", "NAME", "FIX")]
    rows += [
        (code, severities.get(code, "off"), catalog[code].name,
         "yes" if catalog[code].has_autofix else "-")
        for code in sorted(catalog)
    ]
    return "\n".join(
        f"{code:<5} {severity:<8} {name:<{width}} {fix}".rstrip()
        for code, severity, name, fix in rows
    )
