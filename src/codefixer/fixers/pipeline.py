"""Rule-based fix generation and chaining."""

from __future__ import annotations

import logging
from collections.abc import Callable

from codefixer.analyzer import analyze
from codefixer.constants import QUICK_FIXABLE_RULES, Language
from codefixer.diagnostics import Diagnostic
from codefixer.diff import apply_patch
from codefixer.fixers.r1 import fix_unused_import
from codefixer.parser import parse_source
from codefixer.types import CodeFixerConfig

log = logging.getLogger(__name__)

_FIXERS: dict[str, Callable[[str, Diagnostic], str | None]] = {
    "R1": fix_unused_import,
}


def generate_fix(source: str, diagnostic: Diagnostic) -> str | None:
    """Return a rule-based unified diff for ``diagnostic``, or None when no fixer exists."""
    fixer: Callable[[str, Diagnostic], str | None] | None = _FIXERS.get(diagnostic.rule_id)
    if fixer is None:
        return None
    return fixer(source, diagnostic)


def fix_all(
    *,
    source: str,
    language: Language,
    config: CodeFixerConfig | None = None,
) -> str:
    """Apply rule-based fixes one at a time, re-analyzing after each.

    A step is discarded, and fixing stops, when its patch does not apply,
    changes nothing, breaks parsing, or introduces new missing-import errors
    (an import line that also bound a used name).
    """
    if config is None:
        config = CodeFixerConfig()

    diagnostics: list[Diagnostic] = analyze(language=language, source=source, config=config)
    # Every step removes a line, so the number of fixable diagnostics bounds the loop.
    for _ in range(len(diagnostics)):
        target: Diagnostic | None = next(
            (d for d in diagnostics if d.rule_id in QUICK_FIXABLE_RULES and d.quick_fixable),
            None,
        )
        if target is None:
            break

        diff_text: str | None = generate_fix(source, target)
        patched: str | None = apply_patch(source, diff_text) if diff_text else None
        if patched is None or patched == source:
            log.debug("Fix for %s at %d did not apply", target.rule_id, target.start)
            break
        if parse_source(source=patched, language=language).tree is None:
            log.debug("Fix for %s at %d breaks parsing", target.rule_id, target.start)
            break

        after: list[Diagnostic] = analyze(language=language, source=patched, config=config)
        if _missing_imports(after) > _missing_imports(diagnostics):
            log.debug("Fix for %s at %d removes a used binding", target.rule_id, target.start)
            break

        source, diagnostics = patched, after

    return source


def _missing_imports(diagnostics: list[Diagnostic]) -> int:
    return sum(1 for d in diagnostics if d.rule_id == "R2")
