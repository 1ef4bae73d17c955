"""Fix orchestration: generate, validate, fall back to the rule-based fixer."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from codefixer.constants import Language
from codefixer.diagnostics import Diagnostic
from codefixer.diff import create_unified_diff, patch_changes
from codefixer.fixers.pipeline import fix_all
from codefixer.generator import FixGenerator, GeneratedFix, GenerationError, RepoContext
from codefixer.types import CodeFixerConfig

log = logging.getLogger(__name__)


class FixStatus(Enum):
    """Outcome categories, each with its own user-facing message."""

    FIXED = "fixed"
    NO_ISSUES = "no_issues"
    GENERATION_FAILED = "generation_failed"
    VALIDATION_FAILED = "validation_failed"


_MESSAGES: dict[FixStatus, str] = {
    FixStatus.FIXED: "Fix generated.",
    FixStatus.NO_ISSUES: "No issues to fix.",
    FixStatus.GENERATION_FAILED: "Fix generation failed.",
    FixStatus.VALIDATION_FAILED: "Fix was generated but failed validation.",
}


@dataclass(frozen=True, slots=True)
class FixOutcome:
    """Result of one fix request. ``diff`` is set only when status is FIXED."""

    status: FixStatus
    diff: str | None = None
    fallback: bool = False
    rationale: str = ""
    risks: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == FixStatus.FIXED

    @property
    def message(self) -> str:
        text: str = _MESSAGES[self.status]
        if self.ok and self.fallback:
            text = "Rule-based fix generated."
        if self.error:
            text = f"{text} {self.error}"
        return text


def generate_validated_fix(
    *,
    source: str,
    language: Language,
    file_path: str,
    diagnostics: Sequence[Diagnostic],
    generator: FixGenerator | None,
    repo_context: RepoContext | None = None,
    config: CodeFixerConfig | None = None,
) -> FixOutcome:
    """Produce a diff that is known to apply to ``source`` and change it.

    A generator failure or an unusable generated diff falls back to the
    rule-based fixer when an R1 diagnostic is present; otherwise the failure
    is returned as is.
    """
    if not diagnostics:
        return FixOutcome(status=FixStatus.NO_ISSUES)

    failure: FixOutcome
    if generator is None:
        failure = FixOutcome(
            status=FixStatus.GENERATION_FAILED,
            error="No generator configured.",
        )
    else:
        try:
            generated: GeneratedFix = generator.generate_fix(
                source=source,
                language=language,
                file_path=file_path,
                diagnostics=diagnostics,
                repo_context=repo_context,
            )
        except GenerationError as e:
            log.warning("Generation failed for %s: %s", file_path, e)
            failure = FixOutcome(status=FixStatus.GENERATION_FAILED, error=str(e))
        else:
            if patch_changes(source, generated.diff):
                return FixOutcome(
                    status=FixStatus.FIXED,
                    diff=generated.diff,
                    rationale=generated.rationale,
                    risks=generated.risks,
                )
            log.warning("Generated patch for %s is invalid", file_path)
            failure = FixOutcome(
                status=FixStatus.VALIDATION_FAILED,
                error="Generated patch is invalid.",
            )

    fallback: FixOutcome | None = _rule_based_fallback(
        source=source, language=language, diagnostics=diagnostics, config=config,
    )
    if fallback is not None:
        log.info("Using rule-based fix for %s", file_path)
        return fallback
    return failure


def _rule_based_fallback(
    *,
    source: str,
    language: Language,
    diagnostics: Sequence[Diagnostic],
    config: CodeFixerConfig | None,
) -> FixOutcome | None:
    """Remove every unused import ``fix_all`` can drop without breaking the file."""
    if not any(d.rule_id == "R1" for d in diagnostics):
        return None
    fixed: str = fix_all(source=source, language=language, config=config)
    if fixed == source:
        return None
    diff_text: str = create_unified_diff(source, fixed)
    if not patch_changes(source, diff_text):
        return None
    return FixOutcome(
        status=FixStatus.FIXED,
        diff=diff_text,
        fallback=True,
        rationale="Removed unused import lines.",
    )
