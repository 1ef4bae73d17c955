"""R2: Missing import for a referenced name."""
from __future__ import annotations

from collections.abc import Sequence

from tree_sitter import Node

from codefixer.constants import KNOWN_GLOBALS
from codefixer.diagnostics import Diagnostic
from codefixer.rules.base import AnalysisContext
from codefixer.scope import ScopeSnapshot


class R2Rule:
    """Report every reference to a name that is neither bound nor a known global."""

    @property
    def code(self) -> str:
        return "R2"

    def visit(
        self,
        *,
        node: Node,
        ancestors: Sequence[Node],
        context: AnalysisContext,
    ) -> list[Diagnostic]:
        return []

    def finish(self, *, context: AnalysisContext) -> list[Diagnostic]:
        scope: ScopeSnapshot = context.scope
        extra: frozenset[str] = context.config.rules.r2.globals
        diagnostics: list[Diagnostic] = []
        for name in scope.used:
            if name in scope.declared or name in KNOWN_GLOBALS or name in extra:
                continue
            width: int = len(name.encode("utf-8"))
            for position in scope.references[name]:
                diagnostics.append(
                    Diagnostic(
                        rule_id=self.code,
                        message=f"Missing import for '{name}'",
                        start=position,
                        end=position + width,
                        severity=context.config.get_severity(self.code),
                        quick_fixable=False,
                    ),
                )
        return diagnostics
