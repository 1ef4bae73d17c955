"""R1: Unused import."""
from __future__ import annotations

from collections.abc import Sequence

from tree_sitter import Node

from codefixer.constants import QUICK_FIXABLE_RULES
from codefixer.diagnostics import Diagnostic
from codefixer.rules.base import AnalysisContext
from codefixer.scope import ImportBinding, ScopeSnapshot


class R1Rule:
    """Report imported names that are never referenced.

    The span covers the whole import statement so the rule-based fixer can
    drop the line.
    """

    @property
    def code(self) -> str:
        return "R1"

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
        diagnostics: list[Diagnostic] = []
        for name in scope.imported:
            if name in scope.used or name in scope.type_references:
                continue
            binding: ImportBinding = scope.imports[name]
            diagnostics.append(
                Diagnostic(
                    rule_id=self.code,
                    message=f"Unused import: '{name}'",
                    start=binding.start,
                    end=binding.end,
                    severity=context.config.get_severity(self.code),
                    quick_fixable=self.code in QUICK_FIXABLE_RULES,
                ),
            )
        return diagnostics
