"""R4: Missing await on a promise chain inside an async function."""
from __future__ import annotations

from collections.abc import Sequence

from tree_sitter import Node

from codefixer.diagnostics import Diagnostic
from codefixer.rules.base import AnalysisContext
from codefixer.scope import FUNCTION_KINDS, node_text


class R4Rule:
    """Flag un-awaited ``.then(...)`` calls whose nearest function is async."""

    @property
    def code(self) -> str:
        return "R4"

    def visit(
        self,
        *,
        node: Node,
        ancestors: Sequence[Node],
        context: AnalysisContext,
    ) -> list[Diagnostic]:
        if node.type != "call_expression":
            return []
        callee: Node | None = node.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            return []
        prop: Node | None = callee.child_by_field_name("property")
        if prop is None or node_text(prop, context.source) != "then":
            return []

        if any(a.type == "await_expression" for a in ancestors):
            return []
        function: Node | None = _nearest_function(ancestors)
        if function is None or not _is_async(function):
            return []

        return [
            Diagnostic(
                rule_id=self.code,
                message="Missing await on promise in async function",
                start=node.start_byte,
                end=node.end_byte,
                severity=context.config.get_severity(self.code),
                quick_fixable=False,
            ),
        ]

    def finish(self, *, context: AnalysisContext) -> list[Diagnostic]:
        return []


def _nearest_function(ancestors: Sequence[Node]) -> Node | None:
    for ancestor in reversed(ancestors):
        if ancestor.type in FUNCTION_KINDS:
            return ancestor
    return None


def _is_async(function: Node) -> bool:
    """Check for the anonymous ``async`` keyword token among direct children."""
    return any(child.type == "async" for child in function.children)
