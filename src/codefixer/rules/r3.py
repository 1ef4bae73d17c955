"""R3: Possible null/undefined member access."""
from __future__ import annotations

from collections.abc import Sequence

from tree_sitter import Node

from codefixer.constants import MEMBER_BASE_ALLOWLIST
from codefixer.diagnostics import Diagnostic
from codefixer.rules.base import AnalysisContext
from codefixer.scope import node_text


class R3Rule:
    """Flag ``obj.prop`` where ``obj`` has not been declared yet.

    This is a heuristic, not null-flow analysis: the check runs while
    declarations are still being collected, so a use that precedes its
    declaration in the file is reported too.
    """

    @property
    def code(self) -> str:
        return "R3"

    def visit(
        self,
        *,
        node: Node,
        ancestors: Sequence[Node],
        context: AnalysisContext,
    ) -> list[Diagnostic]:
        if node.type != "member_expression":
            return []
        obj: Node | None = node.child_by_field_name("object")
        prop: Node | None = node.child_by_field_name("property")
        if obj is None or prop is None:
            return []
        if obj.type != "identifier" or prop.type != "property_identifier":
            return []
        # a?.b is already guarded
        if any(child.type == "optional_chain" for child in node.children):
            return []

        obj_name: str = node_text(obj, context.source)
        if (
            obj_name in context.scope.declared
            or obj_name in MEMBER_BASE_ALLOWLIST
            or obj_name in context.config.rules.r3.allow
        ):
            return []

        prop_name: str = node_text(prop, context.source)
        return [
            Diagnostic(
                rule_id=self.code,
                message=(
                    f"Possible null/undefined access: '{obj_name}.{prop_name}' - "
                    f"'{obj_name}' might be null or undefined"
                ),
                start=node.start_byte,
                end=node.end_byte,
                severity=context.config.get_severity(self.code),
                quick_fixable=False,
            ),
        ]

    def finish(self, *, context: AnalysisContext) -> list[Diagnostic]:
        return []
