"""Rule protocol for CodeFixer diagnostic rules."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tree_sitter import Node

from codefixer.diagnostics import Diagnostic
from codefixer.scope import ScopeSnapshot
from codefixer.types import CodeFixerConfig


@dataclass(slots=True)
class AnalysisContext:
    """State shared by all rules during one analysis run."""

    source: bytes
    scope: ScopeSnapshot
    config: CodeFixerConfig


@runtime_checkable
class Rule(Protocol):
    """Structural interface for rules.

    ``visit`` is called for every named node in document order, while the
    scope is still being filled; ``finish`` runs once after the traversal
    against the completed scope.
    """

    @property
    def code(self) -> str: ...

    def visit(
        self,
        *,
        node: Node,
        ancestors: Sequence[Node],
        context: AnalysisContext,
    ) -> list[Diagnostic]: ...

    def finish(self, *, context: AnalysisContext) -> list[Diagnostic]: ...
