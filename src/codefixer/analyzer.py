"""Diagnostic rule engine: one traversal, then scope reconciliation."""
from __future__ import annotations

import logging
from collections.abc import Iterator

from tree_sitter import Node

from codefixer.constants import Language
from codefixer.diagnostics import Diagnostic
from codefixer.parser import ParseResult, parse_source
from codefixer.rules.base import AnalysisContext, Rule
from codefixer.rules.registry import get_enabled_rules
from codefixer.scope import ScopeSnapshot, observe
from codefixer.types import CodeFixerConfig

log = logging.getLogger(__name__)


def analyze(
    *,
    language: Language | str,
    source: str,
    config: CodeFixerConfig | None = None,
) -> list[Diagnostic]:
    """Return diagnostics for ``source``; an unparseable source yields ``[]``.

    ``language`` may be a ``Language`` or its value (``"js"``, ``"ts"``).
    """
    try:
        language = Language(language)
    except ValueError:
        log.debug("Unsupported language %r", language)
        return []
    if config is None:
        config = CodeFixerConfig()
    result: ParseResult = parse_source(source=source, language=language)
    if result.tree is None:
        if result.syntax_error is not None:
            log.debug(
                "Parse failure at %d:%d: %s",
                result.syntax_error.line,
                result.syntax_error.column,
                result.syntax_error.message,
            )
        return []
    return analyze_parsed(parse_result=result, config=config)


def analyze_parsed(
    *,
    parse_result: ParseResult,
    config: CodeFixerConfig,
) -> list[Diagnostic]:
    """Run all enabled rules over an already parsed source."""
    if parse_result.tree is None:
        return []

    rules: list[Rule] = get_enabled_rules(config=config)
    context: AnalysisContext = AnalysisContext(
        source=parse_result.source_bytes,
        scope=ScopeSnapshot(),
        config=config,
    )
    diagnostics: list[Diagnostic] = []

    for node, ancestors in _walk(parse_result.tree.root_node):
        observe(
            node=node,
            ancestors=ancestors,
            scope=context.scope,
            source=context.source,
        )
        for rule in rules:
            diagnostics.extend(
                rule.visit(node=node, ancestors=ancestors, context=context),
            )

    for rule in rules:
        diagnostics.extend(rule.finish(context=context))

    log.debug("%d diagnostics", len(diagnostics))
    return diagnostics


def _walk(root: Node) -> Iterator[tuple[Node, list[Node]]]:
    """Pre-order walk over named nodes, yielding each node with its ancestors.

    The yielded ancestor list is shared and only valid until the next step.
    """
    stack: list[tuple[Node, int]] = [(root, 0)]
    ancestors: list[Node] = []
    while stack:
        node, depth = stack.pop()
        del ancestors[depth:]
        yield node, ancestors
        ancestors.append(node)
        stack.extend((child, depth + 1) for child in reversed(node.named_children))
