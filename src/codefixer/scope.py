"""Per-analysis scope snapshot and binding classification.

A :class:`ScopeSnapshot` is created empty for every ``analyze`` call and
filled by :func:`observe` during the single pre-order traversal. Scope is
flat: the rules only ask whether a name is bound *anywhere* in the file.
"""
from __future__ import annotations

from collections.abc import KeysView, Sequence
from dataclasses import dataclass, field
from typing import Final

from tree_sitter import Node

FUNCTION_KINDS: Final[frozenset[str]] = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
})

# Nodes that own a parameter list without being callable bodies (TS signatures).
_SIGNATURE_KINDS: Final[frozenset[str]] = frozenset({
    "function_signature",
    "method_signature",
    "abstract_method_signature",
    "call_signature",
    "construct_signature",
    "function_type",
    "constructor_type",
})

_CLASS_KINDS: Final[frozenset[str]] = frozenset({
    "class_declaration",
    "abstract_class_declaration",
    "class",
})

_NAMED_TS_DECLARATIONS: Final[frozenset[str]] = frozenset({
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "internal_module",
    "type_parameter",
})

_JSX_NAME_PARENTS: Final[frozenset[str]] = frozenset({
    "jsx_opening_element",
    "jsx_self_closing_element",
})

Span = tuple[int, int]


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """Where an imported name came from. Offsets span the whole import statement."""

    start: int
    end: int
    source_module: str


@dataclass(slots=True)
class ScopeSnapshot:
    """Transient declared/used/imported bookkeeping for one analysis run."""

    declared: set[str] = field(default_factory=set)
    declarations: dict[str, int] = field(default_factory=dict)
    imports: dict[str, ImportBinding] = field(default_factory=dict)
    references: dict[str, list[int]] = field(default_factory=dict)
    type_references: set[str] = field(default_factory=set)
    _non_references: set[Span] = field(default_factory=set)

    @property
    def used(self) -> KeysView[str]:
        """Names referenced as non-binding identifiers, in first-use order."""
        return self.references.keys()

    @property
    def imported(self) -> KeysView[str]:
        """Names bound by import statements, in first-import order."""
        return self.imports.keys()

    def declare(self, name: str, offset: int) -> None:
        self.declared.add(name)
        self.declarations.setdefault(name, offset)

    def declare_import(self, name: str, binding: ImportBinding) -> None:
        self.declare(name, binding.start)
        self.imports[name] = binding

    def reference(self, name: str, offset: int) -> None:
        self.references.setdefault(name, []).append(offset)

    def exclude(self, node: Node) -> None:
        """Mark an identifier node as a non-reference (binding or label-like)."""
        self._non_references.add((node.start_byte, node.end_byte))

    def is_excluded(self, node: Node) -> bool:
        return (node.start_byte, node.end_byte) in self._non_references


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def observe(
    *,
    node: Node,
    ancestors: Sequence[Node],
    scope: ScopeSnapshot,
    source: bytes,
) -> None:
    """Record the bindings and references a single node contributes."""
    kind: str = node.type

    if kind == "import_statement":
        _observe_import(node=node, scope=scope, source=source)
    elif kind == "variable_declarator":
        _bind_pattern(node.child_by_field_name("name"), node.start_byte, scope, source)
    elif kind in FUNCTION_KINDS or kind in _SIGNATURE_KINDS:
        name: Node | None = node.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            _bind(name, node.start_byte, scope, source)
        _bind_parameters(node, scope, source)
    elif kind in _CLASS_KINDS or kind in _NAMED_TS_DECLARATIONS:
        name = node.child_by_field_name("name")
        while name is not None and name.type in ("nested_identifier", "member_expression"):
            # namespace A.B.C binds A
            name = name.child_by_field_name("object") or (
                name.named_children[0] if name.named_children else None
            )
        if name is not None and name.type in ("identifier", "type_identifier"):
            _bind(name, node.start_byte, scope, source)
    elif kind == "catch_clause":
        _bind_pattern(node.child_by_field_name("parameter"), node.start_byte, scope, source)
    elif kind == "for_in_statement":
        if node.child_by_field_name("kind") is not None:
            _bind_pattern(node.child_by_field_name("left"), node.start_byte, scope, source)
    elif kind == "index_signature":
        _exclude_field(node, "name", scope)
    elif kind == "export_specifier":
        _observe_export_specifier(node=node, ancestors=ancestors, scope=scope)
    elif kind == "namespace_export":
        for child in node.named_children:
            scope.exclude(child)
    elif kind in _JSX_NAME_PARENTS:
        name = node.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            if not node_text(name, source)[:1].isupper():
                scope.exclude(name)
    elif kind == "jsx_closing_element":
        _exclude_field(node, "name", scope)
    elif kind in ("identifier", "shorthand_property_identifier"):
        if not scope.is_excluded(node):
            scope.reference(node_text(node, source), node.start_byte)
    elif kind == "type_identifier":
        if not scope.is_excluded(node):
            scope.type_references.add(node_text(node, source))


def _observe_import(*, node: Node, scope: ScopeSnapshot, source: bytes) -> None:
    module: Node | None = node.child_by_field_name("source")
    if module is None:
        module = next(
            (
                s
                for clause in node.named_children
                if clause.type == "import_require_clause"
                for s in clause.named_children
                if s.type == "string"
            ),
            None,
        )
    binding: ImportBinding = ImportBinding(
        start=node.start_byte,
        end=node.end_byte,
        source_module=_string_value(module, source),
    )
    for local in _import_locals(node, scope):
        scope.exclude(local)
        scope.declare_import(node_text(local, source), binding)


def _import_locals(node: Node, scope: ScopeSnapshot) -> list[Node]:
    """Return the local binding identifiers of an import statement."""
    locals_: list[Node] = []
    for clause in node.named_children:
        if clause.type == "import_require_clause":
            # import x = require('y')
            locals_.extend(c for c in clause.named_children if c.type == "identifier")
            continue
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier":
                locals_.append(part)
            elif part.type == "namespace_import":
                locals_.extend(c for c in part.named_children if c.type == "identifier")
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    imported: Node | None = spec.child_by_field_name("name")
                    alias: Node | None = spec.child_by_field_name("alias")
                    if imported is not None:
                        scope.exclude(imported)
                    local: Node | None = alias or imported
                    if local is not None and local.type == "identifier":
                        locals_.append(local)
    return locals_


def _observe_export_specifier(
    *, node: Node, ancestors: Sequence[Node], scope: ScopeSnapshot,
) -> None:
    _exclude_field(node, "alias", scope)
    statement: Node | None = next(
        (a for a in reversed(ancestors) if a.type == "export_statement"), None,
    )
    # Re-exports (`export { a } from 'x'`) do not touch local names.
    if statement is not None and statement.child_by_field_name("source") is not None:
        _exclude_field(node, "name", scope)


def _bind_parameters(node: Node, scope: ScopeSnapshot, source: bytes) -> None:
    single: Node | None = node.child_by_field_name("parameter")
    if single is not None:
        _bind_pattern(single, node.start_byte, scope, source)
    params: Node | None = node.child_by_field_name("parameters")
    if params is None:
        return
    for param in params.named_children:
        _bind_pattern(param, node.start_byte, scope, source)


def _bind_pattern(
    pattern: Node | None, offset: int, scope: ScopeSnapshot, source: bytes,
) -> None:
    """Bind every name introduced by a (possibly destructuring) pattern."""
    if pattern is None:
        return
    stack: list[Node] = [pattern]
    while stack:
        current: Node = stack.pop()
        kind: str = current.type
        if kind in ("identifier", "shorthand_property_identifier_pattern"):
            _bind(current, offset, scope, source)
        elif kind in ("object_pattern", "array_pattern", "rest_pattern"):
            stack.extend(reversed(current.named_children))
        elif kind == "pair_pattern":
            _push_field(stack, current, "value")
        elif kind in ("assignment_pattern", "object_assignment_pattern"):
            _push_field(stack, current, "left")
        elif kind in ("required_parameter", "optional_parameter"):
            _push_field(stack, current, "pattern")


def _bind(node: Node, offset: int, scope: ScopeSnapshot, source: bytes) -> None:
    scope.exclude(node)
    scope.declare(node_text(node, source), offset)


def _push_field(stack: list[Node], node: Node, field_name: str) -> None:
    child: Node | None = node.child_by_field_name(field_name)
    if child is not None:
        stack.append(child)


def _exclude_field(node: Node, field_name: str, scope: ScopeSnapshot) -> None:
    child: Node | None = node.child_by_field_name(field_name)
    if child is not None:
        scope.exclude(child)


def _string_value(node: Node | None, source: bytes) -> str:
    if node is None:
        return ""
    return node_text(node, source)[1:-1]
