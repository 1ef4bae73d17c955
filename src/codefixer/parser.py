"""Tree-sitter parsing with syntax error detection for CodeFixer."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language as Grammar
from tree_sitter import Node, Parser, Tree

from codefixer.constants import SOURCE_SUFFIXES, Language
from codefixer.diagnostics import SourceLocation, offset_to_location

log = logging.getLogger(__name__)

# TypeScript is tried with the plain grammar first; the TSX dialect accepts
# JSX but rejects ``<T>value`` casts, so it only serves as a retry.
_GRAMMAR_NAMES: Final[dict[Language, tuple[str, ...]]] = {
    Language.JS: ("javascript",),
    Language.TS: ("typescript", "tsx"),
}

_GRAMMARS: dict[str, Grammar] = {}


@dataclass(frozen=True, slots=True)
class SyntaxErrorInfo:
    """Syntax error details. Line/column are 1-based."""

    line: int
    column: int
    message: str
    source_line: str | None


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Result of parsing a JavaScript/TypeScript source."""

    file: Path | None
    language: Language
    tree: Tree | None
    source: str
    source_bytes: bytes
    syntax_error: SyntaxErrorInfo | None


def language_for_path(path: Path) -> Language | None:
    """Return the language selector for a file suffix, or None if unsupported."""
    return SOURCE_SUFFIXES.get(path.suffix.lower())


def _get_grammar(name: str) -> Grammar:
    """Lazily build and cache a tree-sitter grammar."""
    grammar: Grammar | None = _GRAMMARS.get(name)
    if grammar is None:
        if name == "javascript":
            grammar = Grammar(tree_sitter_javascript.language())
        elif name == "typescript":
            grammar = Grammar(tree_sitter_typescript.language_typescript())
        elif name == "tsx":
            grammar = Grammar(tree_sitter_typescript.language_tsx())
        else:
            raise ValueError(f"Unknown grammar: {name}")
        _GRAMMARS[name] = grammar
    return grammar


def parse_source(
    *, source: str, language: Language, file: Path | None = None,
) -> ParseResult:
    """Parse source text, returning a tree or the first syntax error."""
    try:
        source_bytes: bytes = source.encode("utf-8")
    except UnicodeEncodeError as e:
        return _failed(
            file=file,
            language=language,
            source=source,
            source_bytes=b"",
            error=SyntaxErrorInfo(
                line=1, column=1, message=f"Encoding error: {e}", source_line=None,
            ),
        )

    first_error: SyntaxErrorInfo | None = None
    for grammar_name in _GRAMMAR_NAMES[language]:
        tree: Tree = Parser(_get_grammar(grammar_name)).parse(source_bytes)
        if not tree.root_node.has_error:
            return ParseResult(
                file=file,
                language=language,
                tree=tree,
                source=source,
                source_bytes=source_bytes,
                syntax_error=None,
            )
        log.debug("%s grammar rejected %s", grammar_name, file or "<source>")
        if first_error is None:
            first_error = _describe_error(root=tree.root_node, source_bytes=source_bytes)

    return _failed(
        file=file,
        language=language,
        source=source,
        source_bytes=source_bytes,
        error=first_error,
    )


def parse_file(*, file: Path, language: Language | None = None) -> ParseResult:
    """Read and parse a source file."""
    if language is None:
        language = language_for_path(file) or Language.JS
    try:
        source: str = file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        return _failed(
            file=file,
            language=language,
            source="",
            source_bytes=b"",
            error=SyntaxErrorInfo(
                line=1, column=1, message=f"Encoding error: {e}", source_line=None,
            ),
        )
    except OSError as e:
        return _failed(
            file=file,
            language=language,
            source="",
            source_bytes=b"",
            error=SyntaxErrorInfo(
                line=1, column=1, message=f"Cannot read file: {e}", source_line=None,
            ),
        )
    return parse_source(source=source, language=language, file=file)


def _failed(
    *,
    file: Path | None,
    language: Language,
    source: str,
    source_bytes: bytes,
    error: SyntaxErrorInfo | None,
) -> ParseResult:
    return ParseResult(
        file=file,
        language=language,
        tree=None,
        source=source,
        source_bytes=source_bytes,
        syntax_error=error,
    )


def _describe_error(*, root: Node, source_bytes: bytes) -> SyntaxErrorInfo:
    """Locate the first ERROR or MISSING node in document order."""
    offending: Node = root
    message: str = "Syntax error"
    stack: list[Node] = [root]
    while stack:
        node: Node = stack.pop()
        if node.is_missing:
            offending, message = node, f"Missing '{node.type}'"
            break
        if node.type == "ERROR":
            offending, message = node, "Unexpected syntax"
            break
        if node.has_error:
            stack.extend(reversed(node.children))

    location: SourceLocation = offset_to_location(
        source=source_bytes, offset=offending.start_byte,
    )
    lines: list[bytes] = source_bytes.split(b"\n")
    source_line: str | None = None
    if 1 <= location.line <= len(lines):
        source_line = lines[location.line - 1].decode("utf-8", errors="replace")
    return SyntaxErrorInfo(
        line=location.line,
        column=location.column,
        message=message,
        source_line=source_line,
    )
