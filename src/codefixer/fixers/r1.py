"""R1 fixer: delete the line holding an unused import."""
from __future__ import annotations

from codefixer.constants import DEFAULT_NEW_LABEL, DEFAULT_OLD_LABEL
from codefixer.diagnostics import Diagnostic


def fix_unused_import(source: str, diagnostic: Diagnostic) -> str | None:
    """
    Fix R1: return a one-hunk diff that removes the line containing the import.

    Multi-line imports lose only their first line; surrounding blank lines
    are left alone.
    """
    if diagnostic.rule_id != "R1":
        return None

    lines: list[str] = source.split("\n")
    index: int | None = _line_index_at(lines, diagnostic.start)
    if index is None:
        return None

    number: int = index + 1
    return (
        f"--- {DEFAULT_OLD_LABEL}\n"
        f"+++ {DEFAULT_NEW_LABEL}\n"
        f"@@ -{number},1 +{number},0 @@\n"
        f"-{lines[index]}\n"
    )


def _line_index_at(lines: list[str], offset: int) -> int | None:
    """Return the 0-based line containing a UTF-8 byte offset."""
    if offset < 0:
        return None
    line_start: int = 0
    for index, line in enumerate(lines):
        line_end: int = line_start + len(line.encode("utf-8"))
        if line_start <= offset <= line_end:
            return index
        line_start = line_end + 1
    return None
