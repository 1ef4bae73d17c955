"""Unified diff parsing, generation, application and validation.

Documents are handled as ``\\n``-separated lines plus a flag recording
whether the text ends with a newline; ``\\r`` stays part of line content so
CRLF documents round-trip unchanged.
"""
from __future__ import annotations

import difflib
import logging
import re
from dataclasses import dataclass, field
from typing import Final

from codefixer.constants import DEFAULT_NEW_LABEL, DEFAULT_OLD_LABEL, NO_NEWLINE_MARKER

log = logging.getLogger(__name__)

_HUNK_HEADER: Final[re.Pattern[str]] = re.compile(r"@@ -(\d+),?(\d*) \+(\d+),?(\d*) @@")


@dataclass(slots=True)
class Hunk:
    """One change block. Starts and counts are 1-based, as in the header."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[str] = field(default_factory=list)

    def body(self) -> list[str]:
        """Return the body lines covered by the header counts.

        Trailing ``\\`` markers are kept; anything past the counted lines is
        ignored.
        """
        old_seen: int = 0
        new_seen: int = 0
        body: list[str] = []
        for line in self.lines:
            if old_seen >= self.old_lines and new_seen >= self.new_lines:
                if line.startswith("\\"):
                    body.append(line)
                    continue
                break
            body.append(line)
            tag: str = line[:1]
            if tag == "-":
                old_seen += 1
            elif tag == "+":
                new_seen += 1
            elif tag in (" ", ""):
                old_seen += 1
                new_seen += 1
        return body


@dataclass(slots=True)
class ParsedDiff:
    """A single-file unified diff with at least one hunk."""

    old_file_name: str
    new_file_name: str
    hunks: list[Hunk]


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace original lines ``[start_line, end_line)`` (0-based) with ``new_text``."""

    start_line: int
    end_line: int
    new_text: str


def parse_unified_diff(diff_text: str) -> ParsedDiff | None:
    """Parse unified diff text; ``None`` when it contains no hunk."""
    lines: list[str] = diff_text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    old_file_name: str = ""
    new_file_name: str = ""
    hunks: list[Hunk] = []
    current: Hunk | None = None
    # Lines still owed to the open hunk; file headers are only recognised
    # once it is satisfied, so "--- x" can still be a removed "-- x" line.
    old_owed: int = 0
    new_owed: int = 0

    for line in lines:
        header_allowed: bool = current is None or (old_owed <= 0 and new_owed <= 0)
        if line.startswith("@@"):
            if current is not None:
                hunks.append(current)
                current = None
            match: re.Match[str] | None = _HUNK_HEADER.match(line)
            if match is None:
                log.debug("Ignoring malformed hunk header: %r", line)
                continue
            current = Hunk(
                old_start=int(match.group(1)),
                old_lines=int(match.group(2)) if match.group(2) else 1,
                new_start=int(match.group(3)),
                new_lines=int(match.group(4)) if match.group(4) else 1,
            )
            old_owed, new_owed = current.old_lines, current.new_lines
        elif header_allowed and line.startswith("---"):
            old_file_name = line[4:].strip()
        elif header_allowed and line.startswith("+++"):
            new_file_name = line[4:].strip()
        elif current is not None:
            current.lines.append(line)
            tag: str = line[:1]
            if tag in ("-", " ", ""):
                old_owed -= 1
            if tag in ("+", " ", ""):
                new_owed -= 1

    if current is not None:
        hunks.append(current)

    if not hunks:
        return None

    return ParsedDiff(
        old_file_name=old_file_name,
        new_file_name=new_file_name,
        hunks=hunks,
    )


def apply_patch(original: str, diff_text: str) -> str | None:
    """Apply a unified diff to ``original``; ``None`` if it does not apply cleanly."""
    parsed: ParsedDiff | None = parse_unified_diff(diff_text)
    if parsed is None:
        log.debug("Patch has no hunks")
        return None

    lines, trailing_newline = _split_document(original)
    shift: int = 0
    floor: int = 0

    for index, hunk in enumerate(parsed.hunks):
        sides: _HunkSides | None = _hunk_sides(hunk)
        if sides is None:
            log.debug("Hunk %d is malformed", index + 1)
            return None

        anchor: int = hunk.old_start - 1 if sides.old else hunk.old_start
        position: int | None = _locate(
            lines=lines,
            needle=sides.old,
            expected=anchor + shift,
            floor=floor,
            search=sides.has_context,
        )
        if position is None:
            log.debug("Hunk %d does not match the document", index + 1)
            return None

        lines[position:position + len(sides.old)] = sides.new
        shift = position - anchor + len(sides.new) - len(sides.old)
        floor = position + len(sides.new)
        if sides.new_missing_newline:
            trailing_newline = False
        elif sides.old_missing_newline:
            trailing_newline = True

    return _join_document(lines, trailing_newline)


def create_unified_diff(
    original: str,
    modified: str,
    old_label: str = DEFAULT_OLD_LABEL,
    new_label: str = DEFAULT_NEW_LABEL,
    *,
    context: int = 3,
) -> str:
    """Return a unified diff from ``original`` to ``modified``.

    Identical inputs produce the two file header lines only.
    """
    diff_lines: list[str] = list(
        difflib.unified_diff(
            _split_keepends(original),
            _split_keepends(modified),
            fromfile=old_label,
            tofile=new_label,
            n=context,
        )
    )
    if not diff_lines:
        return f"--- {old_label}\n+++ {new_label}\n"

    output: list[str] = []
    for line in diff_lines:
        if line.endswith("\n"):
            output.append(line)
        else:
            output.append(f"{line}\n{NO_NEWLINE_MARKER}\n")
    return "".join(output)


def validate_patch(original: str, diff_text: str) -> bool:
    """True iff the diff applies cleanly to ``original``."""
    return apply_patch(original, diff_text) is not None


def patch_changes(original: str, diff_text: str) -> bool:
    """True iff the diff applies and actually changes ``original``."""
    patched: str | None = apply_patch(original, diff_text)
    return patched is not None and patched != original


def diff_to_edits(original: str, diff_text: str) -> list[TextEdit] | None:
    """Derive one line-range edit per changing hunk; ``None`` if the diff has no hunk."""
    parsed: ParsedDiff | None = parse_unified_diff(diff_text)
    if parsed is None:
        return None

    edits: list[TextEdit] = []
    for hunk in parsed.hunks:
        old_cursor: int = hunk.old_start - 1 if hunk.old_lines > 0 else hunk.old_start
        start: int | None = None
        end: int = old_cursor
        replacement: list[str] = []
        pending_context: list[str] = []

        for line in hunk.body():
            tag: str = line[:1]
            text: str = line[1:]
            if tag == "\\":
                continue
            if tag in ("-", "+"):
                if start is None:
                    start = old_cursor
                replacement.extend(pending_context)
                pending_context = []
                if tag == "-":
                    old_cursor += 1
                else:
                    replacement.append(text)
                end = old_cursor
            else:
                if start is not None:
                    pending_context.append(text)
                old_cursor += 1

        if start is not None and (replacement or start != end):
            edits.append(
                TextEdit(start_line=start, end_line=end, new_text="\n".join(replacement)),
            )

    return edits


@dataclass(slots=True)
class _HunkSides:
    old: list[str] = field(default_factory=list)
    new: list[str] = field(default_factory=list)
    has_context: bool = False
    old_missing_newline: bool = False
    new_missing_newline: bool = False


def _hunk_sides(hunk: Hunk) -> _HunkSides | None:
    """Split a hunk body into the old and new line sequences."""
    sides: _HunkSides = _HunkSides()
    previous: str | None = None
    for line in hunk.body():
        tag: str = line[:1]
        if tag == "\\":
            if previous in ("-", " "):
                sides.old_missing_newline = True
            if previous in ("+", " "):
                sides.new_missing_newline = True
            continue
        if tag == "-":
            sides.old.append(line[1:])
        elif tag == "+":
            sides.new.append(line[1:])
        elif tag in (" ", ""):
            sides.old.append(line[1:])
            sides.new.append(line[1:])
            sides.has_context = True
        else:
            return None
        previous = tag or " "
    return sides


def _locate(
    *,
    lines: list[str],
    needle: list[str],
    expected: int,
    floor: int,
    search: bool,
) -> int | None:
    """Find where ``needle`` matches, preferring ``expected``.

    Hunks without context lines only match at their stated position.
    """
    last: int = len(lines) - len(needle)
    if last < floor:
        return None

    def matches(position: int) -> bool:
        return floor <= position <= last and lines[position:position + len(needle)] == needle

    if matches(expected):
        return expected
    if not search:
        return None
    for distance in range(1, max(expected - floor, last - expected) + 1):
        for candidate in (expected - distance, expected + distance):
            if matches(candidate):
                return candidate
    return None


def _split_document(text: str) -> tuple[list[str], bool]:
    # An empty document has no unterminated last line; added lines keep their newline.
    if not text:
        return [], True
    lines: list[str] = text.split("\n")
    if lines[-1] == "":
        lines.pop()
        return lines, True
    return lines, False


def _join_document(lines: list[str], trailing_newline: bool) -> str:
    if not lines:
        return ""
    text: str = "\n".join(lines)
    return f"{text}\n" if trailing_newline else text


def _split_keepends(text: str) -> list[str]:
    lines, trailing_newline = _split_document(text)
    result: list[str] = [f"{line}\n" for line in lines]
    if result and not trailing_newline:
        result[-1] = result[-1][:-1]
    return result
