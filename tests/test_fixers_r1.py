"""Tests for the rule-based R1 fixer and fix chaining."""
from __future__ import annotations

from codefixer.analyzer import analyze
from codefixer.constants import Language, Severity
from codefixer.diagnostics import Diagnostic
from codefixer.diff import apply_patch
from codefixer.fixers.pipeline import fix_all, generate_fix
from codefixer.fixers.r1 import fix_unused_import


def _r1(code: str, *, language: Language = Language.JS) -> Diagnostic:
    diags: list[Diagnostic] = analyze(language=language, source=code)
    return next(d for d in diags if d.rule_id == "R1")


class TestFixUnusedImport:
    def test_removes_first_line(self) -> None:
        code: str = "import unused from 'x';\nconsole.log(1);"
        diff_text: str | None = fix_unused_import(code, _r1(code))

        assert diff_text == (
            "--- original\n"
            "+++ fixed\n"
            "@@ -1,1 +1,0 @@\n"
            "-import unused from 'x';\n"
        )
        assert apply_patch(code, diff_text) == "console.log(1);"

    def test_line_number_in_header(self) -> None:
        code: str = "const a = 1;\n\nimport b from 'b';\nconsole.log(a);\n"
        diff_text: str | None = fix_unused_import(code, _r1(code))

        assert diff_text is not None
        assert "@@ -3,1 +3,0 @@\n-import b from 'b';\n" in diff_text
        assert apply_patch(code, diff_text) == "const a = 1;\n\nconsole.log(a);\n"

    def test_multibyte_text_before_import(self) -> None:
        code: str = "// héllo wörld\nimport b from 'b';\n"
        diff_text: str | None = fix_unused_import(code, _r1(code))

        assert diff_text is not None
        assert "@@ -2,1 +2,0 @@" in diff_text
        assert apply_patch(code, diff_text) == "// héllo wörld\n"

    def test_crlf_line_is_removed_whole(self) -> None:
        code: str = "import b from 'b';\r\nconsole.log(1);\r\n"
        diff_text: str | None = fix_unused_import(code, _r1(code))

        assert diff_text is not None
        assert apply_patch(code, diff_text) == "console.log(1);\r\n"

    def test_out_of_range_offset(self) -> None:
        diagnostic: Diagnostic = Diagnostic(
            rule_id="R1",
            message="Unused import: 'x'",
            start=500,
            end=510,
            severity=Severity.INFO,
            quick_fixable=True,
        )
        assert fix_unused_import("short\n", diagnostic) is None


class TestGenerateFix:
    def test_non_r1_diagnostics_have_no_fix(self) -> None:
        code: str = "foo.bar();\n"
        diags: list[Diagnostic] = analyze(language=Language.JS, source=code)

        assert {d.rule_id for d in diags} == {"R2", "R3"}
        assert all(generate_fix(code, d) is None for d in diags)

    def test_r1_dispatch(self) -> None:
        code: str = "import a from 'a';\n"
        assert generate_fix(code, _r1(code)) == fix_unused_import(code, _r1(code))

    def test_is_pure(self) -> None:
        code: str = "import a from 'a';\nrun();\n"
        diagnostic: Diagnostic = _r1(code)
        assert generate_fix(code, diagnostic) == generate_fix(code, diagnostic)


class TestFixAll:
    def test_removes_every_unused_import(self) -> None:
        code: str = (
            "import a from 'a';\n"
            "import b from 'b';\n"
            "import c from 'c';\n"
            "b();\n"
        )
        assert fix_all(source=code, language=Language.JS) == "import b from 'b';\nb();\n"

    def test_nothing_to_fix(self) -> None:
        code: str = "import b from 'b';\nb();\n"
        assert fix_all(source=code, language=Language.JS) == code

    def test_keeps_line_that_binds_a_used_name(self) -> None:
        code: str = "import a from 'a'; import b from 'b';\nb();\n"
        assert fix_all(source=code, language=Language.JS) == code

    def test_keeps_partially_used_import(self) -> None:
        code: str = "import { a, b } from 'm';\na();\n"
        assert fix_all(source=code, language=Language.JS) == code

    def test_multiline_import_is_left_alone_when_removal_breaks_parsing(self) -> None:
        code: str = "import {\n  a,\n} from 'm';\nrun();\n"
        assert fix_all(source=code, language=Language.JS) == code

    def test_typescript(self) -> None:
        code: str = "import type { T } from './t';\nimport { u } from './u';\nlet x: T;\n"
        assert fix_all(source=code, language=Language.TS) == (
            "import type { T } from './t';\nlet x: T;\n"
        )

    def test_unparseable_source_is_returned_unchanged(self) -> None:
        assert fix_all(source="const = ;", language=Language.JS) == "const = ;"
