"""Tests for R3 rule: possible null/undefined member access."""
from __future__ import annotations

from dataclasses import replace

from codefixer.analyzer import analyze
from codefixer.constants import Language, Severity
from codefixer.diagnostics import Diagnostic
from codefixer.types import CodeFixerConfig, R3Options, RuleConfig


def _check(
    code: str,
    *,
    language: Language = Language.JS,
    config: CodeFixerConfig | None = None,
) -> list[Diagnostic]:
    diags: list[Diagnostic] = analyze(language=language, source=code, config=config)
    return [d for d in diags if d.rule_id == "R3"]


def _spans(code: str, diags: list[Diagnostic]) -> list[str]:
    data: bytes = code.encode("utf-8")
    return [data[d.start:d.end].decode("utf-8") for d in diags]


class TestR3BasicDetection:
    def test_undeclared_base(self) -> None:
        code: str = "user.name;\n"
        diags: list[Diagnostic] = _check(code)
        assert _spans(code, diags) == ["user.name"]
        assert diags[0].severity == Severity.WARNING
        assert diags[0].quick_fixable is False

    def test_message(self) -> None:
        diags: list[Diagnostic] = _check("user.name;\n")
        assert diags[0].message == (
            "Possible null/undefined access: 'user.name' - "
            "'user' might be null or undefined"
        )

    def test_only_innermost_access_in_chain(self) -> None:
        code: str = "a.b.c;\n"
        assert _spans(code, _check(code)) == ["a.b"]

    def test_document_order(self) -> None:
        code: str = "x.one;\ny.two;\n"
        assert _spans(code, _check(code)) == ["x.one", "y.two"]


class TestR3Exemptions:
    def test_declared_base(self) -> None:
        assert _check("const o = {};\no.x;\n") == []

    def test_parameter_base(self) -> None:
        assert _check("function f(o) { return o.x; }\n") == []

    def test_imported_base(self) -> None:
        assert _check("import lib from 'lib';\nlib.run();\n") == []

    def test_allow_listed_bases(self) -> None:
        assert _check("console.log(process.argv);\n") == []

    def test_optional_chaining(self) -> None:
        assert _check("user?.name;\n") == []

    def test_computed_access(self) -> None:
        assert _check("user['name'];\n") == []

    def test_this_base(self) -> None:
        assert _check("class A { m() { return this.x; } }\n") == []

    def test_configured_allow(self) -> None:
        config: CodeFixerConfig = replace(
            CodeFixerConfig(),
            rules=RuleConfig(r3=R3Options(allow=frozenset({"window"}))),
        )
        assert _check("window.alert;\n", config=config) == []


class TestR3OrderSensitivity:
    def test_use_before_declaration_is_reported(self) -> None:
        code: str = "o.x;\nconst o = {};\n"
        assert _spans(code, _check(code)) == ["o.x"]

    def test_hoisted_function_used_earlier_is_reported(self) -> None:
        code: str = "f.call(null);\nfunction f() {}\n"
        assert _spans(code, _check(code)) == ["f.call"]

    def test_builtin_globals_are_not_exempt(self) -> None:
        code: str = "Math.max(1, 2);\n"
        assert _spans(code, _check(code)) == ["Math.max"]

    def test_typescript_source(self) -> None:
        code: str = "const n: number = cfg.port;\n"
        assert _spans(code, _check(code, language=Language.TS)) == ["cfg.port"]
