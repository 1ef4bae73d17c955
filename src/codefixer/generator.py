"""Fix generation through an OpenAI-compatible chat-completions backend.

The backend is asked for a JSON object ``{"diff", "rationale", "risks"}``.
Every failure mode (transport, timeout, HTTP status, empty content, bad
JSON) surfaces as :class:`GenerationError` so callers can fall back.
"""
from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final, Protocol

import requests

from codefixer.constants import GeneratorProvider, Language
from codefixer.diagnostics import Diagnostic
from codefixer.types import GeneratorConfig

log = logging.getLogger(__name__)

OLLAMA_BASE_URL: Final[str] = "http://localhost:11434/v1"
OLLAMA_MODEL: Final[str] = "qwen2.5-coder"
OPENROUTER_BASE_URL: Final[str] = "https://openrouter.ai/api/v1"
OPENROUTER_MODEL: Final[str] = "anthropic/claude-3.5-sonnet"
OPENROUTER_KEY_ENV: Final[str] = "OPENROUTER_API_KEY"
OLLAMA_URL_ENV: Final[str] = "OLLAMA_BASE_URL"

SYSTEM_PROMPT: Final[str] = """\
You are a precise code fixer. Output ONLY a minimal unified diff for the provided file. \
Do not reformat unrelated code. Respect project context (imports, tsconfig). \
If fix is risky, prefer a minimal null-check or import fix.

Your response must be valid JSON with the following structure:
{
  "diff": "unified diff string",
  "rationale": "short explanation",
  "risks": ["risk1", "risk2"]
}"""


class GenerationError(Exception):
    """The backend did not produce a usable response."""


@dataclass(frozen=True, slots=True)
class RepoContext:
    """Optional project context passed along with a fix request."""

    package_json: str | None = None
    has_tsconfig: bool = False


@dataclass(frozen=True, slots=True)
class GeneratedFix:
    """A candidate fix as returned by a generator. The diff is not yet validated."""

    diff: str
    rationale: str = "Fix applied"
    risks: tuple[str, ...] = ()


class FixGenerator(Protocol):
    """Structural interface for fix generators."""

    def generate_fix(
        self,
        *,
        source: str,
        language: Language,
        file_path: str,
        diagnostics: Sequence[Diagnostic],
        repo_context: RepoContext | None = None,
    ) -> GeneratedFix: ...


@dataclass(slots=True)
class ChatCompletionsGenerator:
    """Generator backed by a ``/chat/completions`` endpoint."""

    base_url: str
    model: str
    api_key: str
    timeout: float = 30.0
    temperature: float = 0.3
    max_tokens: int = 2000
    headers: dict[str, str] = field(default_factory=dict)
    session: requests.Session = field(default_factory=requests.Session)

    def generate_fix(
        self,
        *,
        source: str,
        language: Language,
        file_path: str,
        diagnostics: Sequence[Diagnostic],
        repo_context: RepoContext | None = None,
    ) -> GeneratedFix:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": build_user_prompt(
                        source=source,
                        language=language,
                        file_path=file_path,
                        diagnostics=diagnostics,
                        repo_context=repo_context,
                    ),
                },
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers: dict[str, str] = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            **self.headers,
        }
        url: str = self.base_url.rstrip("/") + "/chat/completions"
        log.debug("Requesting fix from %s (model %s)", url, self.model)

        try:
            response: requests.Response = self.session.post(
                url, headers=headers, json=payload, timeout=self.timeout,
            )
            response.raise_for_status()
            data: Any = response.json()
        except requests.Timeout as e:
            raise GenerationError(f"Generator timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise GenerationError(f"Generator request failed: {e}") from e
        except ValueError as e:
            raise GenerationError("Generator returned a non-JSON response") from e

        try:
            content: Any = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("No response from generator") from e
        if not isinstance(content, str) or not content.strip():
            raise GenerationError("No response from generator")

        return parse_generation_response(content)


def build_user_prompt(
    *,
    source: str,
    language: Language,
    file_path: str,
    diagnostics: Sequence[Diagnostic],
    repo_context: RepoContext | None = None,
) -> str:
    """Render the user message: code, diagnostics and optional project context."""
    diagnostics_text: str = "\n".join(
        f"- [{d.rule_id}] {d.message} (position {d.start}-{d.end})" for d in diagnostics
    )
    context_text: str = ""
    if repo_context is not None:
        context_lines: list[str] = ["Project Context:"]
        if repo_context.package_json:
            context_lines.append(
                f"Dependencies: {_dependency_names(repo_context.package_json)}",
            )
        if repo_context.has_tsconfig:
            context_lines.append("TypeScript enabled")
        context_text = "\n".join(context_lines)

    lang: str = language.value
    return (
        f"Language: {lang}\n"
        f"File: {file_path}\n"
        "\n"
        "Original Code:\n"
        f"```{lang}\n"
        f"{source}\n"
        "```\n"
        "\n"
        "Diagnostics:\n"
        f"{diagnostics_text}\n"
        "\n"
        f"{context_text}\n"
        "\n"
        "Generate a minimal unified diff to fix these issues. Return ONLY valid JSON."
    )


def parse_generation_response(content: str) -> GeneratedFix:
    """Extract the ``{diff, rationale, risks}`` object from a model reply."""
    data: dict[str, Any] = _first_json_object(content)
    diff: Any = data.get("diff") or ""
    rationale: Any = data.get("rationale") or "Fix applied"
    risks: Any = data.get("risks") or []
    if not isinstance(diff, str) or not isinstance(rationale, str):
        raise GenerationError("Invalid JSON response from generator")
    if isinstance(risks, str):
        risks = [risks]
    if not isinstance(risks, list):
        raise GenerationError("Invalid JSON response from generator")
    return GeneratedFix(
        diff=diff,
        rationale=rationale,
        risks=tuple(str(r) for r in risks),
    )


def create_generator(config: GeneratorConfig) -> FixGenerator | None:
    """Build the configured generator; None when disabled or missing credentials."""
    if config.provider == GeneratorProvider.OLLAMA:
        base_url: str = config.base_url or os.environ.get(OLLAMA_URL_ENV, "")
        if base_url and not base_url.rstrip("/").endswith("/v1"):
            base_url = base_url.rstrip("/") + "/v1"
        return ChatCompletionsGenerator(
            base_url=base_url or OLLAMA_BASE_URL,
            model=config.model or OLLAMA_MODEL,
            api_key="ollama",
            timeout=config.timeout,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
    if config.provider == GeneratorProvider.OPENROUTER:
        api_key: str | None = os.environ.get(OPENROUTER_KEY_ENV)
        if not api_key:
            log.warning("%s is not set; generator disabled", OPENROUTER_KEY_ENV)
            return None
        return ChatCompletionsGenerator(
            base_url=config.base_url or OPENROUTER_BASE_URL,
            model=config.model or OPENROUTER_MODEL,
            api_key=api_key,
            timeout=config.timeout,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            headers={"HTTP-Referer": "https://codefixer.dev", "X-Title": "CodeFixer"},
        )
    return None


def _dependency_names(package_json: str) -> str:
    try:
        manifest: Any = json.loads(package_json)
    except ValueError:
        return "none"
    dependencies: Any = manifest.get("dependencies") if isinstance(manifest, dict) else None
    if not isinstance(dependencies, dict) or not dependencies:
        return "none"
    return ", ".join(dependencies)


def _first_json_object(text: str) -> dict[str, Any]:
    """Parse the reply as JSON, or the first balanced ``{...}`` inside it."""
    text = text.strip()
    if not text:
        raise GenerationError("No response from generator")
    try:
        obj: Any = json.loads(text)
    except ValueError:
        obj = None
    if isinstance(obj, dict):
        return obj

    start: int = text.find("{")
    if start < 0:
        raise GenerationError("Invalid JSON response from generator")
    depth: int = 0
    in_string: bool = False
    escaped: bool = False
    for index in range(start, len(text)):
        char: str = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                try:
                    obj = json.loads(text[start:index + 1])
                except ValueError as e:
                    raise GenerationError("Invalid JSON response from generator") from e
                if isinstance(obj, dict):
                    return obj
                break
    raise GenerationError("Invalid JSON response from generator")
