"""Configuration types for CodeFixer."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from codefixer.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDE,
    DEFAULT_SEVERITIES,
    GeneratorProvider,
    OutputFormat,
    Severity,
)


@dataclass(frozen=True, slots=True)
class R2Options:
    """Options for R2 (missing import) rule."""

    globals: frozenset[str] = field(default_factory=lambda: frozenset())


@dataclass(frozen=True, slots=True)
class R3Options:
    """Options for R3 (possible null/undefined access) rule."""

    allow: frozenset[str] = field(default_factory=lambda: frozenset())


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Configuration for all rules."""

    severities: MappingProxyType[str, Severity] = field(
        default_factory=lambda: MappingProxyType(DEFAULT_SEVERITIES)
    )
    r2: R2Options = field(default_factory=R2Options)
    r3: R3Options = field(default_factory=R3Options)


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Settings for the text-generation backend used by ``fix --generator``."""

    provider: GeneratorProvider = GeneratorProvider.NONE
    model: str | None = None
    base_url: str | None = None
    timeout: float = 30.0
    temperature: float = 0.3
    max_tokens: int = 2000


@dataclass(frozen=True, slots=True)
class CodeFixerConfig:
    """Complete CodeFixer configuration."""

    config_path: Path | None = None
    include: tuple[str, ...] = DEFAULT_INCLUDE
    exclude: tuple[str, ...] = DEFAULT_EXCLUDES
    output_format: OutputFormat = OutputFormat.TEXT
    show_source: bool = True
    rules: RuleConfig = field(default_factory=RuleConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)

    def get_severity(self, rule_code: str) -> Severity:
        """Get the severity for a rule code."""
        return self.rules.severities.get(rule_code, Severity.OFF)

    def is_rule_enabled(self, rule_code: str) -> bool:
        """Check if a rule is enabled (not OFF)."""
        return self.get_severity(rule_code) != Severity.OFF


class ConfigError(Exception):
    """Error during configuration loading or validation."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path: Path | None = path
        super().__init__(message)
