"""Configuration loading and validation for CodeFixer."""
from __future__ import annotations

import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any

from codefixer.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDE,
    DEFAULT_SEVERITIES,
    RULE_CODES,
    GeneratorProvider,
    OutputFormat,
    Severity,
)
from codefixer.types import (
    CodeFixerConfig,
    ConfigError,
    GeneratorConfig,
    R2Options,
    R3Options,
    RuleConfig,
)


class ConfigLoader:
    """Loads and validates CodeFixer configuration."""

    @staticmethod
    def find_config_file(start_path: Path | None = None) -> Path | None:
        """
        Find pyproject.toml by walking up from start_path.

        Args:
            start_path: Directory to start searching from. Defaults to cwd.

        Returns:
            Path to pyproject.toml if found, None otherwise.
        """
        if start_path is None:
            start_path = Path.cwd()

        start_path = start_path.resolve()

        for directory in [start_path, *start_path.parents]:
            config_path: Path = directory / "pyproject.toml"
            if config_path.is_file():
                return config_path

        return None

    @staticmethod
    def load(path: Path | None = None) -> CodeFixerConfig:
        """
        Load configuration from pyproject.toml.

        Args:
            path: Explicit path to pyproject.toml. If None, searches upward.

        Returns:
            Validated CodeFixerConfig instance.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if path is None:
            path = ConfigLoader.find_config_file()

        if path is None:
            return CodeFixerConfig()

        try:
            with open(path, "rb") as f:
                data: dict[str, Any] = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML: {e}", path=path) from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file: {e}", path=path) from e

        tool_config: dict[str, Any] = data.get("tool", {}).get("codefixer", {})

        return ConfigLoader._parse_config(tool_config, config_path=path)

    @staticmethod
    def _parse_config(
        data: dict[str, Any],
        *,
        config_path: Path | None = None,
    ) -> CodeFixerConfig:
        """Parse and validate configuration dictionary."""
        errors: list[str] = []

        include: tuple[str, ...] = _parse_patterns(
            data, "include", DEFAULT_INCLUDE, errors,
        )
        exclude: tuple[str, ...] = _parse_patterns(
            data, "exclude", DEFAULT_EXCLUDES, errors,
        )

        output_format: OutputFormat = OutputFormat.TEXT
        if "output_format" in data:
            try:
                output_format = OutputFormat(data["output_format"])
            except ValueError:
                valid: list[str] = [f.value for f in OutputFormat]
                errors.append(f"output_format must be one of {valid}")

        show_source: bool = data.get("show_source", True)
        if not isinstance(show_source, bool):
            errors.append("show_source must be a boolean")
            show_source = True

        rules: RuleConfig = ConfigLoader._parse_rules(data.get("rules", {}), errors)
        generator: GeneratorConfig = ConfigLoader._parse_generator(
            data.get("generator", {}), errors,
        )

        if errors:
            error_msg: str = "Configuration errors:\n" + "\n".join(
                f"  - {e}" for e in errors
            )
            raise ConfigError(error_msg, path=config_path)

        return CodeFixerConfig(
            config_path=config_path,
            include=include,
            exclude=exclude,
            output_format=output_format,
            show_source=show_source,
            rules=rules,
            generator=generator,
        )

    @staticmethod
    def _parse_rules(data: dict[str, Any], errors: list[str]) -> RuleConfig:
        """Parse rules configuration."""
        severities: dict[str, Severity] = dict(DEFAULT_SEVERITIES)
        valid: list[str] = [s.value for s in Severity]

        for key, value in data.items():
            rule_code: str = key.upper()
            if rule_code not in RULE_CODES:
                errors.append(f"rules.{key} is not a known rule code")
                continue
            if isinstance(value, str):
                try:
                    severities[rule_code] = Severity(value.lower())
                except ValueError:
                    errors.append(f"rules.{key} must be one of {valid}")
            elif isinstance(value, dict) and "severity" in value:
                try:
                    severities[rule_code] = Severity(str(value["severity"]).lower())
                except ValueError:
                    errors.append(f"rules.{key}.severity must be one of {valid}")

        r2_data: Any = data.get("R2", {})
        r2_globals: frozenset[str] = frozenset()
        if isinstance(r2_data, dict):
            r2_globals = _parse_names(r2_data, "globals", "rules.R2.globals", errors)

        r3_data: Any = data.get("R3", {})
        r3_allow: frozenset[str] = frozenset()
        if isinstance(r3_data, dict):
            r3_allow = _parse_names(r3_data, "allow", "rules.R3.allow", errors)

        return RuleConfig(
            severities=MappingProxyType(severities),
            r2=R2Options(globals=r2_globals),
            r3=R3Options(allow=r3_allow),
        )

    @staticmethod
    def _parse_generator(data: dict[str, Any], errors: list[str]) -> GeneratorConfig:
        """Parse generator backend configuration."""
        if not isinstance(data, dict):
            errors.append("generator must be a table")
            return GeneratorConfig()

        provider: GeneratorProvider = GeneratorProvider.NONE
        if "provider" in data:
            try:
                provider = GeneratorProvider(data["provider"])
            except ValueError:
                valid: list[str] = [p.value for p in GeneratorProvider]
                errors.append(f"generator.provider must be one of {valid}")

        model: Any = data.get("model")
        if model is not None and not isinstance(model, str):
            errors.append("generator.model must be a string")
            model = None

        base_url: Any = data.get("base_url")
        if base_url is not None and not isinstance(base_url, str):
            errors.append("generator.base_url must be a string")
            base_url = None

        timeout: Any = data.get("timeout", 30.0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append("generator.timeout must be a positive number")
            timeout = 30.0

        temperature: Any = data.get("temperature", 0.3)
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            errors.append("generator.temperature must be a number")
            temperature = 0.3

        max_tokens: Any = data.get("max_tokens", 2000)
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
            errors.append("generator.max_tokens must be a positive integer")
            max_tokens = 2000

        return GeneratorConfig(
            provider=provider,
            model=model,
            base_url=base_url,
            timeout=float(timeout),
            temperature=float(temperature),
            max_tokens=max_tokens,
        )


def _parse_patterns(
    data: dict[str, Any],
    key: str,
    default: tuple[str, ...],
    errors: list[str],
) -> tuple[str, ...]:
    raw: Any = data.get(key, default)
    if isinstance(raw, list):
        return tuple(raw)
    if not isinstance(raw, tuple):
        errors.append(f"{key} must be a list, got {type(raw).__name__}")
    return default


def _parse_names(
    data: dict[str, Any], key: str, label: str, errors: list[str],
) -> frozenset[str]:
    raw: Any = data.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(n, str) for n in raw):
        errors.append(f"{label} must be a list of names")
        return frozenset()
    return frozenset(raw)


def load_config(path: Path | None = None) -> CodeFixerConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Optional explicit path to pyproject.toml.

    Returns:
        Validated configuration.
    """
    return ConfigLoader.load(path)
