"""Pytest fixtures for CodeFixer tests."""
from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def temp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.codefixer]
include = ["src/**/*.ts"]
exclude = ["**/*.spec.ts"]
output_format = "json"
show_source = false

[tool.codefixer.rules]
R1 = "warning"
R4 = "off"

[tool.codefixer.rules.R2]
severity = "warning"
globals = ["describe", "it"]

[tool.codefixer.rules.R3]
allow = ["window"]

[tool.codefixer.generator]
provider = "ollama"
model = "llama3"
timeout = 12
"""
    )
    return config_path


@pytest.fixture
def empty_pyproject(tmp_path: Path) -> Path:
    """Create a pyproject.toml without [tool.codefixer] section."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[project]
name = "test-project"
version = "0.1.0"
"""
    )
    return config_path


@pytest.fixture
def invalid_toml(tmp_path: Path) -> Path:
    """Create an invalid TOML file."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text("invalid [ toml content")
    return config_path


@pytest.fixture
def invalid_config(tmp_path: Path) -> Path:
    """Create a pyproject.toml with invalid codefixer config."""
    config_path: Path = tmp_path / "pyproject.toml"
    config_path.write_text(
        """
[tool.codefixer]
output_format = "invalid_format"
show_source = "yes"

[tool.codefixer.rules]
R1 = "super_error"
R9 = "error"

[tool.codefixer.generator]
provider = "skynet"
"""
    )
    return config_path
