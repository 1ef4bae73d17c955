"""Rule registry for CodeFixer."""
from __future__ import annotations

from codefixer.rules.base import Rule
from codefixer.rules.r1 import R1Rule
from codefixer.rules.r2 import R2Rule
from codefixer.rules.r3 import R3Rule
from codefixer.rules.r4 import R4Rule
from codefixer.types import CodeFixerConfig


def get_enabled_rules(*, config: CodeFixerConfig) -> list[Rule]:
    """Return rule instances that are not OFF in the given config."""
    all_rules: list[Rule] = _all_rules()
    return [rule for rule in all_rules if config.is_rule_enabled(rule.code)]


def _all_rules() -> list[Rule]:
    """Return all registered rule instances.

    Order is part of the output contract: post-traversal diagnostics are
    emitted R1 first, then R2.
    """
    rules: list[Rule] = [
        R1Rule(),
        R2Rule(),
        R3Rule(),
        R4Rule(),
    ]
    return rules
