"""Constants and enums for CodeFixer."""
from __future__ import annotations

from enum import Enum
from typing import Final

__version__: Final[str] = "0.1.0"


class Severity(Enum):
    """Diagnostic severity levels. OFF only appears in configuration."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    OFF = "off"


class Language(Enum):
    """Source language selector."""

    JS = "js"
    TS = "ts"


class OutputFormat(Enum):
    """Output format options."""

    TEXT = "text"
    JSON = "json"


class GeneratorProvider(Enum):
    """Text-generation backends for fix generation."""

    NONE = "none"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"


RULE_CODES: Final[frozenset[str]] = frozenset({
    "R1",  # Unused import
    "R2",  # Missing import
    "R3",  # Possible null/undefined member access
    "R4",  # Missing await on .then() in async function
})

DEFAULT_SEVERITIES: Final[dict[str, Severity]] = {
    "R1": Severity.INFO,
    "R2": Severity.ERROR,
    "R3": Severity.WARNING,
    "R4": Severity.WARNING,
}

QUICK_FIXABLE_RULES: Final[frozenset[str]] = frozenset({"R1"})

# Member-access bases that never trigger R3.
MEMBER_BASE_ALLOWLIST: Final[frozenset[str]] = frozenset({"console", "process"})

# Runtime names that never trigger R2. Known to be incomplete: framework
# injected globals (jest's `describe`, `React` under the new JSX transform)
# still produce false positives unless added through configuration.
RUNTIME_GLOBALS: Final[frozenset[str]] = frozenset({
    "console", "process", "require", "module", "exports", "global",
    "__dirname", "__filename",
})

BUILTIN_GLOBALS: Final[frozenset[str]] = frozenset({
    "Array", "Boolean", "Date", "Error", "Function", "JSON", "Math",
    "Number", "Object", "Promise", "RegExp", "String", "Symbol",
    "undefined", "null", "NaN", "Infinity", "parseInt", "parseFloat",
    "isNaN", "isFinite", "decodeURI", "encodeURI", "Map", "Set",
    "WeakMap", "WeakSet", "Proxy", "Reflect", "setTimeout", "setInterval",
    "clearTimeout", "clearInterval", "window", "document", "location",
    "navigator", "fetch", "Response", "Request", "Headers", "URL",
    "arguments", "globalThis",
})

KNOWN_GLOBALS: Final[frozenset[str]] = RUNTIME_GLOBALS | BUILTIN_GLOBALS

SOURCE_SUFFIXES: Final[dict[str, Language]] = {
    ".js": Language.JS,
    ".jsx": Language.JS,
    ".mjs": Language.JS,
    ".cjs": Language.JS,
    ".ts": Language.TS,
    ".tsx": Language.TS,
    ".mts": Language.TS,
    ".cts": Language.TS,
}

DEFAULT_INCLUDE: Final[tuple[str, ...]] = (
    "**/*.js",
    "**/*.jsx",
    "**/*.mjs",
    "**/*.cjs",
    "**/*.ts",
    "**/*.tsx",
    "**/*.mts",
    "**/*.cts",
)

DEFAULT_EXCLUDES: Final[tuple[str, ...]] = (
    "**/node_modules/**",
    "**/.*",
    "**/.git/**",
    "dist/**",
    "build/**",
    "coverage/**",
    "**/*.min.js",
)

DEFAULT_OLD_LABEL: Final[str] = "original"
DEFAULT_NEW_LABEL: Final[str] = "fixed"

NO_NEWLINE_MARKER: Final[str] = "\\ No newline at end of file"
