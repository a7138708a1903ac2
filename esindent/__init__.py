"""
esindent — ECMAScript indentation checker

Derives the expected indentation of every line from the syntax tree:
rules record "this token is N levels deeper than that one", and a
resolver turns those relationships into levels.

Usage:
    esindent check src/
    esindent check App.svelte --indent-size 4
    esindent levels src/app.js
    esindent config

Library:
    from esindent import IndentChecker, IndentConfig

    result = IndentChecker(IndentConfig(indent_size=4)).check_source(text, "app.js")
"""

__version__ = "0.1.0"

from .config import Config, ConfigManager, IndentConfig
from .checker import CheckResult, IndentChecker, Violation, check_source, expected_levels
from .errors import (
    ConfigError,
    EsIndentError,
    OffsetCycleError,
    SourceParseError,
    TokenNotFoundError,
)

__all__ = [
    "__version__",
    # Config
    "Config", "ConfigManager", "IndentConfig",
    # Checking
    "IndentChecker", "CheckResult", "Violation", "check_source", "expected_levels",
    # Errors
    "EsIndentError", "ConfigError", "SourceParseError",
    "TokenNotFoundError", "OffsetCycleError",
]
