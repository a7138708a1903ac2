"""
Errors — Exception hierarchy for esindent

Two families:
- User-facing: the input could not be analyzed (parse failure, bad config).
  The CLI reports these per file and moves on.
- Internal invariant failures: a rule asked for a token the grammar
  guarantees, or the offset graph contains a cycle. These are bugs in the
  rule set and are never recovered from.
"""

from typing import Optional


class EsIndentError(Exception):
    """Base class for all esindent errors."""


class ConfigError(EsIndentError):
    """Configuration value is invalid."""


class SourceParseError(EsIndentError):
    """Source text could not be parsed into a usable syntax tree."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        self.path = path
        self.line = line
        location = path or "<source>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")


class TokenNotFoundError(EsIndentError):
    """A token the grammar guarantees was not found next to a node."""

    def __init__(self, description: str, node_type: str, line: int):
        self.description = description
        self.node_type = node_type
        self.line = line
        super().__init__(
            f"Expected {description} in {node_type} at line {line}"
        )


class OffsetCycleError(EsIndentError):
    """Offset chain revisits a token that is still being resolved."""

    def __init__(self, line: int, value: str):
        self.line = line
        self.value = value
        super().__init__(f"Cyclic offset chain through {value!r} at line {line}")
