"""
IndentChecker — Runs the indentation analysis over files.

Pipeline per file:
  1. SourceProvider parses the text into a SourceCode (token stream + tree)
  2. One pre-order walk calls ConstructRules for every named node, filling
     an OffsetRegistry; kinds without a rule have their subtree ignored
  3. OffsetResolver turns the registry into an expected level per line
  4. Expected widths are compared with each line's leading whitespace

Source text is never modified.

Usage:
    checker = IndentChecker(IndentConfig(indent_size=4))
    result = checker.check_file(Path("src/app.js"))
    for violation in result.violations:
        print(violation.line, violation.message)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import IndentConfig
from .core.parsing import SourceProvider
from .core.source import COMMENT_NODE_TYPES, SourceCode
from .indent.offsets import OffsetRegistry
from .indent.resolver import OffsetResolver
from .indent.rules import ConstructRules

logger = logging.getLogger(__name__)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


@dataclass
class Violation:
    """A line whose indentation differs from the expected one."""
    line: int
    level: int       # expected indent level
    expected: int    # expected width in indent characters
    spaces: int      # actual leading spaces
    tabs: int        # actual leading tabs
    indent_type: str = "space"

    @property
    def actual(self) -> int:
        return self.spaces + self.tabs

    @property
    def message(self) -> str:
        unit = "tab" if self.indent_type == "tab" else "space"
        expected = _plural(self.expected, unit)
        if self.spaces and self.tabs:
            found = f"{_plural(self.spaces, 'space')} and {_plural(self.tabs, 'tab')}"
        elif self.spaces:
            found = str(self.spaces) if unit == "space" else _plural(self.spaces, "space")
        elif self.tabs:
            found = str(self.tabs) if unit == "tab" else _plural(self.tabs, "tab")
        else:
            found = "0"
        return f"Expected indentation of {expected} but found {found}."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "level": self.level,
            "expected": self.expected,
            "actual": self.actual,
            "message": self.message,
        }


@dataclass
class CheckResult:
    """Outcome of checking one file (or one text buffer)."""
    path: Optional[str]
    violations: List[Violation] = field(default_factory=list)
    levels: Dict[int, int] = field(default_factory=dict)
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.violations

    @property
    def checked_lines(self) -> int:
        return len(self.levels)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "violations": [v.to_dict() for v in self.violations],
            "checked_lines": self.checked_lines,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.skipped:
            data["skipped"] = True
        return data


class IndentChecker:
    """
    Expected-indentation checker for ECMAScript sources.

    One checker can be reused across files; every analysis builds its own
    registry and resolver.
    """

    def __init__(
        self,
        config: Optional[IndentConfig] = None,
        provider: Optional[SourceProvider] = None,
    ):
        self.config = config if config is not None else IndentConfig()
        self.provider = provider if provider is not None else SourceProvider()

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def parse(self, text: Union[str, bytes], path: Optional[Union[str, Path]] = None) -> SourceCode:
        return self.provider.parse(
            text,
            path=path,
            indent_script=self.config.indent_script,
            indent_width=self.config.indent_width,
        )

    def analyze(self, source: SourceCode) -> OffsetResolver:
        """Build the offset registry for a parsed source and return its resolver."""
        registry = OffsetRegistry(source)
        rules = ConstructRules(source, registry, self.config)
        self._walk(source, rules, registry)
        return OffsetResolver(registry, self.config.indent_width)

    def _walk(self, source: SourceCode, rules: ConstructRules, registry: OffsetRegistry) -> None:
        """Pre-order walk over named nodes, parents before children."""
        stack = [source.root]
        while stack:
            node = stack.pop()
            if node.type in COMMENT_NODE_TYPES:
                continue
            if not rules.visit(node):
                logger.debug(
                    "No indentation rule for %s at line %d; ignoring subtree",
                    node.type, node.start_point[0] + 1,
                )
                registry.ignore(source.get_first_token(node), source.get_last_token(node))
                continue
            stack.extend(reversed(node.named_children))

    def expected_levels(
        self,
        text: Union[str, bytes],
        path: Optional[Union[str, Path]] = None,
    ) -> Dict[int, int]:
        """
        Expected indent level of every checked line.

        Raises:
            SourceParseError: If the text does not parse
        """
        source = self.parse(text, path)
        return self.checked_levels(source, self.analyze(source))

    def checked_levels(self, source: SourceCode, resolver: OffsetResolver) -> Dict[int, int]:
        levels = dict(resolver.line_levels())
        # A script that starts on its tag's line has no indentation of its own.
        for block in source.script_blocks:
            levels.pop(source.line_of(block.start), None)
        return levels

    # -------------------------------------------------------------------------
    # Checking
    # -------------------------------------------------------------------------

    def check_source(
        self,
        text: Union[str, bytes],
        path: Optional[Union[str, Path]] = None,
    ) -> CheckResult:
        """
        Check one buffer.

        Raises:
            SourceParseError: If the text does not parse
            TokenNotFoundError, OffsetCycleError: On internal rule defects
        """
        source = self.parse(text, path)
        levels = self.checked_levels(source, self.analyze(source))
        result = CheckResult(path=str(path) if path is not None else None, levels=levels)

        width = self.config.indent_width
        for line, level in sorted(levels.items()):
            whitespace = source.leading_whitespace(line)
            spaces = whitespace.count(' ')
            tabs = whitespace.count('\t')
            expected = level * width
            actual_units = tabs if self.config.indent_type == "tab" else spaces
            wrong_units = spaces if self.config.indent_type == "tab" else tabs
            if actual_units == expected and wrong_units == 0:
                continue
            result.violations.append(Violation(
                line=line,
                level=level,
                expected=expected,
                spaces=spaces,
                tabs=tabs,
                indent_type=self.config.indent_type,
            ))
        return result

    def check_file(self, path: Union[str, Path]) -> CheckResult:
        """
        Check one file on disk.

        Files over the language's size limit are skipped, not checked.
        """
        path = Path(path)
        language = self.provider.config_for(path)
        content = path.read_bytes()
        if len(content) > language.max_file_size:
            logger.info("Skipping %s: %d bytes exceeds %d", path, len(content), language.max_file_size)
            return CheckResult(path=str(path), skipped=True)
        return self.check_source(content, path)


def check_source(text: Union[str, bytes], path: Optional[Union[str, Path]] = None,
                 config: Optional[IndentConfig] = None) -> CheckResult:
    """Check a buffer with a throwaway checker."""
    return IndentChecker(config).check_source(text, path)


def expected_levels(text: Union[str, bytes], path: Optional[Union[str, Path]] = None,
                    config: Optional[IndentConfig] = None) -> Dict[int, int]:
    """Expected levels of a buffer with a throwaway checker."""
    return IndentChecker(config).expected_levels(text, path)
