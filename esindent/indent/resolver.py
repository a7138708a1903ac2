"""
OffsetResolver — Turns a completed OffsetRegistry into indent levels.

Resolution follows a token's base chain, summing multipliers, until it
reaches a token whose level is already known, a token with no entry
(level 0) or a start offset (absolute level).

Lines are resolved top to bottom. Once a line's level is known, every
token on that line shares it: an offset measured from a token in the
middle of an earlier line is measured from that line's indentation.
"""

from typing import Dict, Optional, Set, TYPE_CHECKING

from ..errors import OffsetCycleError

if TYPE_CHECKING:
    from ..core.source import SourceCode
    from ..core.tokens import Token
    from .offsets import OffsetRegistry


class OffsetResolver:
    """Read-only pass over a frozen OffsetRegistry."""

    def __init__(self, registry: 'OffsetRegistry', indent_width: int = 1):
        """
        Args:
            registry: Registry filled by the rule walk
            indent_width: Columns per indent level (1 for tabs)
        """
        self.registry = registry
        self.source: 'SourceCode' = registry.source
        self.indent_width = indent_width
        self._levels: Dict['Token', int] = {}
        self._line_levels: Optional[Dict[int, int]] = None

    def resolve(self, token: 'Token') -> int:
        """
        Indent level of a token.

        Raises:
            OffsetCycleError: If the chain revisits a token
        """
        total = 0
        seen: Set['Token'] = set()
        current = token
        while True:
            known = self._levels.get(current)
            if known is not None:
                return total + known
            if current in seen:
                raise OffsetCycleError(current.line, current.value)
            seen.add(current)

            entry = self.registry.get(current)
            if entry is None:
                return total
            total += entry.multiplier
            if entry.is_start:
                return total
            current = entry.base

    def line_levels(self) -> Dict[int, int]:
        """
        Expected indent level per checked line.

        Lines led by a comment or by an ignored token are not included.
        """
        if self._line_levels is not None:
            return self._line_levels

        levels: Dict[int, int] = {}
        for line_tokens in self.source.lines():
            code = [token for token in line_tokens if not token.is_comment]
            if not code:
                continue
            level = self.resolve(code[0])
            for token in code:
                self._levels.setdefault(token, level)

            leader = line_tokens[0]
            if leader.is_comment or self.registry.is_ignored(leader):
                continue
            levels[leader.line] = level

        self._line_levels = levels
        return levels

    def line_widths(self) -> Dict[int, int]:
        """Expected indentation width (in indent characters) per checked line."""
        return {line: level * self.indent_width for line, level in self.line_levels().items()}
