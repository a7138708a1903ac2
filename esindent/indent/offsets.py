"""
OffsetRegistry — Mutable store of token indentation relationships.

Each token has at most one OffsetEntry: "this token sits `multiplier`
indent levels deeper than the line of `base`". Re-registering a token
replaces its entry; rules run in a fixed pre-order, so later and more
specific rules refine earlier, generic ones.

A base of None marks a start offset: an absolute level used for the
top-level statements of a program or embedded script block.

Usage:
    registry = OffsetRegistry(source)
    registry.set_offset(arrow_token, 1, first_token)
    registry.set_offset_element_list(node_elements, left_paren, right_paren, 1)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from ..core.tokens import Token

if TYPE_CHECKING:
    from tree_sitter import Node
    from ..core.source import SourceCode


TokenArg = Union[Token, Iterable[Optional[Token]], None]


@dataclass(frozen=True)
class OffsetEntry:
    """Declared indentation of a token relative to a base token."""
    token: Token
    base: Optional[Token]
    multiplier: int

    @property
    def is_start(self) -> bool:
        """True for absolute start offsets (no base token)."""
        return self.base is None


def _as_tokens(tokens: TokenArg) -> List[Token]:
    if tokens is None:
        return []
    if isinstance(tokens, Token):
        return [tokens]
    return [token for token in tokens if token is not None]


class OffsetRegistry:
    """
    Token -> OffsetEntry store for one file-level analysis.

    Created before the tree walk, filled by ConstructRules, read by
    OffsetResolver, then discarded. Entries are only ever overwritten.
    """

    def __init__(self, source: 'SourceCode'):
        self.source = source
        self._entries: Dict[Token, OffsetEntry] = {}
        self._ignored: List[Tuple[int, int]] = []

    def set_offset(self, tokens: TokenArg, multiplier: int, base: Optional[Token]) -> None:
        """
        Register tokens as offset from a base token.

        Args:
            tokens: A token, an iterable of tokens, or None (None items are skipped)
            multiplier: Indent levels relative to the base token's line
            base: Base token; None makes this a no-op
        """
        if base is None:
            return
        for token in _as_tokens(tokens):
            if token == base:
                continue
            self._entries[token] = OffsetEntry(token, base, multiplier)

    def set_start_offset(self, tokens: TokenArg, level: int) -> None:
        """Register tokens at an absolute indent level."""
        for token in _as_tokens(tokens):
            self._entries[token] = OffsetEntry(token, None, level)

    def set_offset_element_list(
        self,
        elements: Sequence[Union['Node', Token, None]],
        left: Optional[Token],
        right: Optional[Token],
        multiplier: int,
    ) -> None:
        """
        Register a delimited list of elements.

        Each element's first token is anchored to `left` independently (not
        to the previous element); the right delimiter returns to the level
        of `left`. Holes (None) contribute nothing.

        Args:
            elements: Nodes, tokens or None (elisions)
            left: Opening delimiter (or first token for undelimited lists)
            right: Closing delimiter, or None when there is none
            multiplier: Indent levels for the elements
        """
        if left is None:
            return
        for element in elements:
            if element is None:
                continue
            first = self.source.get_first_token(element)
            if first is not None:
                self.set_offset(first, multiplier, left)
        if right is not None:
            self.set_offset(right, 0, left)

    def ignore(self, first: Optional[Token], last: Optional[Token]) -> None:
        """Exclude a token range from indentation checks."""
        if first is None or last is None:
            return
        self._ignored.append((first.start, last.end))

    def is_ignored(self, token: Token) -> bool:
        return any(start <= token.start < end for start, end in self._ignored)

    def get(self, token: Token) -> Optional[OffsetEntry]:
        return self._entries.get(token)

    def entries(self) -> List[OffsetEntry]:
        """All entries in document order."""
        return sorted(self._entries.values(), key=lambda entry: entry.token.start)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: Token) -> bool:
        return token in self._entries
