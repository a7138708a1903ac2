"""
SourceCode — Token stream and token queries over a tree-sitter tree.

This is the Token/AST Provider the indentation rules are written against.
It owns:
- The code token stream (ordered, indexed) and a separate comment stream
- Node -> token lookups (first/last token, tokens between two anchors)
- Adjacency queries with optional filtering
- Physical-line grouping used by the resolver
- Script block base levels for host documents

Tokenization follows ECMAScript tokenizers rather than raw tree-sitter
leaves: strings and regular expressions are single tokens, and template
literals are split into `template` tokens around their substitutions.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from .tokens import Token, TokenFilter, COMMENT, TEMPLATE, kind_for_leaf

if TYPE_CHECKING:
    from tree_sitter import Node


NodeOrToken = Union['Node', Token]

# Nodes tokenized as one token regardless of their children
ATOMIC_NODE_TYPES = frozenset({'string', 'regex'})
COMMENT_NODE_TYPES = frozenset({'comment', 'html_comment'})


@dataclass(frozen=True)
class ScriptBlock:
    """Byte range of an embedded script and the level its statements start at."""
    start: int
    end: int
    base_level: int


# =============================================================================
# Node helpers
# =============================================================================

def same_node(a: Optional['Node'], b: Optional['Node']) -> bool:
    """Compare tree-sitter nodes structurally (type + byte range)."""
    if a is None or b is None:
        return False
    return (a.type, a.start_byte, a.end_byte) == (b.type, b.start_byte, b.end_byte)


def code_children(node: 'Node') -> List['Node']:
    """Named children of a node, without comments."""
    return [child for child in node.named_children if child.type not in COMMENT_NODE_TYPES]


def field(node: 'Node', name: str) -> Optional['Node']:
    """Shorthand for child_by_field_name."""
    return node.child_by_field_name(name)


def has_child_of_type(node: 'Node', type_name: str) -> bool:
    return any(child.type == type_name for child in node.children)


def child_of_type(node: 'Node', type_name: str) -> Optional['Node']:
    for child in node.children:
        if child.type == type_name:
            return child
    return None


class SourceCode:
    """
    Token access over one parsed source buffer.

    Attributes:
        source: The raw UTF-8 buffer the tree was parsed from
        root: Root node of the tree-sitter tree
        path: Optional file path (for messages)
        tokens: Code tokens in document order
        comments: Comment tokens in document order
    """

    def __init__(
        self,
        source: bytes,
        root: 'Node',
        path: Optional[str] = None,
        script_blocks: Optional[Sequence[ScriptBlock]] = None,
    ):
        self.source = source
        self.root = root
        self.path = path
        self.script_blocks: List[ScriptBlock] = list(script_blocks or [])

        self._line_starts = [0]
        for i, byte in enumerate(source):
            if byte == 0x0A:
                self._line_starts.append(i + 1)

        self.tokens: List[Token] = []
        self.comments: List[Token] = []
        self._tokenize(root)
        self._starts = [token.start for token in self.tokens]

    # -------------------------------------------------------------------------
    # Tokenization
    # -------------------------------------------------------------------------

    def _tokenize(self, root: 'Node') -> None:
        pending: List[Tuple[str, int, int]] = []
        comments: List[Tuple[str, int, int]] = []

        # Explicit stack: deeply nested expressions would exhaust recursion.
        stack: List[Union['Node', Tuple[str, int, int]]] = [root]
        while stack:
            item = stack.pop()
            if isinstance(item, tuple):
                pending.append(item)
                continue

            node = item
            if node.start_byte == node.end_byte:
                continue
            if node.type in COMMENT_NODE_TYPES:
                comments.append((COMMENT, node.start_byte, node.end_byte))
            elif node.type == 'template_string':
                stack.extend(reversed(self._template_parts(node)))
            elif node.type in ATOMIC_NODE_TYPES or node.child_count == 0:
                value = self.text(node.start_byte, node.end_byte)
                kind = kind_for_leaf(node.type, node.is_named, value)
                pending.append((kind, node.start_byte, node.end_byte))
            else:
                stack.extend(reversed(node.children))

        self.tokens = [
            self._make_token(kind, start, end, index)
            for index, (kind, start, end) in enumerate(pending)
        ]
        self.comments = [self._make_token(kind, start, end) for kind, start, end in comments]

    def _template_parts(self, node: 'Node') -> List[Union['Node', Tuple[str, int, int]]]:
        """Split a template literal into template tokens and substitution nodes."""
        parts: List[Union['Node', Tuple[str, int, int]]] = []
        position = node.start_byte
        for child in node.children:
            if child.type != 'template_substitution':
                continue
            # Template token runs through the `${`
            parts.append((TEMPLATE, position, child.start_byte + 2))
            for inner in child.children:
                if inner.type in ('${', '}'):
                    continue
                parts.append(inner)
            position = child.end_byte - 1
        parts.append((TEMPLATE, position, node.end_byte))
        return parts

    def _make_token(self, kind: str, start: int, end: int, index: int = -1) -> Token:
        line = self.line_of(start)
        return Token(
            kind=kind,
            value=self.text(start, end),
            start=start,
            end=end,
            line=line,
            column=start - self._line_starts[line - 1],
            end_line=self.line_of(max(start, end - 1)),
            index=index,
        )

    # -------------------------------------------------------------------------
    # Text and lines
    # -------------------------------------------------------------------------

    def text(self, start: int, end: int) -> str:
        return self.source[start:end].decode('utf-8', errors='replace')

    def node_text(self, node: 'Node') -> str:
        return self.text(node.start_byte, node.end_byte)

    def line_of(self, offset: int) -> int:
        """1-based line containing a byte offset."""
        return bisect_right(self._line_starts, offset)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_bytes(self, line: int) -> bytes:
        start = self._line_starts[line - 1]
        end = self._line_starts[line] if line < len(self._line_starts) else len(self.source)
        return self.source[start:end].rstrip(b'\r\n')

    def leading_whitespace(self, line: int) -> str:
        """Indentation characters (spaces and tabs) at the start of a line."""
        raw = self.line_bytes(line)
        stripped = raw.lstrip(b' \t')
        return raw[:len(raw) - len(stripped)].decode('ascii')

    def lines(self) -> Iterator[List[Token]]:
        """
        Group tokens (code and comments) into physical lines.

        A line starts at a token whose predecessor ended on an earlier line,
        so tokens following a multi-line template or comment on its last line
        stay with the line that token began on.
        """
        merged = sorted(self.tokens + self.comments, key=lambda t: t.start)
        current: List[Token] = []
        last_end_line = 0
        for token in merged:
            if current and token.line > last_end_line:
                yield current
                current = []
            current.append(token)
            last_end_line = max(last_end_line, token.end_line)
        if current:
            yield current

    def base_level_for(self, token: Token) -> int:
        """Start level of top-level statements around a token."""
        for block in self.script_blocks:
            if block.start <= token.start < block.end:
                return block.base_level
        return 0

    # -------------------------------------------------------------------------
    # Token queries
    # -------------------------------------------------------------------------

    def get_first_token(self, target: NodeOrToken) -> Optional[Token]:
        """First token of a node (the token covering its start, if any)."""
        if isinstance(target, Token):
            return target
        i = bisect_right(self._starts, target.start_byte) - 1
        if i >= 0 and self.tokens[i].end > target.start_byte:
            return self.tokens[i]
        i += 1
        if i < len(self.tokens) and self.tokens[i].start < target.end_byte:
            return self.tokens[i]
        return None

    def get_last_token(
        self,
        target: NodeOrToken,
        filter: Optional[TokenFilter] = None,
    ) -> Optional[Token]:
        """Last token of a node, optionally the last one matching a filter."""
        if isinstance(target, Token):
            return target if filter is None or filter(target) else None
        i = bisect_left(self._starts, target.end_byte) - 1
        while i >= 0 and self.tokens[i].end > target.start_byte:
            token = self.tokens[i]
            if filter is None or filter(token):
                return token
            i -= 1
        return None

    def get_first_tokens(self, target: NodeOrToken, count: int) -> List[Token]:
        first = self.get_first_token(target)
        if first is None:
            return []
        end = target.end if isinstance(target, Token) else target.end_byte
        result = []
        for token in self.tokens[first.index:]:
            if len(result) == count or token.start >= end:
                break
            result.append(token)
        return result

    def get_token_before(
        self,
        target: NodeOrToken,
        filter: Optional[TokenFilter] = None,
    ) -> Optional[Token]:
        first = self.get_first_token(target)
        if first is None:
            return None
        for i in range(first.index - 1, -1, -1):
            token = self.tokens[i]
            if filter is None or filter(token):
                return token
        return None

    def get_token_after(
        self,
        target: NodeOrToken,
        filter: Optional[TokenFilter] = None,
    ) -> Optional[Token]:
        last = self.get_last_token(target)
        if last is None:
            return None
        for i in range(last.index + 1, len(self.tokens)):
            token = self.tokens[i]
            if filter is None or filter(token):
                return token
        return None

    def get_tokens_between(
        self,
        left: NodeOrToken,
        right: NodeOrToken,
        filter: Optional[TokenFilter] = None,
    ) -> List[Token]:
        """Tokens strictly between the end of `left` and the start of `right`."""
        last = self.get_last_token(left)
        first = self.get_first_token(right)
        if last is None or first is None:
            return []
        between = self.tokens[last.index + 1:first.index]
        if filter is not None:
            between = [token for token in between if filter(token)]
        return between

    def get_tokens(self, node: 'Node') -> List[Token]:
        first = self.get_first_token(node)
        last = self.get_last_token(node)
        if first is None or last is None:
            return []
        return self.tokens[first.index:last.index + 1]
