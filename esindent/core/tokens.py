"""
Tokens — Immutable token records and token predicates.

Tokens are produced by SourceCode from the leaves of a tree-sitter tree.
They are ordered by byte offset; `index` is the position in the code token
stream (comments live in a separate stream and carry index -1).
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional


# Token kinds
PUNCTUATOR = "punctuator"
KEYWORD = "keyword"
IDENTIFIER = "identifier"
NUMERIC = "numeric"
STRING = "string"
TEMPLATE = "template"
REGEX = "regex"
COMMENT = "comment"

_WORD_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

# Named tree-sitter leaves that read as keywords
_KEYWORD_LEAVES = frozenset({
    'this', 'super', 'true', 'false', 'null', 'undefined', 'import',
})

_KIND_BY_NODE_TYPE = {
    'number': NUMERIC,
    'string': STRING,
    'regex': REGEX,
    'comment': COMMENT,
    'html_comment': COMMENT,
    'optional_chain': PUNCTUATOR,
}


@dataclass(frozen=True)
class Token:
    """A single source token."""
    kind: str
    value: str
    start: int       # byte offset
    end: int         # byte offset (exclusive)
    line: int        # 1-based
    column: int      # 0-based
    end_line: int    # 1-based line of the last character
    index: int = -1  # position in the code token stream

    @property
    def is_comment(self) -> bool:
        return self.kind == COMMENT

    def __repr__(self) -> str:
        return f"Token({self.value!r}@{self.line}:{self.column})"


def kind_for_leaf(node_type: str, is_named: bool, value: str) -> str:
    """Classify a tree-sitter leaf into a token kind."""
    if node_type in _KIND_BY_NODE_TYPE:
        return _KIND_BY_NODE_TYPE[node_type]
    if is_named:
        if node_type in _KEYWORD_LEAVES:
            return KEYWORD
        return IDENTIFIER
    return KEYWORD if _WORD_RE.match(value) else PUNCTUATOR


# =============================================================================
# Predicates
# =============================================================================

TokenFilter = Callable[[Token], bool]


def _punctuator(value: str) -> TokenFilter:
    def check(token: Optional[Token]) -> bool:
        return token is not None and token.kind == PUNCTUATOR and token.value == value
    check.__name__ = f"is_{value!r}"
    return check


is_opening_paren = _punctuator("(")
is_closing_paren = _punctuator(")")
is_opening_bracket = _punctuator("[")
is_closing_bracket = _punctuator("]")
is_opening_brace = _punctuator("{")
is_closing_brace = _punctuator("}")
is_semicolon = _punctuator(";")
is_arrow = _punctuator("=>")
is_optional_chain = _punctuator("?.")


def is_not_closing_paren(token: Optional[Token]) -> bool:
    return token is not None and not is_closing_paren(token)


def is_not_opening_paren(token: Optional[Token]) -> bool:
    return token is not None and not is_opening_paren(token)


def is_brace(token: Optional[Token]) -> bool:
    return is_opening_brace(token) or is_closing_brace(token)
