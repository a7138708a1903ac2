"""
JavaScript language configuration.

Defines JAVASCRIPT_CONFIG for plain ECMAScript files (.js, .mjs, .cjs, .jsx).
JSX elements parse, but have no indentation rule and are left unchecked.
"""

from ..config import LanguageConfig


JAVASCRIPT_EXCLUDE_PATTERNS = [
    '**/node_modules/**',
    '**/dist/**',
    '**/build/**',
    '**/coverage/**',
    '**/*.min.js',
    '**/vendor/**',
]


JAVASCRIPT_CONFIG = LanguageConfig(
    name="JavaScript",
    tree_sitter_name="javascript",
    extensions={'.js', '.mjs', '.cjs', '.jsx'},
    exclude_patterns=JAVASCRIPT_EXCLUDE_PATTERNS,
)
