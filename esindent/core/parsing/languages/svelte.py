"""
Svelte component configuration.

Component files are host documents: the instance and module `<script>`
blocks are checked, markup and styles are not. Reactive statements
(`$: total = a + b`) are labeled statements and need no extra rule.
"""

from ..config import LanguageConfig
from .html import extract_scripts


SVELTE_CONFIG = LanguageConfig(
    name="Svelte",
    tree_sitter_name="javascript",
    extensions={'.svelte'},
    host_tree_sitter_name="html",
    script_extractor=extract_scripts,
    exclude_patterns=[
        '**/node_modules/**',
        '**/.svelte-kit/**',
        '**/build/**',
    ],
)
