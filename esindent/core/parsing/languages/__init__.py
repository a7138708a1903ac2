"""
Language configurations.

Supported file types:
- javascript.py: JavaScript (.js, .mjs, .cjs, .jsx)
- svelte.py: Svelte components (.svelte) - script blocks only
- html.py: HTML (.html, .htm) - script blocks only
"""

from .javascript import JAVASCRIPT_CONFIG
from .svelte import SVELTE_CONFIG
from .html import HTML_CONFIG, extract_scripts

__all__ = [
    'JAVASCRIPT_CONFIG',
    'SVELTE_CONFIG',
    'HTML_CONFIG',
    'extract_scripts',
]
