"""
Presentation — Display layer for the esindent CLI

- Symbols: Visual vocabulary (unicode/ascii), safe printing
- Report: Text and JSON renderers for check results
"""

from .symbols import SymbolSet, get_symbols, safe_print
from .report import TextRenderer, JsonRenderer, render, render_levels

__all__ = [
    "SymbolSet", "get_symbols", "safe_print",
    "TextRenderer", "JsonRenderer", "render", "render_levels",
]
