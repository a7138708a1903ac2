"""
Core layer — tokens and source access over tree-sitter trees.
"""

from .tokens import Token
from .source import SourceCode, ScriptBlock

__all__ = [
    'Token',
    'SourceCode',
    'ScriptBlock',
]
