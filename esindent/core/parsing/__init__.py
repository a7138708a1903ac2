"""
Parsing module — tree-sitter parsing into ECMAScript token streams.

- LanguageConfig: Per-file-type parsing rules
- ParserRegistry: Extension-based routing
- SourceProvider: Lazy parsers, host-document script extraction

Design principle: Add new file types via config, not code changes.

Usage:
    from esindent.core.parsing import SourceProvider

    source = SourceProvider().parse(content, path="src/App.svelte")
"""

from .config import LanguageConfig
from .registry import ParserRegistry, default_registry
from .provider import SourceProvider

__all__ = [
    'LanguageConfig',
    'ParserRegistry',
    'default_registry',
    'SourceProvider',
]
