"""
SourceProvider — Parses files into SourceCode via tree-sitter.

Uses tree-sitter-language-pack for the JavaScript grammar, and the HTML
grammar to locate `<script>` blocks in host documents.

Usage:
    from esindent.core.parsing import SourceProvider

    provider = SourceProvider()
    source = provider.parse("const a = 1;\\n", path="a.js")
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union, TYPE_CHECKING

from ...errors import SourceParseError
from ..source import SourceCode
from .config import LanguageConfig
from .registry import ParserRegistry, default_registry

if TYPE_CHECKING:
    from tree_sitter import Node, Parser

logger = logging.getLogger(__name__)


def first_error_line(root: 'Node') -> int:
    """1-based line of the first ERROR or missing node in a tree."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == 'ERROR' or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return root.start_point[0] + 1


class SourceProvider:
    """
    Builds SourceCode objects for files handled by a ParserRegistry.

    Parsers are loaded lazily, once per grammar.
    """

    def __init__(self, registry: Optional[ParserRegistry] = None):
        self.registry = registry if registry is not None else default_registry()
        self._parsers: Dict[str, 'Parser'] = {}  # Lazy-loaded parsers

    def _get_parser(self, tree_sitter_name: str) -> 'Parser':
        """
        Get tree-sitter parser for a grammar (lazy-loaded).

        Raises:
            SourceParseError: If the grammar cannot be loaded
        """
        if tree_sitter_name in self._parsers:
            return self._parsers[tree_sitter_name]

        try:
            from tree_sitter_language_pack import get_parser
            parser = get_parser(tree_sitter_name)
        except Exception as exc:
            raise SourceParseError(
                f"tree-sitter grammar '{tree_sitter_name}' is not available: {exc}"
            ) from exc

        logger.debug("Loaded tree-sitter parser for %s", tree_sitter_name)
        self._parsers[tree_sitter_name] = parser
        return parser

    def config_for(self, path: Optional[Union[str, Path]]) -> LanguageConfig:
        """Language config for a path; JavaScript when unknown or absent."""
        from .languages import JAVASCRIPT_CONFIG

        if path is None:
            return JAVASCRIPT_CONFIG
        return self.registry.get_config(Path(path)) or JAVASCRIPT_CONFIG

    def parse(
        self,
        text: Union[str, bytes],
        path: Optional[Union[str, Path]] = None,
        indent_script: bool = True,
        indent_width: int = 2,
    ) -> SourceCode:
        """
        Parse source text into a SourceCode.

        Args:
            text: File content
            path: File path, used to pick the language and in messages
            indent_script: Host documents only: indent script statements past the tag
            indent_width: Indent unit width, used to measure host tag levels

        Raises:
            SourceParseError: If the grammar is unavailable or the code has syntax errors
        """
        source = text.encode('utf-8') if isinstance(text, str) else text
        config = self.config_for(path)
        path_str = str(path) if path is not None else None

        script_blocks = None
        if config.is_host:
            host_parser = self._get_parser(config.host_tree_sitter_name)
            host_tree = host_parser.parse(source)
            source, script_blocks = config.script_extractor(
                source, host_tree.root_node, indent_script, indent_width,
            )

        tree = self._get_parser(config.tree_sitter_name).parse(source)
        root = tree.root_node
        if root.has_error:
            raise SourceParseError("Syntax error", path=path_str, line=first_error_line(root))

        return SourceCode(source, root, path=path_str, script_blocks=script_blocks)
