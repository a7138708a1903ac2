"""
Parsing configuration data structures.

Defines LanguageConfig — how a file type is turned into an ECMAScript
token stream via tree-sitter.

Design principle: New file types are added via config, not code changes.
"""

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import PurePath
from typing import Callable, List, Optional, Set, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..source import ScriptBlock


# (host bytes, host root node, indent script?, indent width) -> (masked bytes, blocks)
ScriptExtractor = Callable[..., Tuple[bytes, List['ScriptBlock']]]


@dataclass
class LanguageConfig:
    """
    Configuration for parsing a specific file type.

    Plain script files are parsed directly with the script grammar. Host
    documents (component files, HTML pages) are first parsed with their own
    grammar to locate `<script>` blocks; everything outside the blocks is
    blanked before the script grammar runs, so byte offsets and line
    numbers are preserved.

    Attributes:
        name: Human-readable name (e.g., "JavaScript", "Svelte")
        tree_sitter_name: Grammar used for the script code
        extensions: File extensions this config handles (e.g., {'.js'})
        host_tree_sitter_name: Grammar used to locate script blocks (host documents only)
        script_extractor: Hook that masks a host document down to its scripts
        max_file_size: Skip files larger than this (bytes, default 300KB)
        exclude_patterns: Glob patterns to exclude (e.g., ['**/node_modules/**'])
    """
    # Identity
    name: str
    tree_sitter_name: str
    extensions: Set[str]

    # Host documents
    host_tree_sitter_name: Optional[str] = None
    script_extractor: Optional[ScriptExtractor] = None

    max_file_size: int = 300_000  # 300KB default

    # Exclusions
    exclude_patterns: List[str] = field(default_factory=list)

    @property
    def is_host(self) -> bool:
        """True for documents that embed scripts rather than being scripts."""
        return self.script_extractor is not None

    def should_exclude(self, rel_path: str) -> bool:
        """
        Check if a path relative to the searched directory should be excluded.

        Patterns use fnmatch semantics, so `*` also crosses `/`. A leading
        `**/` matches at the top of the tree as well.
        """
        path = PurePath(rel_path).as_posix()
        for pattern in self.exclude_patterns:
            if fnmatch(path, pattern):
                return True
            if pattern.startswith('**/') and fnmatch(path, pattern[3:]):
                return True
        return False
