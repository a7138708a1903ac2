"""
Host document configuration: `<script>` blocks inside markup.

Defines HTML_CONFIG (.html, .htm) and the script extractor shared with
component files. The host grammar only locates script elements; the
rest of the document is blanked out byte for byte (newlines kept), so
the JavaScript tree parsed afterwards reports host line numbers.

Script elements are skipped when their `type` or `lang` attribute names
something other than JavaScript (JSON data blocks, TypeScript, templates).
"""

import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

from ...source import ScriptBlock, child_of_type
from ..config import LanguageConfig

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)


SCRIPT_TYPES = frozenset({
    '', 'module', 'text/javascript', 'application/javascript', 'javascript',
})
SCRIPT_LANGS = frozenset({'', 'js', 'javascript'})

HTML_EXCLUDE_PATTERNS = [
    '**/node_modules/**',
    '**/dist/**',
    '**/build/**',
]


def _attributes(start_tag: 'Node', source: bytes) -> dict:
    """Attribute name -> value (lowercased) of a start tag."""
    attributes = {}
    for attribute in start_tag.named_children:
        if attribute.type != 'attribute':
            continue
        name_node = child_of_type(attribute, 'attribute_name')
        if name_node is None:
            continue
        name = source[name_node.start_byte:name_node.end_byte].decode('utf-8', errors='replace')
        value = ''
        for child in attribute.named_children:
            if child.type == 'attribute_value':
                value = source[child.start_byte:child.end_byte].decode('utf-8', errors='replace')
            elif child.type == 'quoted_attribute_value':
                inner = child_of_type(child, 'attribute_value')
                if inner is not None:
                    value = source[inner.start_byte:inner.end_byte].decode('utf-8', errors='replace')
        attributes[name.lower()] = value.strip().lower()
    return attributes


def is_javascript_block(start_tag: 'Node', source: bytes) -> bool:
    attributes = _attributes(start_tag, source)
    return (
        attributes.get('type', '') in SCRIPT_TYPES
        and attributes.get('lang', '') in SCRIPT_LANGS
    )


def _tag_level(source: bytes, offset: int, indent_width: int) -> int:
    """Indent level of the line a tag starts on."""
    line_start = source.rfind(b'\n', 0, offset) + 1
    line = source[line_start:offset]
    width = len(line) - len(line.lstrip(b' \t'))
    return width // max(indent_width, 1)


def _script_elements(root: 'Node') -> List['Node']:
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == 'script_element':
            found.append(node)
            continue
        stack.extend(reversed(node.named_children))
    return found


def extract_scripts(
    source: bytes,
    root: 'Node',
    indent_script: bool = True,
    indent_width: int = 2,
) -> Tuple[bytes, List[ScriptBlock]]:
    """
    Mask a host document down to its JavaScript blocks.

    Args:
        source: Host document bytes
        root: Root of the host grammar's tree
        indent_script: Indent top-level script statements one level past the tag
        indent_width: Indent unit width, used to measure the tag's level

    Returns:
        (masked bytes of the same length as source, script blocks)
    """
    blocks: List[ScriptBlock] = []
    for element in _script_elements(root):
        start_tag = child_of_type(element, 'start_tag')
        raw_text: Optional['Node'] = child_of_type(element, 'raw_text')
        if start_tag is None or raw_text is None:
            continue
        if not is_javascript_block(start_tag, source):
            logger.debug("Skipping non-JavaScript script block at line %d",
                         element.start_point[0] + 1)
            continue
        base_level = _tag_level(source, element.start_byte, indent_width)
        if indent_script:
            base_level += 1
        blocks.append(ScriptBlock(raw_text.start_byte, raw_text.end_byte, base_level))

    masked = bytearray(len(source))
    for i, byte in enumerate(source):
        masked[i] = byte if byte in (0x0A, 0x0D) else 0x20
    for block in blocks:
        masked[block.start:block.end] = source[block.start:block.end]
    return bytes(masked), blocks


HTML_CONFIG = LanguageConfig(
    name="HTML",
    tree_sitter_name="javascript",
    extensions={'.html', '.htm'},
    host_tree_sitter_name="html",
    script_extractor=extract_scripts,
    exclude_patterns=HTML_EXCLUDE_PATTERNS,
)
