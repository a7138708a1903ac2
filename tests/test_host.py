"""
Tests for host documents — `<script>` blocks inside Svelte and HTML files.

Tests validate:
- Script statements start one level past their tag (or flush when disabled)
- Nested tags shift the whole block
- Non-JavaScript script blocks are skipped
- Masking keeps byte offsets and line numbers of the host document

Tree-sitter dependent: all tests parse real documents.
"""

from esindent.core.parsing.languages.html import extract_scripts
from tests.factories import requires_tree_sitter


pytestmark = requires_tree_sitter


COMPONENT = """
    <script>
      let count = 0;
      $: doubled = count * 2;
      function inc() {
        count += 1;
      }
    </script>

    <button on:click={inc}>{count}</button>
"""


def _html_root(source: bytes):
    from tree_sitter_language_pack import get_parser
    return get_parser("html").parse(source).root_node


class TestSvelte:
    """Component script blocks."""

    def test_statements_one_level_past_tag(self, indent):
        assert indent.levels(COMPONENT, "App.svelte") == {2: 1, 3: 1, 4: 1, 5: 2, 6: 1}

    def test_component_is_idempotent(self, indent):
        indent.assert_idempotent(COMPONENT, "App.svelte")

    def test_indent_script_disabled(self, indent):
        flush = indent.with_config(indent_script=False)
        assert flush.levels(COMPONENT, "App.svelte") == {2: 0, 3: 0, 4: 0, 5: 1, 6: 0}

    def test_markup_is_not_checked(self, indent):
        result = indent.check(COMPONENT, "App.svelte")
        assert result.ok
        assert 9 not in result.levels

    def test_flush_script_is_reported(self, indent):
        result = indent.check("""
            <script>
            let a = 1;
            </script>
        """, "App.svelte")
        assert [v.line for v in result.violations] == [2]
        assert result.violations[0].message == "Expected indentation of 2 spaces but found 0."

    def test_module_and_instance_scripts(self, indent):
        levels = indent.levels("""
            <script context="module">
              export const prerender = true;
            </script>

            <script>
              let name = "world";
            </script>
        """, "App.svelte")
        assert levels == {2: 1, 6: 1}


class TestHtml:
    """Script elements in pages."""

    def test_nested_tag_shifts_block(self, indent):
        levels = indent.levels("""
            <html>
              <body>
                <script>
                  const a = 1;
                  if (a) {
                    run();
                  }
                </script>
              </body>
            </html>
        """, "index.html")
        assert levels == {4: 3, 5: 3, 6: 4, 7: 3}

    def test_statement_on_tag_line_is_not_checked(self, indent):
        levels = indent.levels("""
            <script>const a = 1;
              run();
            </script>
        """, "index.html")
        assert levels == {2: 1}

    def test_json_block_is_skipped(self, indent):
        levels = indent.levels("""
            <script type="application/json">
            {"a": [1,
                   2]}
            </script>
        """, "index.html")
        assert levels == {}

    def test_typescript_block_is_skipped(self, indent):
        """A lang="ts" block would not parse as JavaScript."""
        result = indent.check("""
            <script lang="ts">
              let a: number = 1;
            </script>
        """, "index.html")
        assert result.ok
        assert result.levels == {}

    def test_module_type_is_checked(self, indent):
        levels = indent.levels("""
            <script type="module">
              import { a } from "./a.js";
            </script>
        """, "index.html")
        assert levels == {2: 1}


class TestExtractScripts:
    """Masking the host document."""

    def test_masked_keeps_length_and_newlines(self):
        source = b'<div class="x">\n<script>\nfoo();\n</script>\n</div>\n'
        masked, blocks = extract_scripts(source, _html_root(source))

        assert len(masked) == len(source)
        assert [i for i, b in enumerate(masked) if b == 0x0A] == \
            [i for i, b in enumerate(source) if b == 0x0A]
        assert b"foo();" in masked
        assert b"div" not in masked
        assert b"script" not in masked
        assert len(blocks) == 1

    def test_block_range_and_level(self):
        source = b'  <script>\n  foo();\n  </script>\n'
        masked, blocks = extract_scripts(source, _html_root(source), indent_width=2)

        block = blocks[0]
        assert source[block.start:block.end] == b'\n  foo();\n  '
        assert block.base_level == 2

    def test_level_without_script_indent(self):
        source = b'  <script>\n  foo();\n  </script>\n'
        _, blocks = extract_scripts(source, _html_root(source), indent_script=False, indent_width=2)

        assert blocks[0].base_level == 1

    def test_non_javascript_block_is_fully_masked(self):
        source = b'<script type="text/template">\n<p>hi</p>\n</script>\n'
        masked, blocks = extract_scripts(source, _html_root(source))

        assert blocks == []
        assert masked.strip() == b""
