"""
Tests for Parsing Module — File routing and tree-sitter parsing.

Tests validate:
- LanguageConfig dataclass
- ParserRegistry extension routing
- Built-in language configs (JavaScript, Svelte, HTML)
- SourceProvider parsing and syntax errors (when available)

All core tests work WITHOUT tree-sitter-language-pack installed.
Tree-sitter dependent tests are marked and skipped when unavailable.
"""

import pytest
from pathlib import Path

from tests.factories import requires_tree_sitter


# =============================================================================
# LanguageConfig Tests
# =============================================================================

class TestLanguageConfig:
    """Test LanguageConfig dataclass."""

    def test_create_basic_config(self):
        """Can create a basic language config."""
        from esindent.core.parsing import LanguageConfig

        config = LanguageConfig(
            name="TestLang",
            tree_sitter_name="javascript",
            extensions={'.test'},
        )

        assert config.name == "TestLang"
        assert config.tree_sitter_name == "javascript"
        assert '.test' in config.extensions
        assert config.is_host is False

    def test_default_max_file_size(self):
        """Default max file size is 300KB."""
        from esindent.core.parsing import LanguageConfig

        config = LanguageConfig(name="X", tree_sitter_name="x", extensions={'.x'})

        assert config.max_file_size == 300_000

    def test_host_config(self):
        """A script extractor makes the config a host document."""
        from esindent.core.parsing import LanguageConfig

        config = LanguageConfig(
            name="Page",
            tree_sitter_name="javascript",
            extensions={'.page'},
            host_tree_sitter_name="html",
            script_extractor=lambda source, root, indent_script, width: (source, []),
        )

        assert config.is_host is True

    def test_should_exclude(self):
        """Exclude patterns match relative paths."""
        from esindent.core.parsing import LanguageConfig

        config = LanguageConfig(
            name="X", tree_sitter_name="x", extensions={'.x'},
            exclude_patterns=['**/node_modules/**', '**/*.min.js'],
        )

        assert config.should_exclude("src/node_modules/lib.js") is True
        assert config.should_exclude("public/app.min.js") is True
        assert config.should_exclude("src/app.js") is False

    def test_should_exclude_nested_paths(self):
        """Patterns reach into nested directories and the top of the tree."""
        from esindent.core.parsing import LanguageConfig

        config = LanguageConfig(
            name="X", tree_sitter_name="x", extensions={'.x'},
            exclude_patterns=['**/node_modules/**', '**/build/**'],
        )

        assert config.should_exclude("node_modules/pkg/lib/index.js") is True
        assert config.should_exclude("node_modules/top.js") is True
        assert config.should_exclude("a/b/node_modules/c/d.js") is True
        assert config.should_exclude("src/rebuild/app.js") is False
        assert config.should_exclude("src/build.js") is False


# =============================================================================
# ParserRegistry Tests
# =============================================================================

class TestParserRegistry:
    """Test ParserRegistry routing."""

    def _config(self, name, extensions, patterns=None):
        from esindent.core.parsing import LanguageConfig
        return LanguageConfig(
            name=name,
            tree_sitter_name="javascript",
            extensions=extensions,
            exclude_patterns=patterns or [],
        )

    def test_empty_registry(self):
        """New registry has no configs."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()

        assert len(registry) == 0
        assert not registry.is_supported(Path("app.js"))

    def test_register_config(self):
        """Registering adds extensions and the language name."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()
        registry.register(self._config("JS", {'.js', '.mjs'}))

        assert len(registry) == 1
        assert "JS" in registry
        assert registry.is_supported(Path("lib.mjs"))

    def test_get_config_by_path(self):
        """Files route by extension, case-insensitively."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()
        config = self._config("JS", {'.js'})
        registry.register(config)

        assert registry.get_config(Path("src/app.js")) is config
        assert registry.get_config(Path("SRC/APP.JS")) is config
        assert registry.get_config(Path("README.md")) is None

    def test_extension_conflict_raises(self):
        """An extension belongs to one language."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()
        registry.register(self._config("JS", {'.js'}))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(self._config("Other", {'.js'}))

    def test_reregister_same_language(self):
        """Re-registering the same language is allowed."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()
        registry.register(self._config("JS", {'.js'}))
        registry.register(self._config("JS", {'.js', '.cjs'}))

        assert len(registry) == 1
        assert registry.is_supported(Path("a.cjs"))

    def test_is_excluded(self):
        """A path excluded by any language is skipped."""
        from esindent.core.parsing import ParserRegistry

        registry = ParserRegistry()
        registry.register(self._config("A", {'.a'}, ['**/dist/**']))
        registry.register(self._config("B", {'.b'}, ['**/node_modules/**']))

        assert registry.is_excluded("dist/app.a") is True
        assert registry.is_excluded("node_modules/pkg/app.a") is True
        assert registry.is_excluded("src/app.a") is False


# =============================================================================
# Built-in Languages
# =============================================================================

class TestBuiltinLanguages:
    """Test the default registry."""

    def test_default_registry_languages(self):
        from esindent.core.parsing import default_registry

        registry = default_registry()

        assert len(registry) == 3
        for name in ("HTML", "JavaScript", "Svelte"):
            assert name in registry

    def test_javascript_extensions(self):
        from esindent.core.parsing.languages import JAVASCRIPT_CONFIG

        assert JAVASCRIPT_CONFIG.extensions == {'.js', '.mjs', '.cjs', '.jsx'}
        assert JAVASCRIPT_CONFIG.is_host is False

    def test_host_documents(self):
        """Svelte and HTML locate scripts with the HTML grammar."""
        from esindent.core.parsing.languages import SVELTE_CONFIG, HTML_CONFIG

        for config in (SVELTE_CONFIG, HTML_CONFIG):
            assert config.is_host is True
            assert config.host_tree_sitter_name == "html"
            assert config.tree_sitter_name == "javascript"

    def test_minified_files_excluded(self):
        from esindent.core.parsing.languages import JAVASCRIPT_CONFIG

        assert JAVASCRIPT_CONFIG.should_exclude("dist/app.min.js")


# =============================================================================
# SourceProvider Tests
# =============================================================================

class TestSourceProvider:
    """Test language selection (no parsing)."""

    def test_config_for_known_extension(self):
        from esindent.core.parsing import SourceProvider
        from esindent.core.parsing.languages import SVELTE_CONFIG

        assert SourceProvider().config_for("src/App.svelte") is SVELTE_CONFIG

    def test_config_for_falls_back_to_javascript(self):
        """Unknown extensions and buffers without a path parse as JavaScript."""
        from esindent.core.parsing import SourceProvider
        from esindent.core.parsing.languages import JAVASCRIPT_CONFIG

        provider = SourceProvider()

        assert provider.config_for("notes.txt") is JAVASCRIPT_CONFIG
        assert provider.config_for(None) is JAVASCRIPT_CONFIG


@requires_tree_sitter
class TestSourceProviderParsing:
    """Test parsing with tree-sitter."""

    def test_parse_javascript(self):
        from esindent.core.parsing import SourceProvider

        source = SourceProvider().parse("const a = 1;\n", path="a.js")

        assert source.path == "a.js"
        assert source.root.type == "program"
        assert [t.value for t in source.tokens] == ["const", "a", "=", "1", ";"]
        assert source.script_blocks == []

    def test_parse_bytes(self):
        from esindent.core.parsing import SourceProvider

        source = SourceProvider().parse(b"foo();\n")

        assert source.tokens[0].value == "foo"

    def test_syntax_error_reports_line(self):
        """Trees with errors are rejected with the first error's line."""
        from esindent.core.parsing import SourceProvider
        from esindent.errors import SourceParseError

        with pytest.raises(SourceParseError) as error:
            SourceProvider().parse("a();\nconst = ;\n", path="bad.js")

        assert error.value.path == "bad.js"
        assert error.value.line == 2
        assert str(error.value).startswith("bad.js:2:")

    def test_unknown_grammar_raises(self):
        from esindent.core.parsing import SourceProvider
        from esindent.errors import SourceParseError

        with pytest.raises(SourceParseError, match="not available"):
            SourceProvider()._get_parser("no-such-grammar")

    def test_parsers_are_cached(self):
        from esindent.core.parsing import SourceProvider

        provider = SourceProvider()

        assert provider._get_parser("javascript") is provider._get_parser("javascript")

    def test_host_document_keeps_line_numbers(self):
        from esindent.core.parsing import SourceProvider

        text = "<p>intro</p>\n<script>\n  go();\n</script>\n"
        source = SourceProvider().parse(text, path="page.html")

        go = source.tokens[0]
        assert (go.value, go.line, go.column) == ("go", 3, 2)
        assert len(source.script_blocks) == 1
