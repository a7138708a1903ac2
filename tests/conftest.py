"""
Shared pytest fixtures for the esindent test suite.

Usage in tests:
    def test_something(indent):
        indent.assert_idempotent('''
            foo(
              a,
            );
        ''')

    def test_with_four_spaces(indent4):
        assert indent4.levels("if (a)\\n    b();\\n") == {1: 0, 2: 1}
"""

import pytest

from tests.factories import IndentTestFactory


@pytest.fixture
def indent():
    """Pipeline factory with the default style (2 spaces, case indented once)."""
    return IndentTestFactory()


@pytest.fixture
def indent4():
    """Pipeline factory with 4-space indentation."""
    return IndentTestFactory(indent_size=4)


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """
    Strip ESINDENT_* variables and point HOME at a temp dir.

    Keeps config tests independent of the developer's own settings.
    """
    for key in ("ESINDENT_INDENT_SIZE", "ESINDENT_INDENT_TYPE", "ESINDENT_SWITCH_CASE",
                "ESINDENT_PROJECT_PATH"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("ESINDENT_ASCII_ONLY", "1")
    return tmp_path
