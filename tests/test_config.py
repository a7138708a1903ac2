"""
Tests for Config — Layered indentation settings

These tests validate:
- Defaults and validation of each section
- Config hierarchy (env > project > user > defaults)
- Malformed files are skipped, invalid values are rejected
- set/get round trips through the YAML files

No grammar required.
"""

import pytest
import yaml
from pathlib import Path

from esindent.config import Config, IndentConfig, DisplayConfig, ConfigManager
from esindent.errors import ConfigError


def _write_yaml(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data))


class TestIndentConfig:
    """Indentation style validation."""

    def test_defaults(self):
        """Two spaces, cases indented once, scripts indented past the tag."""
        config = IndentConfig()
        assert config.indent_size == 2
        assert config.indent_type == "space"
        assert config.switch_case == 1
        assert config.indent_script is True
        assert config.validate() is None

    def test_indent_width(self):
        """Tabs count one character per level."""
        assert IndentConfig(indent_size=4).indent_width == 4
        assert IndentConfig(indent_size=4, indent_type="tab").indent_width == 1

    def test_validate_unknown_type(self):
        error = IndentConfig(indent_type="mixed").validate()
        assert error is not None
        assert "Unknown indent type" in error

    def test_validate_size(self):
        assert "Invalid indent size" in IndentConfig(indent_size=0).validate()

    def test_validate_switch_case(self):
        """Zero is allowed, negative is not."""
        assert IndentConfig(switch_case=0).validate() is None
        assert "switch case" in IndentConfig(switch_case=-1).validate()

    def test_validate_rejects_booleans_as_integers(self):
        """YAML `true` is not a size or a level."""
        assert "Invalid indent size" in IndentConfig(indent_size=True).validate()
        assert "switch case" in IndentConfig(switch_case=False).validate()

    def test_validate_indent_script_type(self):
        assert IndentConfig(indent_script=False).validate() is None
        assert "indent_script" in IndentConfig(indent_script="no").validate()


class TestDisplayConfig:
    """Display preferences validation."""

    def test_defaults(self):
        config = DisplayConfig()
        assert config.symbols == "auto"
        assert config.format == "text"

    def test_validate_unknown_format(self):
        assert "Unknown format" in DisplayConfig(format="xml").validate()

    def test_validate_unknown_symbols(self):
        assert "Unknown symbols" in DisplayConfig(symbols="emoji").validate()


class TestConfigSerialization:
    """Dictionary round trip."""

    def test_to_dict_from_dict(self):
        config = Config(indent=IndentConfig(indent_size=4, switch_case=0))
        restored = Config.from_dict(config.to_dict())
        assert restored.indent.indent_size == 4
        assert restored.indent.switch_case == 0
        assert restored.display.format == "text"

    def test_from_dict_partial(self):
        """Missing sections fall back to defaults."""
        config = Config.from_dict({"indent": {"indent_type": "tab"}})
        assert config.indent.indent_type == "tab"
        assert config.indent.indent_size == 2
        assert config.display.symbols == "auto"


class TestConfigManager:
    """Loading the layered configuration."""

    def test_defaults_without_files(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        config = manager.load()
        assert config.indent.indent_size == 2

    def test_user_config_is_read(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        _write_yaml(manager.user_config_path, {"indent": {"indent_size": 4}})

        assert manager.load().indent.indent_size == 4

    def test_project_overrides_user(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        _write_yaml(manager.user_config_path, {"indent": {"indent_size": 4, "switch_case": 0}})
        _write_yaml(manager.project_config_path, {"indent": {"indent_size": 3}})

        config = manager.load()

        assert config.indent.indent_size == 3
        assert config.indent.switch_case == 0  # untouched by the project layer

    def test_env_overrides_project(self, isolated_env, monkeypatch):
        manager = ConfigManager(isolated_env / "project")
        _write_yaml(manager.project_config_path, {"indent": {"indent_size": 3}})
        monkeypatch.setenv("ESINDENT_INDENT_SIZE", "8")
        monkeypatch.setenv("ESINDENT_INDENT_TYPE", "tab")

        config = manager.load()

        assert config.indent.indent_size == 8
        assert config.indent.indent_type == "tab"

    def test_invalid_env_value_raises(self, isolated_env, monkeypatch):
        monkeypatch.setenv("ESINDENT_SWITCH_CASE", "lots")

        with pytest.raises(ConfigError, match="not an integer"):
            ConfigManager(isolated_env / "project").load()

    def test_invalid_file_value_raises(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        _write_yaml(manager.project_config_path, {"indent": {"indent_type": "mixed"}})

        with pytest.raises(ConfigError, match="Unknown indent type"):
            manager.load()

    def test_non_boolean_indent_script_in_file_raises(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        _write_yaml(manager.project_config_path, {"indent": {"indent_script": "no"}})

        with pytest.raises(ConfigError, match="indent_script"):
            manager.load()

    def test_malformed_yaml_is_skipped(self, isolated_env, caplog):
        manager = ConfigManager(isolated_env / "project")
        manager.project_config_path.parent.mkdir(parents=True)
        manager.project_config_path.write_text("indent: [unclosed\n")

        config = manager.load()

        assert config.indent.indent_size == 2
        assert "Ignoring malformed config" in caplog.text

    def test_non_mapping_yaml_is_skipped(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        manager.project_config_path.parent.mkdir(parents=True)
        manager.project_config_path.write_text("- just\n- a list\n")

        assert manager.load().indent.indent_size == 2

    def test_load_is_cached(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        assert manager.load() is manager.load()


class TestConfigSetGet:
    """Persisting values."""

    def test_set_project_value(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")

        assert manager.set("indent.indent_size", "4") is None

        saved = yaml.safe_load(manager.project_config_path.read_text())
        assert saved["indent"]["indent_size"] == 4
        assert ConfigManager(isolated_env / "project").get("indent.indent_size") == "4"

    def test_set_user_value(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")

        assert manager.set("display.format", "json", scope="user") is None

        assert manager.user_config_path.exists()
        assert not manager.project_config_path.exists()

    def test_set_boolean(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        manager.set("indent.indent_script", "false")
        assert manager.get("indent.indent_script") == "false"

    def test_set_rejects_bad_key(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        assert "Invalid key format" in manager.set("indent_size", "4")
        assert "Unknown section" in manager.set("style.indent_size", "4")
        assert "Unknown indent setting" in manager.set("indent.width", "4")

    def test_set_rejects_invalid_value(self, isolated_env):
        """Invalid values are reported and nothing is written."""
        manager = ConfigManager(isolated_env / "project")

        assert "not an integer" in manager.set("indent.indent_size", "wide")
        assert "Unknown indent type" in manager.set("indent.indent_type", "mixed")
        assert manager.load().indent.indent_type == "space"
        assert not manager.project_config_path.exists()

    def test_get_unknown_key(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        assert manager.get("indent.width") is None
        assert manager.get("nonsense") is None

    def test_display(self, isolated_env):
        manager = ConfigManager(isolated_env / "project")
        output = manager.display()
        assert "Size: 2" in output
        assert "(not found)" in output
