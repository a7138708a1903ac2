"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Command-line flags (applied by the CLI)
  2. Environment variables (ESINDENT_*)
  3. Project config (.esindent/config.yaml)
  4. User config (~/.esindent/config.yaml)
  5. Defaults
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .errors import ConfigError
from .presentation.symbols import get_symbols

logger = logging.getLogger(__name__)


INDENT_TYPES = ("space", "tab")
OUTPUT_FORMATS = ("text", "json")

# Environment variable -> (section, setting)
ENV_OVERRIDES = {
    "ESINDENT_INDENT_SIZE": ("indent", "indent_size"),
    "ESINDENT_INDENT_TYPE": ("indent", "indent_type"),
    "ESINDENT_SWITCH_CASE": ("indent", "switch_case"),
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class IndentConfig:
    """Indentation style."""
    indent_size: int = 2        # spaces per level (ignored for tabs)
    indent_type: str = "space"  # "space" | "tab"
    switch_case: int = 1        # levels of `case` inside a switch body
    indent_script: bool = True  # indent <script> contents past the tag

    @property
    def indent_width(self) -> int:
        """Indent characters per level."""
        return 1 if self.indent_type == "tab" else self.indent_size

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.indent_type not in INDENT_TYPES:
            return f"Unknown indent type '{self.indent_type}'. Valid: {', '.join(INDENT_TYPES)}"
        # bool is an int subclass; YAML `true` is not a size
        if not _is_int(self.indent_size) or self.indent_size < 1:
            return f"Invalid indent size '{self.indent_size}'. Must be a positive integer"
        if not _is_int(self.switch_case) or self.switch_case < 0:
            return f"Invalid switch case level '{self.switch_case}'. Must be 0 or more"
        if not isinstance(self.indent_script, bool):
            return f"Invalid indent_script '{self.indent_script}'. Must be true or false"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    format: str = "text"   # "text" | "json"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"

        if self.format not in OUTPUT_FORMATS:
            return f"Unknown format '{self.format}'. Valid: {', '.join(OUTPUT_FORMATS)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    indent: IndentConfig = field(default_factory=IndentConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> Optional[str]:
        return self.indent.validate() or self.display.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "indent": {
                "indent_size": self.indent.indent_size,
                "indent_type": self.indent.indent_type,
                "switch_case": self.indent.switch_case,
                "indent_script": self.indent.indent_script,
            },
            "display": {
                "symbols": self.display.symbols,
                "format": self.display.format,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        indent_data = data.get("indent") or {}
        display_data = data.get("display") or {}

        return cls(
            indent=IndentConfig(
                indent_size=indent_data.get("indent_size", 2),
                indent_type=indent_data.get("indent_type", "space"),
                switch_case=indent_data.get("switch_case", 1),
                indent_script=indent_data.get("indent_script", True),
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
                format=display_data.get("format", "text"),
            ),
        )


def _coerce(setting: str, value: str) -> Any:
    """Convert a string value (env var, CLI) to the setting's type."""
    if setting in ("indent_size", "switch_case"):
        try:
            return int(value)
        except ValueError:
            raise ConfigError(f"Invalid value for {setting}: '{value}' is not an integer")
    if setting == "indent_script":
        return value.lower() in ('true', '1', 'yes')
    return value


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.esindent/config.yaml)
      3. User config (~/.esindent/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR_NAME = ".esindent"
    PROJECT_CONFIG_DIR = ".esindent"
    CONFIG_FILE = "config.yaml"

    SETTINGS = {
        "indent": ("indent_size", "indent_type", "switch_case", "indent_script"),
        "display": ("symbols", "format"),
    }

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else Path.home() / self.USER_CONFIG_DIR_NAME
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / self.CONFIG_FILE

    def _read(self, path: Path) -> Dict[str, Any]:
        """Read one YAML layer; malformed files are logged and skipped."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed config %s: expected a mapping", path)
            return {}
        return data

    def load(self) -> Config:
        """
        Load configuration from all sources.

        Raises:
            ConfigError: If the merged configuration is invalid
        """
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        for env_key, (section, setting) in ENV_OVERRIDES.items():
            if os.environ.get(env_key):
                config_data.setdefault(section, {})[setting] = _coerce(setting, os.environ[env_key])

        config = Config.from_dict(config_data)
        error = config.validate()
        if error:
            raise ConfigError(error)

        self._config = config
        return self._config

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_dir.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "indent.indent_size")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'indent.indent_size')"

        section, setting = parts
        if section not in self.SETTINGS:
            return f"Unknown section: {section}. Valid: {', '.join(self.SETTINGS)}"
        if setting not in self.SETTINGS[section]:
            return f"Unknown {section} setting: {setting}. Valid: {', '.join(self.SETTINGS[section])}"

        try:
            coerced = _coerce(setting, value)
        except ConfigError as e:
            return str(e)

        target = config.indent if section == "indent" else config.display
        previous = getattr(target, setting)
        setattr(target, setting, coerced)
        error = target.validate()
        if error:
            setattr(target, setting, previous)
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        if setting not in self.SETTINGS.get(section, ()):
            return None
        value = getattr(config.indent if section == "indent" else config.display, setting)
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols()

        def status(path: Path) -> str:
            return f"{symbols.check_pass} {path}" if path.exists() else f"{symbols.bullet} {path} (not found)"

        lines = [
            "Configuration:",
            "",
            "Indent:",
            f"  Size: {config.indent.indent_size}",
            f"  Type: {config.indent.indent_type}",
            f"  Switch case: {config.indent.switch_case}",
            f"  Indent script: {config.indent.indent_script}",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            f"  Format: {config.display.format}",
            "",
            "Config files:",
            f"  User: {status(self.user_config_path)}",
            f"  Project: {status(self.project_config_path)}",
        ]

        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
