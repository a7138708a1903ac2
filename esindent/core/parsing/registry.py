"""
Parser Registry — Routes files to language-specific configurations.

Central registry that maps file extensions to LanguageConfig instances.

Usage:
    registry = ParserRegistry()
    registry.register(JAVASCRIPT_CONFIG)
    registry.register(SVELTE_CONFIG)

    config = registry.get_config(Path("src/App.svelte"))
    # Returns SVELTE_CONFIG
"""

from pathlib import Path
from typing import Dict, Optional

from .config import LanguageConfig


class ParserRegistry:
    """
    Registry of language configurations.

    Maps file extensions to LanguageConfig instances for routing.
    """

    def __init__(self):
        self._configs: Dict[str, LanguageConfig] = {}  # name -> config
        self._extension_map: Dict[str, str] = {}  # ext -> config name

    def register(self, config: LanguageConfig) -> None:
        """
        Register a language configuration.

        Args:
            config: LanguageConfig to register

        Raises:
            ValueError: If extension already registered to different config
        """
        for ext in config.extensions:
            ext_lower = ext.lower()
            if ext_lower in self._extension_map:
                existing = self._extension_map[ext_lower]
                if existing != config.name:
                    raise ValueError(
                        f"Extension {ext} already registered to {existing}, "
                        f"cannot register to {config.name}"
                    )

        self._configs[config.name] = config
        for ext in config.extensions:
            self._extension_map[ext.lower()] = config.name

    def get_config(self, file_path: Path) -> Optional[LanguageConfig]:
        """
        Get language config for a file based on extension.

        Returns:
            LanguageConfig if extension is supported, None otherwise
        """
        config_name = self._extension_map.get(file_path.suffix.lower())
        return self._configs.get(config_name) if config_name else None

    def is_excluded(self, rel_path: str) -> bool:
        """True if any registered language excludes the relative path."""
        return any(config.should_exclude(rel_path) for config in self._configs.values())

    def is_supported(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self._extension_map

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, name: str) -> bool:
        return name in self._configs


def default_registry() -> ParserRegistry:
    """Registry with every built-in language."""
    from .languages import JAVASCRIPT_CONFIG, SVELTE_CONFIG, HTML_CONFIG

    registry = ParserRegistry()
    for config in (JAVASCRIPT_CONFIG, SVELTE_CONFIG, HTML_CONFIG):
        registry.register(config)
    return registry
