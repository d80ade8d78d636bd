"""
Configuration management for Loremaster.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage cache, search, registry and logging
settings without changing code.
"""

import copy
import yaml
from pathlib import Path
from typing import Any, Dict, List
import logging


DEFAULT_CONFIG: Dict[str, Any] = {
    "cache": {
        "snapshot_file": "data/cache/timeline_cache.json",
        "stale_after_hours": 24
    },
    "search": {
        "max_results": 20
    },
    "registry": {
        "autocomplete_limit": 10,
        "names": []
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "log_file": "loremaster.log"
    }
}


class ConfigManager:
    """
    Manages configuration loading and access for Loremaster.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration root must be a mapping, got {type(loaded).__name__}")

            self._config = self._merge(self._get_default_config(), loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError, ValueError) as e:
            logging.warning(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return copy.deepcopy(DEFAULT_CONFIG)

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay file values on top of the defaults."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = self._merge(base[key], value)
            else:
                base[key] = value
        return base

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "cache.snapshot_file")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("search.max_results")  # Returns 20
            config.get("logging.level")  # Returns "INFO"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def snapshot_file(self) -> str:
        """Get the path of the persisted timeline snapshot."""
        return self.get("cache.snapshot_file", "data/cache/timeline_cache.json")

    @property
    def stale_after_hours(self) -> float:
        """Get the age after which a snapshot counts as stale."""
        return float(self.get("cache.stale_after_hours", 24))

    @property
    def max_results(self) -> int:
        """Get the default cap on ranked search results."""
        return int(self.get("search.max_results", 20))

    @property
    def autocomplete_limit(self) -> int:
        """Get the default cap on name autocomplete results."""
        return int(self.get("registry.autocomplete_limit", 10))

    @property
    def known_names(self) -> List[Dict[str, Any]]:
        """Get the canonical names (with aliases) seeded into the name registry."""
        return self.get("registry.names", []) or []

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("logging.log_file", "loremaster.log")
