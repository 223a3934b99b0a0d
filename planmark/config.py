"""
Settings for planmark.

Values come from a YAML file (config.yaml, or the file named by the
PLANMARK_CONFIG environment variable) layered over built-in defaults, so a
file only needs the keys it changes.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml


DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULTS: Dict[str, Any] = {
    "paths": {
        "history_dir": "~/.planmark/history",
        "plans_dir": "~/.planmark/plans",
        "log_file": "planmark.log"
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    },
    "slug": {
        "max_length": 30,
        "min_length": 2,
        "fallback": "plan"
    },
    "share": {
        "base_url": "https://share.planmark.dev/",
        "token_budget": 8000
    },
    "outline": {
        "max_level": 3
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively lay `override` over a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    YAML-backed settings with dot-path lookup.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Args:
            config_path: YAML file to read; a missing or malformed file leaves the defaults in place
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        if not self.config_path.exists():
            logging.info(f"No settings file at {self.config_path}, using defaults")
            self._config = copy.deepcopy(DEFAULTS)
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Could not read settings from {self.config_path}: {e}")
            self._config = copy.deepcopy(DEFAULTS)
            return

        if not isinstance(loaded, dict):
            logging.error(f"Settings file {self.config_path} is not a mapping, using defaults")
            loaded = {}

        self._config = _merge(DEFAULTS, loaded)
        logging.info(f"Settings read from {self.config_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Look up a value by dotted path.

        Examples:
            config.get("paths.history_dir")   # "~/.planmark/history"
            config.get("share.token_budget")  # 8000
        """
        node: Any = self._config
        for part in key_path.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_section(self, section: str) -> Dict[str, Any]:
        """Return one top-level section as a dict (empty when absent)."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Re-read the settings file."""
        self._load_config()

    @property
    def history_directory(self) -> Path:
        """Version history root, with ~ expanded."""
        return Path(self.get("paths.history_dir")).expanduser()

    @property
    def plans_directory(self) -> Path:
        """Decision archive directory, with ~ expanded."""
        return Path(self.get("paths.plans_dir")).expanduser()

    @property
    def log_filename(self) -> str:
        return self.get("paths.log_file")

    @property
    def slug_max_length(self) -> int:
        return self.get("slug.max_length")

    @property
    def slug_min_length(self) -> int:
        return self.get("slug.min_length")

    @property
    def slug_fallback(self) -> str:
        """Slug prefix for plans without a usable heading."""
        return self.get("slug.fallback")

    @property
    def share_base_url(self) -> str:
        return self.get("share.base_url")

    @property
    def share_token_budget(self) -> int:
        """Soft limit on share token length, in characters."""
        return self.get("share.token_budget")

    @property
    def outline_max_level(self) -> int:
        return self.get("outline.max_level")


config = ConfigManager(os.environ.get("PLANMARK_CONFIG", DEFAULT_CONFIG_PATH))


def get_config() -> ConfigManager:
    """Return the process-wide settings."""
    return config
