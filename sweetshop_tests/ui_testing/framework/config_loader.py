"""
================================================================================
Configuration Loader
================================================================================

Settings for the Sweet Shop suite: `config/config.yaml`, overridable per key
from the environment so CI can switch engine or site without editing YAML.

    ui.browser                      <- UI_BROWSER
    ui.headless                     <- UI_HEADLESS
    resilience.fallback_timeout_ms  <- RESILIENCE_FALLBACK_TIMEOUT_MS

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Repository root /config/config.yaml
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "config.yaml"

_TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigurationError(Exception):
    """Raised when the configuration file cannot be parsed."""
    pass


def env_key(key: str) -> str:
    """Environment variable overriding a dotted key: ui.base_url -> UI_BASE_URL."""
    return key.upper().replace(".", "_")


def coerce(raw: str, like: Any) -> Any:
    """Convert an environment string to the type of `like` (bool, int, float)."""
    if isinstance(like, bool):
        return raw.strip().lower() in _TRUE_VALUES
    for kind in (int, float):
        if isinstance(like, kind):
            try:
                return kind(raw)
            except ValueError:
                logger.warning(f"Ignoring non-{kind.__name__} override {raw!r}")
                return like
    return raw


class ConfigLoader:
    """
    Process-wide view of the suite configuration.

    Lookup order: environment variable, YAML file, caller's default.

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("ui.browser", "chromium")
        'chromium'
        >>> config.get("resilience.fallback_policy", {})
        {'firefox': ['force', 'navigate', 'dom_invoke']}
    """

    _instance: Optional["ConfigLoader"] = None

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Singleton - the YAML file is read once per process."""
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._data = cls._read(Path(config_path) if config_path else DEFAULT_CONFIG_PATH)
            cls._instance = instance
        return cls._instance

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.warning(f"Configuration file not found: {path}, using defaults and environment")
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")
        logger.debug(f"Loaded configuration from: {path}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key ("resilience.primary_timeout_ms").

        Environment overrides are converted to the type of `default`; a
        missing key or an explicit YAML null yields `default`.
        """
        raw = os.environ.get(env_key(key))
        if raw is not None:
            return coerce(raw, default)

        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded file (used by tests)."""
        cls._instance = None


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
]
