#!/usr/bin/env python3
"""Layered settings loading for srcexport.

This module builds the ``Settings`` snapshot an export runs with from:
- Compiled defaults (``Settings.default()``)
- A YAML settings file
- Environment variables (``SRCEXPORT_*``)
- Command-line overrides
- Runtime updates

Higher layers override lower ones key by key; nested dictionaries are deep
merged, lists (rules, replacements, excluded projects) are replaced whole.

Example:
    >>> config = ConfigManager()
    >>> config.load_file("export.yaml")
    >>> config.set("compute_hash", False, ConfigSource.CLI_ARGS)
    >>> settings = config.to_settings()
"""

import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from srcexport.core.constants import BOOLEAN_KEYS, ConfigKey, ErrorCode
from srcexport.core.settings import Settings, settings_from_dict, settings_to_dict
from srcexport.core.validators import ValidationError

ENV_PREFIX = "SRCEXPORT_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe layered settings manager.

    Manages settings from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. Settings file
    3. Environment variables (SRCEXPORT_*)
    4. CLI arguments
    5. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional settings file to load
            load_environment: Read ``SRCEXPORT_*`` environment variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = settings_to_dict(Settings.default())

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load settings from a YAML file.

        Args:
            file_path: Path to YAML settings file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if config_data is None:
            config_data = {}

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = config_data

    def load_dict(
        self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Load settings from a dictionary.

        Args:
            config_data: Settings dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = config_data.copy()

    def _load_environment(self) -> None:
        """Load scalar settings from environment variables.

        Environment variables in format: SRCEXPORT_KEY=value
        Example: SRCEXPORT_COMPUTE_HASH=false
        """
        env_config = {}
        scalar_keys = set(BOOLEAN_KEYS) | {ConfigKey.OUTPUT_READ_ONLY}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            name = key[len(ENV_PREFIX):].lower()
            if name not in scalar_keys:
                continue

            env_config[name] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = env_config

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value.

        Args:
            value: String value from environment

        Returns:
            True, False, None or the raw string
        """
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
        if lowered in ("null", "none", "unchanged", ""):
            return None
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting by key.

        Args:
            key: Top-level settings key
            default: Default value if key not found

        Returns:
            Setting value from the highest layer defining it, or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                if key in self._config[source]:
                    return self._config[source][key]

            return default

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a setting.

        Args:
            key: Top-level settings key
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            self._config.setdefault(source, {})[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged settings from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}

            # Merge from lowest to highest precedence
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])

            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def to_settings(self) -> Settings:
        """Build the immutable ``Settings`` snapshot.

        Raises:
            ConfigError: If the merged settings are invalid
        """
        try:
            return settings_from_dict(self.get_all())
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}", e.error_code)

    def dump(self) -> str:
        """Render the merged settings as YAML."""
        return yaml.safe_dump(self.get_all(), sort_keys=False, allow_unicode=True)

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                sources_to_clear = [
                    s for s in self._config.keys() if s != ConfigSource.COMPILED_DEFAULTS
                ]
                for s in sources_to_clear:
                    del self._config[s]
