"""
Configuration file loader for nobrowser.

This module provides functions to load configuration from various file formats
including JSON, YAML, INI, and TOML.
"""

import json
import logging
from configparser import ConfigParser
from pathlib import Path
from typing import Any, Optional, Union

from nobrowser.exceptions import ConfigurationError

from .defaults import (
    DEFAULT_CONFIG_EXTENSIONS,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CONFIG_SEARCH_PATHS,
)
from .env import load_env_config
from .options import NoBrowserConfig

logger = logging.getLogger(__name__)


def _load_json(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        import yaml
    except ImportError:
        raise ConfigurationError(
            "PyYAML is required to load YAML config files. "
            "Install with: pip install nobrowser[yaml]"
        )

    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc


def _load_toml(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    try:
        import tomllib
    except ImportError:
        try:
            import tomli as tomllib
        except ImportError:
            raise ConfigurationError(
                "tomli is required to load TOML config files on Python < 3.11. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def _load_ini(path: Path) -> dict[str, Any]:
    """Load configuration from INI file.

    Keys of the form ``headers.accept`` become nested dictionaries.
    """
    parser = ConfigParser()
    parser.optionxform = str
    parser.read(path, encoding="utf-8")

    result: dict[str, Any] = {}

    for section in parser.sections():
        values: dict[str, Any] = {}
        for key, value in parser.items(section):
            if "." in key:
                outer, inner = key.split(".", 1)
                values.setdefault(outer, {})[inner] = value.strip()
            else:
                values[key] = _convert_ini_value(value)
        result[section] = values

    return result


def _convert_ini_value(value: str) -> Any:
    """Convert INI string value to appropriate type."""
    value = value.strip()

    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def load_file(path: Union[str, Path]) -> dict[str, Any]:
    """Load configuration from file based on extension.

    Args:
        path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If file format is not supported, the file is
            missing, or its content cannot be parsed
    """
    path = Path(path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()

    if suffix == ".json":
        data = _load_json(path)
    elif suffix in (".yaml", ".yml"):
        data = _load_yaml(path)
    elif suffix == ".toml":
        data = _load_toml(path)
    elif suffix == ".ini":
        data = _load_ini(path)
    else:
        raise ConfigurationError(f"Unsupported configuration format: {suffix}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")
    return data


def find_config_file(
    filename: str = DEFAULT_CONFIG_FILENAME,
    search_paths: Optional[list[str]] = None,
    extensions: Optional[list[str]] = None,
) -> Optional[Path]:
    """Find configuration file in search paths.

    Args:
        filename: Base filename without extension
        search_paths: Directories to search
        extensions: File extensions to try

    Returns:
        Path to config file or None if not found
    """
    if search_paths is None:
        search_paths = DEFAULT_CONFIG_SEARCH_PATHS

    if extensions is None:
        extensions = DEFAULT_CONFIG_EXTENSIONS

    for search_path in search_paths:
        search_dir = Path(search_path).expanduser()

        for ext in extensions:
            config_path = search_dir / f"{filename}{ext}"
            if config_path.exists():
                return config_path

    return None


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs take precedence over earlier ones.
    """
    result: dict[str, Any] = {}

    for config in configs:
        _deep_merge(result, config)

    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary in-place."""
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = value


class ConfigLoader:
    """Configuration loader with support for multiple sources.

    This class provides a unified interface for loading configuration from
    files, environment variables, and programmatic overrides.
    """

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        search_paths: Optional[list[str]] = None,
        load_env: bool = True,
        auto_find: bool = True,
    ):
        """Initialize configuration loader.

        Args:
            config_file: Explicit path to configuration file
            search_paths: Directories to search for config files
            load_env: Whether to load environment variables
            auto_find: Whether to auto-find config files
        """
        self.config_file = Path(config_file) if config_file else None
        self.search_paths = search_paths or DEFAULT_CONFIG_SEARCH_PATHS
        self.load_env = load_env
        self.auto_find = auto_find
        self._file_config: Optional[dict[str, Any]] = None
        self._env_config: Optional[dict[str, Any]] = None

    def load(self, overrides: Optional[dict[str, Any]] = None) -> NoBrowserConfig:
        """Load configuration from all sources.

        Priority (highest to lowest):
        1. Programmatic overrides
        2. Environment variables
        3. Configuration file
        4. Default values

        Raises:
            ConfigurationError: If a file cannot be read or the merged
                values fail validation
        """
        configs = []

        file_config = self._load_file_config()
        if file_config:
            configs.append(file_config)

        if self.load_env:
            env_config = self._load_env_config()
            if env_config:
                configs.append(env_config)

        if overrides:
            configs.append(overrides)

        merged = merge_configs(*configs) if configs else {}

        try:
            return NoBrowserConfig.from_dict(merged)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def _load_file_config(self) -> Optional[dict[str, Any]]:
        """Load configuration from the explicit or discovered file."""
        if self._file_config is not None:
            return self._file_config

        config_path = self.config_file

        if config_path is None and self.auto_find:
            config_path = find_config_file(search_paths=self.search_paths)
            if config_path is not None:
                logger.debug("Using configuration file %s", config_path)

        if config_path is not None:
            self._file_config = load_file(config_path)

        return self._file_config

    def _load_env_config(self) -> Optional[dict[str, Any]]:
        """Load configuration from environment variables."""
        if self._env_config is not None:
            return self._env_config

        self._env_config = load_env_config()
        return self._env_config

    def reload(self) -> NoBrowserConfig:
        """Reload configuration from all sources."""
        self._file_config = None
        self._env_config = None
        return self.load()


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
    load_env: bool = True,
    auto_find: bool = True,
) -> NoBrowserConfig:
    """Convenience function to load configuration.

    Args:
        config_file: Path to configuration file
        overrides: Programmatic overrides
        load_env: Whether to load environment variables
        auto_find: Whether to search the default locations for a file

    Returns:
        Loaded configuration
    """
    loader = ConfigLoader(config_file=config_file, load_env=load_env, auto_find=auto_find)
    return loader.load(overrides=overrides)
