"""
Configuration module for nobrowser.

This module provides:
- Strongly-typed option classes (SessionOptions) validated with Pydantic
- Configuration file loading (JSON, YAML, INI, TOML)
- Environment variable support

Example usage:
    from nobrowser.config import NoBrowserConfig, SessionOptions, load_config

    # Load from file with environment overrides
    config = load_config("nobrowser.config.json")

    # Create programmatically
    config = NoBrowserConfig(
        session=SessionOptions(timeout=60.0, max_redirects=5),
    )

Environment variables:
    NOBROWSER_SESSION_TIMEOUT=60
    NOBROWSER_SESSION_MAX_REDIRECTS=5
    NOBROWSER_SESSION_VERIFY_SSL=false
    NOBROWSER_SESSION_CA_BUNDLE=/etc/ssl/internal-ca.pem
"""

from nobrowser.exceptions import ConfigurationError

from .defaults import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_COOKIE_STORE,
    DEFAULT_FOLLOW_REDIRECTS,
    DEFAULT_HEADERS,
    DEFAULT_IMPERSONATE,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_SESSION_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_VERIFY_SSL,
    ENV_PREFIX,
    get_default_session_config,
)
from .env import (
    ENV_MAPPINGS,
    get_env,
    get_env_bool,
    get_env_float,
    get_env_int,
    get_env_key,
    load_env_config,
)
from .loader import (
    ConfigLoader,
    find_config_file,
    load_config,
    load_file,
    merge_configs,
)
from .options import NoBrowserConfig, SessionOptions

__all__ = [
    # Main configuration class
    "NoBrowserConfig",
    "SessionOptions",
    # Loader functions
    "load_config",
    "load_file",
    "find_config_file",
    "merge_configs",
    "ConfigLoader",
    "ConfigurationError",
    # Environment functions
    "get_env",
    "get_env_bool",
    "get_env_int",
    "get_env_float",
    "get_env_key",
    "load_env_config",
    "ENV_MAPPINGS",
    "ENV_PREFIX",
    # Default values
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_SESSION_TIMEOUT",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_FOLLOW_REDIRECTS",
    "DEFAULT_VERIFY_SSL",
    "DEFAULT_IMPERSONATE",
    "DEFAULT_COOKIE_STORE",
    "DEFAULT_USER_AGENT",
    "DEFAULT_HEADERS",
    "get_default_session_config",
]
