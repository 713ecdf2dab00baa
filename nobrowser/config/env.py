"""
Environment variable support for nobrowser configuration.

This module provides functions to load configuration values from environment
variables with support for type conversion.
"""

import os
from typing import Any, Optional, TypeVar, Union, get_args, get_origin

from .defaults import ENV_PREFIX

T = TypeVar("T")


def get_env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Convert a configuration key to environment variable name.

    Args:
        key: Configuration key (e.g., "session.timeout")
        prefix: Environment variable prefix

    Returns:
        Environment variable name (e.g., "NOBROWSER_SESSION_TIMEOUT")
    """
    return f"{prefix}{key.upper().replace('.', '_').replace('-', '_')}"


def parse_bool(value: str) -> bool:
    """Parse string to boolean."""
    return value.strip().lower() in ("true", "1", "yes", "on", "enabled")


def parse_dict(value: str) -> dict[str, str]:
    """Parse string to dictionary.

    Format: "key1=value1,key2=value2"
    """
    if not value:
        return {}

    result = {}
    for pair in value.split(","):
        if "=" in pair:
            k, v = pair.split("=", 1)
            result[k.strip()] = v.strip()

    return result


def parse_value(value: str, target_type: Any) -> Any:
    """Parse string value to target type.

    Args:
        value: String value
        target_type: Target type (Optional and dict types are understood)

    Returns:
        Parsed value
    """
    origin = get_origin(target_type)

    if origin is Union:
        non_none_types = [t for t in get_args(target_type) if t is not type(None)]
        if non_none_types:
            return parse_value(value, non_none_types[0])
        return value

    if origin is dict:
        return parse_dict(value)

    if target_type == bool:
        return parse_bool(value)

    if target_type == int:
        return int(value)

    if target_type == float:
        return float(value)

    return value


def get_env(
    key: str,
    default: Optional[T] = None,
    target_type: Optional[type] = None,
    prefix: str = ENV_PREFIX,
) -> Optional[Union[T, str]]:
    """Get configuration value from environment variable.

    Args:
        key: Configuration key (e.g., "session.timeout")
        default: Default value if not set
        target_type: Target type for parsing
        prefix: Environment variable prefix

    Returns:
        Parsed value or default
    """
    value = os.environ.get(get_env_key(key, prefix))

    if value is None:
        return default

    if target_type is not None:
        return parse_value(value, target_type)

    # Infer type from default
    if default is not None:
        return parse_value(value, type(default))

    return value


def get_env_bool(key: str, default: bool = False, prefix: str = ENV_PREFIX) -> bool:
    """Get boolean value from environment variable."""
    result = get_env(key, default, bool, prefix)
    return result if isinstance(result, bool) else default


def get_env_int(key: str, default: int = 0, prefix: str = ENV_PREFIX) -> int:
    """Get integer value from environment variable."""
    result = get_env(key, default, int, prefix)
    return result if isinstance(result, int) else default


def get_env_float(key: str, default: float = 0.0, prefix: str = ENV_PREFIX) -> float:
    """Get float value from environment variable."""
    result = get_env(key, default, float, prefix)
    return result if isinstance(result, (int, float)) else default


# Predefined environment variable mappings
ENV_MAPPINGS = {
    "session.timeout": ("NOBROWSER_SESSION_TIMEOUT", float),
    "session.max_redirects": ("NOBROWSER_SESSION_MAX_REDIRECTS", int),
    "session.follow_redirects": ("NOBROWSER_SESSION_FOLLOW_REDIRECTS", bool),
    "session.verify_ssl": ("NOBROWSER_SESSION_VERIFY_SSL", bool),
    "session.ca_bundle": ("NOBROWSER_SESSION_CA_BUNDLE", str),
    "session.impersonate": ("NOBROWSER_SESSION_IMPERSONATE", str),
    "session.proxy": ("NOBROWSER_SESSION_PROXY", str),
    "session.user_agent": ("NOBROWSER_SESSION_USER_AGENT", str),
    "session.headers": ("NOBROWSER_SESSION_HEADERS", dict[str, str]),
    "session.cookies": ("NOBROWSER_SESSION_COOKIES", dict[str, str]),
    "session.cookie_store": ("NOBROWSER_SESSION_COOKIE_STORE", bool),
}


def load_env_config() -> dict[str, Any]:
    """Load configuration from predefined environment variables.

    Returns:
        Nested dictionary of configuration values
    """
    result: dict[str, Any] = {"session": {}}

    for key, (env_var, target_type) in ENV_MAPPINGS.items():
        value = os.environ.get(env_var)
        if value is not None:
            section, option = key.split(".", 1)
            result[section][option] = parse_value(value, target_type)

    return result
